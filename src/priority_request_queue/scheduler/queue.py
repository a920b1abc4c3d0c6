# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Priority request queue implementation.

RequestQueue keeps every outstanding request in a single list ordered by
descending priority (FIFO among equals). The first ``concurrency`` slots of
that list form the concurrency window: pending requests inside it are
dispatched, and idempotent, non-HIGHEST requests pushed out of it while
sending are aborted and requeued so higher-priority work can take their
slot.

All state is mutated on the event loop that runs the queue; transports
only report back through attempt completion callbacks.
"""

import asyncio
import bisect
import dataclasses
import functools
import logging
from collections import Counter
from collections.abc import Callable, Mapping
from typing import Any

from typing_extensions import Self

from ..exceptions import (
    ConfigurationError,
    ConstructionError,
    QueueClosedError,
    QueueInvariantViolation,
    RequestQueueError,
)
from ..observability.metrics import QueueMetrics, get_prometheus_queue_metrics
from ..protocols.transport import TransportProtocol
from ..types.options import RequestOptions
from ..types.priority import HttpMethod, RequestPriority, RequestStatus
from .config import DEFAULT_CONCURRENCY, DEFAULT_RETRIES, QueueConfig
from .request import Request

logger = logging.getLogger(__name__)

_RECORDERS: dict[str, Callable[[QueueMetrics], None]] = {
    "submitted": QueueMetrics.record_submission,
    "dispatched": QueueMetrics.record_dispatch,
    "completed": QueueMetrics.record_completion,
    "failed": QueueMetrics.record_failure,
    "retried": QueueMetrics.record_retry,
    "preempted": QueueMetrics.record_preemption,
    "superseded": QueueMetrics.record_superseded,
}


class RequestQueue:
    """
    Client-side request scheduler with priorities, a concurrency window,
    retries and preemption.

    Every submission returns an ``asyncio.Future`` immediately. The future
    resolves with the decoded response, or rejects with the last failure
    once the request's retry budget is spent. Retries and preemptions are
    invisible to the caller.

    Example:
        >>> async with RequestQueue(concurrency=3) as queue:
        ...     low = queue.get(url_a, priority=RequestPriority.LOW)
        ...     urgent = queue.get(url_b, priority="highest", response_type="json")
        ...     data = await urgent
    """

    def __init__(
        self,
        transport: TransportProtocol | None = None,
        config: QueueConfig | None = None,
        metrics: QueueMetrics | None = None,
        **config_overrides: Any,
    ) -> None:
        """
        Initialize the queue.

        Args:
            transport: Transport performing attempts. When None, an
                HttpxTransport is created on first dispatch and closed with
                the queue.
            config: Queue configuration (defaults to QueueConfig())
            metrics: Counters to record into (defaults to a fresh instance)
            **config_overrides: Individual QueueConfig fields, e.g.
                ``retries=5`` or ``concurrency=2``

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        if config is None:
            config = QueueConfig()
        if config_overrides:
            try:
                config = dataclasses.replace(config, **config_overrides)
            except TypeError as e:
                raise ConfigurationError(f"Unknown queue option: {e}") from e

        self.config = config
        self.metrics = metrics if metrics is not None else QueueMetrics()
        self._prometheus = (
            get_prometheus_queue_metrics() if config.prometheus_enabled else None
        )

        self._transport = transport
        self._owns_transport = transport is None
        self._queue: list[Request] = []
        self._update_handle: asyncio.Handle | None = None
        self._updating = False
        self._update_requested = False
        self._closed = False

        logger.info(
            f"Initialized {self.__class__.__name__} with retries={config.retries}, "
            f"concurrency={config.concurrency}"
        )

    # Public interface methods
    @property
    def retries(self) -> int:
        return self.config.retries

    @property
    def concurrency(self) -> int:
        return self.config.concurrency

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def requests(self) -> tuple[Request, ...]:
        """Snapshot of the queued requests in dispatch order."""
        return tuple(self._queue)

    @property
    def in_flight(self) -> int:
        """Number of requests currently SENDING."""
        return sum(1 for r in self._queue if r.status is RequestStatus.SENDING)

    def __len__(self) -> int:
        return len(self._queue)

    def get(self, url: str, options: Any = None, **kwargs: Any) -> "asyncio.Future[Any]":
        return self.request(HttpMethod.GET, url, options, **kwargs)

    def head(self, url: str, options: Any = None, **kwargs: Any) -> "asyncio.Future[Any]":
        return self.request(HttpMethod.HEAD, url, options, **kwargs)

    def options(
        self, url: str, options: Any = None, **kwargs: Any
    ) -> "asyncio.Future[Any]":
        return self.request(HttpMethod.OPTIONS, url, options, **kwargs)

    def post(self, url: str, options: Any = None, **kwargs: Any) -> "asyncio.Future[Any]":
        return self.request(HttpMethod.POST, url, options, **kwargs)

    def put(self, url: str, options: Any = None, **kwargs: Any) -> "asyncio.Future[Any]":
        return self.request(HttpMethod.PUT, url, options, **kwargs)

    def patch(self, url: str, options: Any = None, **kwargs: Any) -> "asyncio.Future[Any]":
        return self.request(HttpMethod.PATCH, url, options, **kwargs)

    def delete(
        self, url: str, options: Any = None, **kwargs: Any
    ) -> "asyncio.Future[Any]":
        return self.request(HttpMethod.DELETE, url, options, **kwargs)

    def request(
        self,
        method: HttpMethod | str,
        url: str,
        options: RequestOptions | Mapping[str, Any] | None = None,
        **kwargs: Any,
    ) -> "asyncio.Future[Any]":
        """
        Submit a request.

        Never blocks: the request is queued and the returned future settles
        later. Must be called while an asyncio event loop is running.

        Args:
            method: HTTP method (case-insensitive)
            url: Target URL
            options: RequestOptions or a mapping of option names
            **kwargs: Individual options, e.g. ``priority="high"``

        Returns:
            Future resolving with the decoded response

        Raises:
            InvalidOptionError: If the method or an option is invalid
            QueueClosedError: If the queue has been closed
        """
        if self._closed:
            raise QueueClosedError("Cannot submit requests to a closed queue")

        request = Request(method, url, RequestOptions.build(options, **kwargs))
        self._enqueue(request)
        self._observe("submitted", request)
        logger.debug(f"Enqueued {request!r} at depth {len(self._queue)}")
        self._schedule_update()
        return request.future

    def update(self) -> None:
        """
        Reconcile the queue: dispatch, then preempt.

        First every pending request inside the concurrency window is sent,
        then every preemptible request sending outside the window is
        aborted and returned to PENDING. Safe to call at any time; a call
        made while a pass is running folds into that pass.
        """
        if self._updating:
            self._update_requested = True
            return

        self._updating = True
        self._update_requested = True
        try:
            while self._update_requested and not self._closed:
                self._update_requested = False
                self._dispatch_pending()
                self._preempt_overflowing()
        finally:
            self._updating = False

    def get_metrics(self) -> dict[str, Any]:
        """
        Get current queue state and counters.

        Returns:
            Dictionary of metrics suitable for JSON serialization
        """
        statuses = Counter(r.status for r in self._queue)
        metrics: dict[str, Any] = {
            "queue_type": self.__class__.__name__,
            "closed": self._closed,
            "retries": self.retries,
            "concurrency": self.concurrency,
            "depth": len(self._queue),
            "pending": statuses[RequestStatus.PENDING],
            "sending": statuses[RequestStatus.SENDING],
        }
        if self.config.metrics_enabled:
            metrics.update(self.metrics.get_stats())
        return metrics

    async def aclose(self) -> None:
        """
        Close the queue.

        Aborts every in-flight attempt, rejects every outstanding future
        with QueueClosedError and closes a transport the queue created.
        """
        if self._closed:
            return
        self._closed = True

        if self._update_handle is not None:
            self._update_handle.cancel()
            self._update_handle = None

        outstanding = list(self._queue)
        self._queue.clear()
        tasks = []
        for request in outstanding:
            if request.status is RequestStatus.SENDING:
                request.abort()
            if request.task is not None:
                tasks.append(request.task)
            request.reject(
                QueueClosedError(
                    f"Queue closed before {request.method.value} {request.url} completed"
                )
            )

        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if self._owns_transport and self._transport is not None:
            aclose = getattr(self._transport, "aclose", None)
            if aclose is not None:
                await aclose()

        logger.info(
            f"{self.__class__.__name__} closed, rejected {len(outstanding)} "
            f"outstanding requests"
        )

    async def __aenter__(self) -> Self:
        """
        Async context manager entry.

        Returns:
            Self: The queue instance
        """
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        """Close the queue even if an exception occurred."""
        await self.aclose()

    # Queue maintenance
    def _enqueue(self, request: Request) -> None:
        """
        Insert ``request`` after every entry of equal or higher priority.

        The list is kept in descending priority, so bisecting on the negated
        priority finds the position the front-to-back scan would.
        """
        index = bisect.bisect_right(
            self._queue, -request.priority, key=lambda r: -r.priority
        )
        self._queue.insert(index, request)

    def _dequeue(self, request: Request) -> None:
        """
        Remove a finished request from the queue.

        Raises:
            QueueInvariantViolation: If the request is not queued
        """
        for index, queued in enumerate(self._queue):
            if queued is request:
                del self._queue[index]
                return
        raise QueueInvariantViolation(f"Can't dequeue request not in queue: {request!r}")

    def _is_overflowing(self, index: int, request: Request) -> bool:
        return (
            index >= self.concurrency
            and request.status is RequestStatus.SENDING
            and request.priority is not RequestPriority.HIGHEST
            and request.idempotent
            and not (request.task is not None and request.task.done())
        )

    def _committed_slots(self) -> int:
        """Count sending requests that the preemption phase would keep."""
        return sum(
            1
            for index, request in enumerate(self._queue)
            if request.status is RequestStatus.SENDING
            and not self._is_overflowing(index, request)
        )

    def _get_next_pending_request(self) -> Request | None:
        """Get the first PENDING request inside the concurrency window."""
        if self._committed_slots() >= self.concurrency:
            return None
        for request in self._queue[: self.concurrency]:
            if request.status is RequestStatus.PENDING:
                return request
        return None

    def _get_next_overflowing_request(self) -> Request | None:
        """Get the first preemptible request sending outside the window."""
        for index in range(self.concurrency, len(self._queue)):
            request = self._queue[index]
            if self._is_overflowing(index, request):
                return request
        return None

    # Update pass phases
    def _dispatch_pending(self) -> None:
        while True:
            request = self._get_next_pending_request()
            if request is None:
                break
            self._send_request(request)

    def _preempt_overflowing(self) -> None:
        # Sending requests end up past the window when higher-priority work arrives
        while True:
            request = self._get_next_overflowing_request()
            if request is None:
                break
            request.abort()
            request.status = RequestStatus.PENDING
            self._observe("preempted", request)
            logger.debug(f"Preempted {request!r}")

    def _schedule_update(self) -> None:
        if self._closed:
            return
        if not self.config.coalesce_updates:
            self.update()
            return
        if self._update_handle is None:
            loop = asyncio.get_running_loop()
            self._update_handle = loop.call_soon(self._run_scheduled_update)

    def _run_scheduled_update(self) -> None:
        self._update_handle = None
        self.update()

    # Attempt execution
    def _resolve_transport(self) -> TransportProtocol:
        if self._transport is None:
            try:
                from ..transports.http import HttpxTransport
            except ImportError as e:
                raise ConstructionError(
                    "No transport available: pass transport=... or install "
                    "priority-request-queue[http]"
                ) from e
            self._transport = HttpxTransport()
            logger.info("Created default HttpxTransport")
        return self._transport

    def _send_request(self, request: Request) -> None:
        request.status = RequestStatus.SENDING
        try:
            task = request.send(self._resolve_transport())
        except Exception as e:
            # A request that never got a task would hold its slot forever
            logger.error(f"Cannot send {request!r}: {e!r}")
            self._fail(request, e)
            self._schedule_update()
            return

        self._observe("dispatched", request)
        logger.debug(f"Dispatched {request!r}")
        task.add_done_callback(
            functools.partial(self._on_attempt_done, request, request.send_attempts)
        )

    def _on_attempt_done(
        self, request: Request, attempt: int, task: "asyncio.Task[Any]"
    ) -> None:
        superseded = (
            task.cancelled()
            or request.status is not RequestStatus.SENDING
            or attempt != request.send_attempts
        )
        if superseded or self._closed:
            if not task.cancelled():
                # Mark the outcome as retrieved; it belongs to a discarded attempt
                task.exception()
            if not self._closed:
                self._observe("superseded", request)
                logger.debug(f"Discarded superseded attempt {attempt} of {request!r}")
            return

        error = task.exception()
        if error is None:
            self._dequeue(request)
            request.resolve(task.result())
            self._observe("completed", request)
            logger.debug(f"Completed {request!r}")
        elif isinstance(error, RequestQueueError) and error.retryable:
            request.failed_attempts += 1
            request.last_error = error
            budget = request.retry_budget(self.retries)
            if request.failed_attempts < budget:
                request.status = RequestStatus.PENDING
                self._observe("retried", request)
                logger.warning(
                    f"Retried {request.method.value} {request.url} "
                    f"({request.failed_attempts}/{budget} failures): {error}"
                )
            else:
                logger.warning(
                    f"Failed {request.method.value} {request.url} after "
                    f"{request.send_attempts} attempts: {error}"
                )
                self._fail(request, error)
        else:
            logger.warning(
                f"Failed {request.method.value} {request.url} without retry: {error!r}"
            )
            self._fail(request, error)

        self._schedule_update()

    def _fail(self, request: Request, error: BaseException) -> None:
        self._dequeue(request)
        request.reject(error)
        self._observe("failed", request)

    def _observe(self, event: str, request: Request) -> None:
        if self.config.metrics_enabled:
            _RECORDERS[event](self.metrics)
        if self._prometheus is not None:
            self._prometheus.observe(event, request.priority.name)

    def __repr__(self) -> str:
        return (
            f"<{self.__class__.__name__} depth={len(self._queue)} "
            f"in_flight={self.in_flight} concurrency={self.concurrency}>"
        )


# Factory function mirroring the constructor options of the queue
def create_queue(
    retries: int = DEFAULT_RETRIES,
    concurrency: int = DEFAULT_CONCURRENCY,
    transport: TransportProtocol | None = None,
    **kwargs: Any,
) -> RequestQueue:
    """
    Create a RequestQueue from its construction options.

    Args:
        retries: Default retry budget
        concurrency: Concurrency window size
        transport: Optional transport; an HttpxTransport is used when None
        **kwargs: Remaining QueueConfig fields

    Returns:
        Configured RequestQueue

    Raises:
        ConfigurationError: If an option is unknown or invalid
    """
    try:
        config = QueueConfig(retries=retries, concurrency=concurrency, **kwargs)
    except TypeError as e:
        raise ConfigurationError(f"Unknown queue option: {e}") from e
    return RequestQueue(transport=transport, config=config)


__all__ = ["RequestQueue", "create_queue"]
