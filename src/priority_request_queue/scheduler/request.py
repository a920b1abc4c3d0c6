# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Queued request and its single-attempt execution.

A Request is created for every submission and lives in exactly one
RequestQueue until it reaches DONE or FAILED. Its lifecycle:

    PENDING --dispatch--> SENDING
    SENDING --success--> DONE
    SENDING --preemption--> PENDING
    SENDING --retryable failure, budget left--> PENDING
    SENDING --failure, budget spent or not retryable--> FAILED

The queue drives the transitions; the request performs attempts and owns
the future handed back to the caller.
"""

import asyncio
import json
import logging
import uuid
from collections.abc import Mapping
from typing import Any

from ..decoding import decode_payload
from ..exceptions import (
    HttpStatusFailure,
    InvalidOptionError,
    NetworkFailure,
    QueueInvariantViolation,
    TransportStateError,
)
from ..protocols.transport import TransportProtocol
from ..types.options import RequestOptions
from ..types.priority import HttpMethod, RequestPriority, RequestStatus
from ..types.response import ResponseType

logger = logging.getLogger(__name__)

SUCCESS_STATUS_CODES = frozenset({200, 201, 204})
NO_RESPONSE_STATUS = 0


def _merge_headers(generated: dict[str, str], custom: Mapping[str, str]) -> dict[str, str]:
    """Overlay caller headers on generated ones, matching names case-insensitively."""
    overridden = {name.lower() for name in custom}
    merged = {k: v for k, v in generated.items() if k.lower() not in overridden}
    merged.update(custom)
    return merged


def prepare_payload(options: RequestOptions) -> tuple[Any, dict[str, str]]:
    """
    Encode the request body and assemble the outgoing headers.

    Mappings, lists and tuples are serialized to JSON. Strings, bytes and
    any other payload (multipart bodies, streams) are passed through.

    Returns:
        Tuple of (body, headers)

    Raises:
        InvalidOptionError: If a structured body cannot be serialized
    """
    generated: dict[str, str] = {}
    if options.response_type is ResponseType.JSON:
        generated["Accept"] = "application/json"

    body = options.body
    if isinstance(body, (Mapping, list, tuple)):
        try:
            body = json.dumps(body)
        except (TypeError, ValueError) as e:
            raise InvalidOptionError(
                f"Request body is not JSON serializable: {e}", option="body"
            ) from e
        generated["Content-Type"] = "application/json"

    if options.auth:
        token = options.auth.strip()
        generated["Authorization"] = token if " " in token else f"Bearer {token}"

    return body, _merge_headers(generated, options.headers)


class Request:
    """
    A unit of work in the queue.

    Attributes:
        id: Unique identifier for this request
        method: HTTP method
        url: Target URL
        options: Validated submission options
        status: Current lifecycle state
        send_attempts: Attempts issued so far, incremented on every dispatch
        failed_attempts: Attempts that ended in a retryable failure
        last_error: Most recent failure, if any
        future: Settled once with the decoded response or the final error
    """

    def __init__(self, method: HttpMethod | str, url: str, options: RequestOptions):
        try:
            self.method = HttpMethod.parse(method)
        except (AttributeError, ValueError):
            raise InvalidOptionError(
                f"Unsupported HTTP method {method!r}", option="method"
            ) from None
        if not isinstance(url, str) or not url:
            raise InvalidOptionError("url must be a non-empty string", option="url")

        self.id = uuid.uuid4().hex
        self.url = url
        self.options = options
        self.body, self.headers = prepare_payload(options)

        self.status = RequestStatus.PENDING
        self.send_attempts = 0
        self.failed_attempts = 0
        self.last_error: BaseException | None = None
        self.future: asyncio.Future[Any] = asyncio.get_running_loop().create_future()

        self._transport: TransportProtocol | None = None
        self._handle: Any = None
        self._task: asyncio.Task[Any] | None = None

    @property
    def priority(self) -> RequestPriority:
        return self.options.priority

    @property
    def response_type(self) -> ResponseType:
        return self.options.response_type

    @property
    def idempotent(self) -> bool:
        return self.method.idempotent

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def task(self) -> "asyncio.Task[Any] | None":
        """Task running the most recent attempt, if one was issued."""
        return self._task

    def retry_budget(self, default: int) -> int:
        """Per-request max_retries if set, otherwise the queue default."""
        if self.options.max_retries is not None:
            return self.options.max_retries
        return default

    def send(self, transport: TransportProtocol) -> "asyncio.Task[Any]":
        """
        Issue one attempt through ``transport``.

        The attempt counter is incremented as soon as the attempt is issued,
        before it completes.

        Returns:
            The task running the attempt. Its result is the decoded payload;
            it raises HttpStatusFailure, NetworkFailure or
            PayloadDecodingFailure when the attempt fails.

        Raises:
            ConstructionError: If the transport cannot open an attempt
        """
        handle = transport.open(self.method.value, self.url, self.options.with_credentials)
        self._transport = transport
        self._handle = handle
        self.send_attempts += 1
        self._task = asyncio.get_running_loop().create_task(
            self._attempt(transport, handle),
            name=f"request-{self.id}-attempt-{self.send_attempts}",
        )
        return self._task

    async def _attempt(self, transport: TransportProtocol, handle: Any) -> Any:
        response = await transport.send(
            handle, self.body, self.headers, self.options.on_progress
        )
        status_code = response.status_code
        if status_code in SUCCESS_STATUS_CODES:
            return decode_payload(self.response_type, response)
        if status_code == NO_RESPONSE_STATUS:
            raise NetworkFailure("No response received (status 0)", url=self.url)
        raise HttpStatusFailure(status_code, url=self.url)

    def abort(self) -> None:
        """
        Abort the in-flight attempt.

        The attempt's completion is left for the queue to discard; it never
        resolves, rejects or consumes retry budget.

        Raises:
            QueueInvariantViolation: If no attempt was ever sent
        """
        if self._handle is None or self._task is None or self._transport is None:
            raise QueueInvariantViolation("Cannot abort unsent request")
        if self._task.done():
            return
        try:
            self._transport.abort(self._handle)
        except TransportStateError as e:
            logger.debug(f"Transport had nothing in flight for {self!r}: {e}")
        self._task.cancel()

    def resolve(self, result: Any) -> None:
        """Transition to DONE and resolve the caller's future."""
        self._settle(RequestStatus.DONE)
        if not self.future.done():
            self.future.set_result(result)

    def reject(self, error: BaseException) -> None:
        """Transition to FAILED and reject the caller's future."""
        self.last_error = error
        self._settle(RequestStatus.FAILED)
        if not self.future.done():
            self.future.set_exception(error)

    def _settle(self, status: RequestStatus) -> None:
        if self.status.is_terminal:
            raise QueueInvariantViolation(
                f"Request {self.id} was already settled as {self.status.name}"
            )
        self.status = status
        if self.future.done():
            logger.debug(f"Future for {self!r} was cancelled by the caller")

    def __repr__(self) -> str:
        return (
            f"<Request {self.method.value} {self.url} priority={self.priority.name} "
            f"status={self.status.name} attempts={self.send_attempts}>"
        )


__all__ = [
    "NO_RESPONSE_STATUS",
    "SUCCESS_STATUS_CODES",
    "Request",
    "prepare_payload",
]
