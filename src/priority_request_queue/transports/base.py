# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Abstract base class for transports.

BaseTransport implements the handle bookkeeping every transport needs
(open, in-flight tracking, abort state, close) and leaves the actual wire
call to subclasses through ``_perform``.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from typing_extensions import Self

from ..exceptions import ConstructionError, TransportStateError
from ..types.options import ProgressCallback
from ..types.response import TransportResponse

logger = logging.getLogger(__name__)


class HandleState(Enum):
    """Lifecycle of one attempt handle."""

    OPEN = "open"
    SENDING = "sending"
    FINISHED = "finished"
    ABORTED = "aborted"


@dataclass
class TransportHandle:
    """
    One attempt, from open() until it finishes or is aborted.

    A handle counts as in flight from the moment it is opened, so an
    attempt can be aborted even before its send coroutine starts.
    """

    method: str
    url: str
    with_credentials: bool = False
    state: HandleState = HandleState.OPEN

    @property
    def in_flight(self) -> bool:
        return self.state in (HandleState.OPEN, HandleState.SENDING)

    def begin(self) -> None:
        if self.state is not HandleState.OPEN:
            raise TransportStateError(
                f"Cannot send {self.method} {self.url}: handle is {self.state.value}"
            )
        self.state = HandleState.SENDING

    def finish(self) -> None:
        if self.state is HandleState.SENDING:
            self.state = HandleState.FINISHED

    def mark_aborted(self) -> None:
        if not self.in_flight:
            raise TransportStateError(
                f"Cannot abort {self.method} {self.url}: handle is {self.state.value}"
            )
        self.state = HandleState.ABORTED


class BaseTransport(ABC):
    """
    Base class for transports implementing TransportProtocol.

    Subclasses implement ``_perform`` to execute one attempt. They may
    override ``_on_abort`` to release resources held by an aborted attempt
    and ``aclose`` to release resources held by the transport itself.

    Example:
        async with MyTransport() as transport:
            queue = RequestQueue(transport=transport)
    """

    def __init__(self) -> None:
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    def open(
        self, method: str, url: str, with_credentials: bool = False
    ) -> TransportHandle:
        """
        Open a handle for one attempt.

        Raises:
            ConstructionError: If the transport has been closed
        """
        if self._closed:
            raise ConstructionError(f"{self.__class__.__name__} is closed")
        return TransportHandle(method=method, url=url, with_credentials=with_credentials)

    async def send(
        self,
        handle: TransportHandle,
        body: Any,
        headers: Mapping[str, str],
        on_progress: ProgressCallback | None = None,
    ) -> TransportResponse:
        """
        Perform the attempt behind ``handle``.

        Raises:
            NetworkFailure: If no status could be obtained
            TransportStateError: If the handle was already sent or aborted
        """
        handle.begin()
        try:
            return await self._perform(handle, body, headers, on_progress)
        finally:
            handle.finish()

    def abort(self, handle: TransportHandle) -> None:
        """
        Mark the attempt behind ``handle`` as aborted.

        Raises:
            TransportStateError: If the handle has no attempt in flight
        """
        handle.mark_aborted()
        logger.debug(f"Aborted {handle.method} {handle.url}")
        self._on_abort(handle)

    @abstractmethod
    async def _perform(
        self,
        handle: TransportHandle,
        body: Any,
        headers: Mapping[str, str],
        on_progress: ProgressCallback | None,
    ) -> TransportResponse:
        """Execute the wire call for ``handle``."""
        ...

    def _on_abort(self, handle: TransportHandle) -> None:  # noqa: B027
        """Hook for transport-specific abort handling."""
        pass

    async def aclose(self) -> None:
        """Close the transport. Later open() calls raise ConstructionError."""
        self._closed = True

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: Any,
    ) -> None:
        await self.aclose()


__all__ = [
    "BaseTransport",
    "HandleState",
    "TransportHandle",
]
