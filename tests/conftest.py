"""
Shared fixtures for queue tests.

FakeTransport is a scripted in-memory transport: every attempt waits on an
outcome future until the test completes or fails it, so tests decide
exactly when and how each attempt finishes.
"""

import asyncio
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

import pytest

from priority_request_queue.exceptions import ConstructionError
from priority_request_queue.transports.base import BaseTransport, TransportHandle
from priority_request_queue.types.response import ProgressEvent, TransportResponse


@dataclass
class FakeHandle(TransportHandle):
    outcome: "asyncio.Future[TransportResponse] | None" = None
    body: Any = None
    headers: Mapping[str, str] | None = None


class FakeTransport(BaseTransport):
    """Transport whose attempts finish only when the test says so."""

    def __init__(self) -> None:
        super().__init__()
        self.handles: list[FakeHandle] = []
        self.aborted: list[FakeHandle] = []

    def open(self, method: str, url: str, with_credentials: bool = False) -> FakeHandle:
        if self.closed:
            raise ConstructionError("FakeTransport is closed")
        handle = FakeHandle(
            method=method,
            url=url,
            with_credentials=with_credentials,
            outcome=asyncio.get_running_loop().create_future(),
        )
        self.handles.append(handle)
        return handle

    async def _perform(self, handle, body, headers, on_progress):
        handle.body = body
        handle.headers = dict(headers)
        response = await handle.outcome
        if on_progress is not None:
            size = len(response.content)
            on_progress(ProgressEvent(loaded=size, total=size))
        return response

    def _on_abort(self, handle: TransportHandle) -> None:
        self.aborted.append(handle)

    # Test helpers
    @property
    def dispatched_urls(self) -> list[str]:
        """URLs in the order attempts were opened."""
        return [h.url for h in self.handles]

    @property
    def in_flight_urls(self) -> list[str]:
        return [h.url for h in self.handles if h.in_flight]

    def current(self, url: str) -> FakeHandle:
        """Latest in-flight handle for ``url``."""
        for handle in reversed(self.handles):
            if handle.url == url and handle.in_flight:
                return handle
        raise AssertionError(f"No attempt in flight for {url}")

    def complete(
        self,
        url: str,
        status_code: int = 200,
        content: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> None:
        self.current(url).outcome.set_result(
            TransportResponse(status_code=status_code, content=content, headers=headers)
        )

    def fail(self, url: str, error: BaseException) -> None:
        self.current(url).outcome.set_exception(error)


async def drain(rounds: int = 20) -> None:
    """Let pending callbacks, tasks and scheduled update passes run."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def transport():
    """Fresh scripted transport."""
    return FakeTransport()


@pytest.fixture
def settle():
    """Coroutine function running the event loop until the queue is quiet."""
    return drain


@pytest.fixture
def make_transport():
    """Factory for additional scripted transports within one test."""
    return FakeTransport
