"""
Shared fixtures for benchmark tests.
"""

import asyncio

import pytest

from priority_request_queue.transports.base import BaseTransport
from priority_request_queue.types.response import TransportResponse


class InstantTransport(BaseTransport):
    """Transport answering every attempt immediately, for overhead only."""

    def __init__(self, delay: float = 0.0):
        super().__init__()
        self.delay = delay
        self.attempts = 0

    async def _perform(self, handle, body, headers, on_progress):
        self.attempts += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        return TransportResponse(status_code=200, content=b'{"ok": true}')


@pytest.fixture
def instant_transport():
    """Transport with no latency."""
    return InstantTransport()


@pytest.fixture
def slow_transport():
    """Transport with 1ms simulated latency per attempt."""
    return InstantTransport(delay=0.001)
