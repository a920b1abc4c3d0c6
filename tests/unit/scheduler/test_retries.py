"""
Unit tests for retry handling in RequestQueue.

Retryable failures (network failures and HTTP status failures) are resent
until the retry budget is spent; everything else fails the request on the
first occurrence.
"""

import logging

import pytest

from priority_request_queue import (
    HttpStatusFailure,
    NetworkFailure,
    PayloadDecodingFailure,
    RequestQueue,
    RequestStatus,
)


async def fail_until_settled(transport, settle, future, url, status_code=500):
    """Fail every attempt of ``url`` until its future settles."""
    rounds = 0
    while not future.done():
        transport.complete(url, status_code=status_code)
        await settle()
        rounds += 1
        assert rounds < 50, "request never settled"


class TestRetryBudget:
    """Tests for retry budget exhaustion."""

    @pytest.mark.asyncio
    async def test_default_budget_allows_three_attempts(self, transport, settle):
        """retries=3 dispatches an always-failing request exactly three times."""
        queue = RequestQueue(transport=transport, retries=3)
        future = queue.get("/flaky")
        await settle()
        request = queue.requests[0]

        await fail_until_settled(transport, settle, future, "/flaky")

        assert transport.dispatched_urls == ["/flaky"] * 3
        assert request.send_attempts == 3
        assert request.status is RequestStatus.FAILED
        with pytest.raises(HttpStatusFailure) as exc_info:
            future.result()
        assert exc_info.value.status_code == 500
        assert len(queue) == 0

    @pytest.mark.asyncio
    async def test_per_request_override(self, transport, settle):
        """max_retries takes precedence over the queue default."""
        queue = RequestQueue(transport=transport, retries=5)
        future = queue.get("/once", max_retries=1)
        await settle()

        await fail_until_settled(transport, settle, future, "/once", status_code=404)

        assert transport.dispatched_urls == ["/once"]
        assert isinstance(future.exception(), HttpStatusFailure)

    @pytest.mark.asyncio
    async def test_zero_budget_still_makes_first_attempt(self, transport, settle):
        """A budget of 0 sends once and fails on the first failure."""
        queue = RequestQueue(transport=transport, retries=0)
        future = queue.get("/no-retry")
        await settle()

        await fail_until_settled(transport, settle, future, "/no-retry")

        assert transport.dispatched_urls == ["/no-retry"]

    @pytest.mark.asyncio
    async def test_retry_then_success(self, transport, settle):
        """A network failure is retried and the caller only sees the success."""
        queue = RequestQueue(transport=transport)
        future = queue.get("/recovering")
        await settle()

        transport.fail("/recovering", NetworkFailure("connection reset", url="/recovering"))
        await settle()
        assert not future.done()

        transport.complete("/recovering", content=b"ok")
        await settle()

        assert future.result() == "ok"
        assert queue.metrics.retried == 1
        assert queue.metrics.failed == 0

    @pytest.mark.asyncio
    async def test_status_zero_is_network_failure(self, transport, settle):
        """A response without status counts as a network failure."""
        queue = RequestQueue(transport=transport, retries=2)
        future = queue.get("/silent")
        await settle()

        await fail_until_settled(transport, settle, future, "/silent", status_code=0)

        assert isinstance(future.exception(), NetworkFailure)
        assert transport.dispatched_urls == ["/silent"] * 2

    @pytest.mark.asyncio
    async def test_retry_keeps_queue_position(self, transport, settle):
        """A retried request is resent before later equal-priority requests."""
        queue = RequestQueue(transport=transport, concurrency=1)
        queue.get("/first")
        queue.get("/second")
        await settle()

        transport.complete("/first", status_code=503)
        await settle()

        assert transport.dispatched_urls == ["/first", "/first"]
        await queue.aclose()


class TestNonRetryableFailures:
    """Tests for failures that end the request immediately."""

    @pytest.mark.asyncio
    async def test_malformed_json_not_retried(self, transport, settle):
        """PayloadDecodingFailure fails on the first attempt."""
        queue = RequestQueue(transport=transport, retries=3)
        future = queue.get("/broken", response_type="json")
        await settle()

        transport.complete("/broken", content=b"{not json")
        await settle()

        assert isinstance(future.exception(), PayloadDecodingFailure)
        assert transport.dispatched_urls == ["/broken"]
        assert queue.metrics.failed == 1

    @pytest.mark.asyncio
    async def test_unexpected_exception_not_retried(self, transport, settle):
        """Exceptions outside the library hierarchy fail immediately."""
        queue = RequestQueue(transport=transport, retries=3)
        future = queue.get("/bug")
        await settle()

        transport.fail("/bug", RuntimeError("transport bug"))
        await settle()

        with pytest.raises(RuntimeError, match="transport bug"):
            future.result()
        assert transport.dispatched_urls == ["/bug"]


class TestRetryLogging:
    """Tests for retry diagnostics."""

    @pytest.mark.asyncio
    async def test_retries_and_final_failure_logged_as_warning(
        self, transport, settle, caplog
    ):
        """Each retry and the final failure produce a WARNING record."""
        caplog.set_level(logging.WARNING, logger="priority_request_queue")
        queue = RequestQueue(transport=transport, retries=2)
        future = queue.get("/flaky")
        await settle()

        await fail_until_settled(transport, settle, future, "/flaky", status_code=502)

        messages = [r.getMessage() for r in caplog.records if r.levelno == logging.WARNING]
        assert any(m.startswith("Retried GET /flaky") for m in messages)
        assert any(m.startswith("Failed GET /flaky after 2 attempts") for m in messages)
        future.exception()
