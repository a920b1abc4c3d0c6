"""
Tests for priority, status and method enumerations.
"""

import pytest

from priority_request_queue.types.priority import (
    IDEMPOTENT_METHODS,
    HttpMethod,
    RequestPriority,
    RequestStatus,
)


class TestRequestPriority:
    def test_total_order(self):
        """HIGHEST is strictly greatest."""
        assert (
            RequestPriority.LOW
            < RequestPriority.MEDIUM
            < RequestPriority.HIGH
            < RequestPriority.HIGHEST
        )

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("high", RequestPriority.HIGH),
            ("HIGHEST", RequestPriority.HIGHEST),
            (" Low ", RequestPriority.LOW),
            (1, RequestPriority.MEDIUM),
            (RequestPriority.HIGH, RequestPriority.HIGH),
        ],
    )
    def test_parse(self, value, expected):
        assert RequestPriority.parse(value) is expected

    def test_parse_unknown_name(self):
        with pytest.raises(ValueError, match="Unknown priority 'urgent'"):
            RequestPriority.parse("urgent")

    def test_parse_out_of_range(self):
        with pytest.raises(ValueError):
            RequestPriority.parse(7)


class TestRequestStatus:
    def test_enum_values(self):
        assert RequestStatus.PENDING.value == "pending"
        assert RequestStatus.SENDING.value == "sending"
        assert RequestStatus.FAILED.value == "failed"
        assert RequestStatus.DONE.value == "done"

    def test_terminal_states(self):
        assert RequestStatus.DONE.is_terminal
        assert RequestStatus.FAILED.is_terminal
        assert not RequestStatus.PENDING.is_terminal
        assert not RequestStatus.SENDING.is_terminal


class TestHttpMethod:
    def test_idempotent_methods(self):
        assert IDEMPOTENT_METHODS == {HttpMethod.GET, HttpMethod.HEAD, HttpMethod.OPTIONS}
        assert HttpMethod.GET.idempotent
        for method in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH, HttpMethod.DELETE):
            assert not method.idempotent

    def test_parse_case_insensitive(self):
        assert HttpMethod.parse("patch") is HttpMethod.PATCH
        assert HttpMethod.parse(HttpMethod.HEAD) is HttpMethod.HEAD

    def test_parse_unknown(self):
        with pytest.raises(ValueError):
            HttpMethod.parse("TRACE")
