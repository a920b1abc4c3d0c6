# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Priority, status and method enumerations.

This module defines the ordinal priority levels used to order the queue,
the lifecycle states a request moves through, and the HTTP methods the
queue accepts along with their idempotency.
"""

from enum import Enum, IntEnum


class RequestPriority(IntEnum):
    """
    Ordinal request priority. Higher values are dispatched first.

    In-flight HIGHEST requests are never preempted.
    """

    LOW = 0
    MEDIUM = 1
    HIGH = 2
    HIGHEST = 3

    @classmethod
    def parse(cls, value: "RequestPriority | int | str") -> "RequestPriority":
        """
        Coerce an enum member, its integer value, or its name.

        Names are matched case-insensitively, so ``"high"`` and ``"HIGH"``
        both map to ``RequestPriority.HIGH``.

        Raises:
            ValueError: If the value does not name a priority level
        """
        if isinstance(value, str):
            try:
                return cls[value.strip().upper()]
            except KeyError:
                raise ValueError(
                    f"Unknown priority {value!r}; expected one of "
                    f"{', '.join(member.name for member in cls)}"
                ) from None
        return cls(value)


class RequestStatus(Enum):
    """Lifecycle state of a queued request."""

    PENDING = "pending"
    SENDING = "sending"
    FAILED = "failed"
    DONE = "done"

    @property
    def is_terminal(self) -> bool:
        return self in (RequestStatus.FAILED, RequestStatus.DONE)


class HttpMethod(Enum):
    """HTTP methods accepted by the queue."""

    GET = "GET"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @property
    def idempotent(self) -> bool:
        """Whether an in-flight attempt may be aborted and resent safely."""
        return self in IDEMPOTENT_METHODS

    @classmethod
    def parse(cls, value: "HttpMethod | str") -> "HttpMethod":
        """Coerce a method name (case-insensitive) into an HttpMethod."""
        if isinstance(value, HttpMethod):
            return value
        return cls(value.strip().upper())


IDEMPOTENT_METHODS = frozenset({HttpMethod.GET, HttpMethod.HEAD, HttpMethod.OPTIONS})


__all__ = [
    "IDEMPOTENT_METHODS",
    "HttpMethod",
    "RequestPriority",
    "RequestStatus",
]
