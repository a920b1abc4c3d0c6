# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the priority request queue library.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from RequestQueueError, making it easy to catch
all queue-related exceptions with a single except clause.

Each exception class carries a ``retryable`` flag. The queue consults it
when an attempt fails: retryable failures consume the request's retry
budget and are resent, everything else fails the request immediately.
"""


class RequestQueueError(Exception):
    """Base exception for all request queue errors.

    This is the root exception class for the priority request queue library.
    Catch this exception to handle any error originating from the library.

    Example:
        try:
            payload = await queue.get(url, response_type="json")
        except RequestQueueError as e:
            logger.error(f"Request failed: {e}")
    """

    retryable: bool = False


class ConfigurationError(RequestQueueError, ValueError):
    """Raised when queue configuration is invalid.

    Common causes include:
    - A negative retry budget
    - A concurrency ceiling below 1
    - Unknown configuration overrides passed to the queue constructor

    Example:
        try:
            queue = RequestQueue(concurrency=0)
        except ConfigurationError as e:
            logger.error(f"Invalid configuration: {e}")
            raise SystemExit(1)
    """

    pass


class ConstructionError(RequestQueueError):
    """Raised when no usable transport mechanism is available.

    The queue resolves its transport lazily on the first dispatch. When no
    transport was injected and the optional ``http`` extra is not installed,
    or when the transport has already been closed, the attempt cannot even
    be constructed and the request fails with this error.
    """

    pass


class InvalidOptionError(RequestQueueError, ValueError):
    """Raised when a request is submitted with an unrecognized option.

    This is raised synchronously from ``RequestQueue.request()`` before the
    request is queued, so no network attempt is ever made for it.

    Attributes:
        option: Name of the offending option, if known.
    """

    def __init__(self, message: str, option: str | None = None):
        super().__init__(message)
        self.option = option


class NetworkFailure(RequestQueueError):
    """Raised when an attempt produced no HTTP status at all.

    Covers connection errors, DNS failures, timeouts and responses that
    arrive without a status. Network failures are retryable.

    Attributes:
        reason: Human readable description of the underlying failure.
        url: Target URL of the failed attempt.
    """

    retryable = True

    def __init__(self, reason: str, url: str | None = None):
        super().__init__(f"Network failure for {url}: {reason}" if url else reason)
        self.reason = reason
        self.url = url


class HttpStatusFailure(RequestQueueError):
    """Raised when an attempt completed with a non-success status code.

    Statuses 200, 201 and 204 are success; every other non-zero status ends
    up here. HTTP status failures are retryable.

    Attributes:
        status_code: The status code reported by the transport.
        url: Target URL of the failed attempt.

    Example:
        try:
            await queue.get(url)
        except HttpStatusFailure as e:
            if e.status_code == 404:
                return None
            raise
    """

    retryable = True

    def __init__(self, status_code: int, url: str | None = None):
        super().__init__(f"HTTP {status_code} for {url}" if url else f"HTTP {status_code}")
        self.status_code = status_code
        self.url = url


class PayloadDecodingFailure(RequestQueueError):
    """Raised when a successful response does not match its decoding mode.

    Resending would reproduce the same payload, so this failure is not
    retryable and fails the request immediately.

    Attributes:
        response_type: Value of the decoding mode that failed.
    """

    def __init__(self, message: str, response_type: str | None = None):
        super().__init__(message)
        self.response_type = response_type


class QueueInvariantViolation(RequestQueueError, RuntimeError):
    """Raised when an internal queue invariant is broken.

    This is a programming error rather than a normal rejection path:
    removing a request that is not queued, aborting a request that was
    never sent, or settling a request's future twice.
    """

    pass


class QueueClosedError(RequestQueueError):
    """Raised when the queue has been closed.

    Submissions after ``aclose()`` raise this error, and futures still
    outstanding when the queue closes are rejected with it.
    """

    pass


class TransportStateError(RequestQueueError, RuntimeError):
    """Raised by a transport asked to abort a handle with nothing in flight."""

    pass
