# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Priority Request Queue - Prioritized, concurrency-limited HTTP requests.

This library schedules outgoing HTTP requests through a single priority
queue with a bounded concurrency window, transparent retries and
preemption of low-priority work when urgent requests arrive.

Key Features:
    - Four priority levels with FIFO ordering among equals
    - Concurrency ceiling enforced through a sliding window
    - Retry budgets per queue and per request
    - Preemption of idempotent requests pushed out of the window
    - Payload decoding to text, JSON, bytes, blobs or images
    - Pluggable transports with an httpx implementation included

Quick Start:
    >>> from priority_request_queue import RequestPriority, RequestQueue
    >>>
    >>> async with RequestQueue(concurrency=3) as queue:
    ...     background = queue.get(thumbnail_url, priority=RequestPriority.LOW)
    ...     profile = queue.get(
    ...         profile_url, priority="highest", response_type="json"
    ...     )
    ...     data = await profile

Main Exports:
    - RequestQueue, create_queue: Core scheduling components
    - QueueConfig: Configuration options
    - RequestOptions, RequestPriority, ResponseType: Submission options
    - TransportProtocol, BaseTransport: Transport interfaces
    - HttpxTransport: Default HTTP transport

Note: HttpxTransport requires the 'http' extra. Install with:
    pip install priority-request-queue[http]

Version: 1.0.0
"""

__version__ = "1.0.0"

from typing import TYPE_CHECKING

from .decoding import decode_payload
from .exceptions import (
    ConfigurationError,
    ConstructionError,
    HttpStatusFailure,
    InvalidOptionError,
    NetworkFailure,
    PayloadDecodingFailure,
    QueueClosedError,
    QueueInvariantViolation,
    RequestQueueError,
    TransportStateError,
)
from .observability import QueueMetrics
from .protocols import TransportProtocol
from .scheduler import QueueConfig, Request, RequestQueue, create_queue
from .transports import BaseTransport, HandleState, TransportHandle
from .types import (
    Blob,
    DecodedImage,
    HttpMethod,
    ProgressEvent,
    RequestOptions,
    RequestPriority,
    RequestStatus,
    ResponseType,
    TransportResponse,
)

# Lazy import for optional httpx transport
if TYPE_CHECKING:
    from .transports import HttpxTransport

__all__ = [
    # Transports
    "BaseTransport",
    # Types
    "Blob",
    # Exceptions
    "ConfigurationError",
    "ConstructionError",
    "DecodedImage",
    "HandleState",
    "HttpMethod",
    "HttpStatusFailure",
    "HttpxTransport",  # Lazy loaded - requires http extra
    "InvalidOptionError",
    "NetworkFailure",
    "PayloadDecodingFailure",
    "ProgressEvent",
    "QueueClosedError",
    # Scheduler
    "QueueConfig",
    "QueueInvariantViolation",
    # Observability
    "QueueMetrics",
    "Request",
    "RequestOptions",
    "RequestPriority",
    "RequestQueue",
    "RequestQueueError",
    "RequestStatus",
    "ResponseType",
    "TransportHandle",
    # Protocols
    "TransportProtocol",
    "TransportResponse",
    "TransportStateError",
    "create_queue",
    "decode_payload",
]


def __getattr__(name: str) -> type:
    """Lazy import for optional httpx transport."""
    if name == "HttpxTransport":
        from .transports import HttpxTransport

        return HttpxTransport
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
