# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Transport implementations performing individual attempts.

Available transports:
- BaseTransport: Abstract base class handling handle bookkeeping
- HttpxTransport: HTTP transport built on httpx (requires http extra)

Supporting types:
- TransportHandle: One attempt from open() to completion or abort
- HandleState: Lifecycle states of a TransportHandle

Note: HttpxTransport is lazily imported to avoid requiring the httpx
package when a custom transport is injected.
"""

from typing import TYPE_CHECKING, cast

from priority_request_queue.transports.base import (
    BaseTransport,
    HandleState,
    TransportHandle,
)

# Lazy imports for optional httpx transport
if TYPE_CHECKING:
    from priority_request_queue.transports.http import HttpxTransport

__all__ = [
    # Base classes
    "BaseTransport",
    "HandleState",
    # HTTP transport (lazy loaded)
    "HttpxTransport",
    "TransportHandle",
]


def __getattr__(name: str) -> type:
    """Lazy import for optional httpx transport."""
    if name == "HttpxTransport":
        try:
            from priority_request_queue.transports import http as http_module

            return cast(type, getattr(http_module, name))
        except ImportError as e:  # pragma: no cover
            raise ImportError(  # pragma: no cover
                f"'{name}' requires the 'http' extra. "
                "Install with: pip install priority-request-queue[http]"
            ) from e
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
