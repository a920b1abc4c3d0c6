# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Protocol definitions for request queue components.

This module provides Protocol classes that define the interfaces for
pluggable components in the priority request queue.

Available protocols:
- TransportProtocol: Interface for the component that performs one attempt

Supporting types:
- TransportResponse: Raw status, payload and headers of one attempt
"""

from ..types.response import TransportResponse
from .transport import TransportProtocol

__all__ = [
    "TransportProtocol",
    "TransportResponse",
]
