# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Type definitions and constants."""

from .options import ProgressCallback, RequestOptions
from .priority import IDEMPOTENT_METHODS, HttpMethod, RequestPriority, RequestStatus
from .response import (
    Blob,
    DecodedImage,
    ProgressEvent,
    ResponseType,
    TransportResponse,
)

__all__ = [
    "IDEMPOTENT_METHODS",
    # Decoded values
    "Blob",
    "DecodedImage",
    # Enumerations
    "HttpMethod",
    "ProgressCallback",
    "ProgressEvent",
    # Options
    "RequestOptions",
    "RequestPriority",
    "RequestStatus",
    "ResponseType",
    "TransportResponse",
]
