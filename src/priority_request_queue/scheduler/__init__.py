# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Scheduler for prioritized, concurrency-limited HTTP requests.

This module provides:
- QueueConfig: Configuration for queue behavior
- Request: A queued request and its attempt execution
- RequestQueue: The priority queue and its update pass
- create_queue: Factory building a queue from construction options
"""

from .config import DEFAULT_CONCURRENCY, DEFAULT_RETRIES, QueueConfig
from .queue import RequestQueue, create_queue
from .request import NO_RESPONSE_STATUS, SUCCESS_STATUS_CODES, Request, prepare_payload

__all__ = [
    # Config
    "DEFAULT_CONCURRENCY",
    "DEFAULT_RETRIES",
    "NO_RESPONSE_STATUS",
    "SUCCESS_STATUS_CODES",
    "QueueConfig",
    # Requests
    "Request",
    # Queue
    "RequestQueue",
    "create_queue",
    "prepare_payload",
]
