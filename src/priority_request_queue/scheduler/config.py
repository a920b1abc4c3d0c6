# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Queue Configuration for Priority Request Queue

This module provides the configuration class for the request queue,
covering the retry budget, the concurrency ceiling and observability.
"""

from dataclasses import dataclass

from ..exceptions import ConfigurationError

DEFAULT_RETRIES = 3
DEFAULT_CONCURRENCY = 6


@dataclass
class QueueConfig:
    """
    Configuration for a RequestQueue.

    Every queue instance holds its own config; nothing here is shared
    between instances.
    """

    # === Core Scheduling Configuration ===

    retries: int = DEFAULT_RETRIES
    """Default retry budget for requests without a max_retries override."""

    concurrency: int = DEFAULT_CONCURRENCY
    """Size of the concurrency window, the most requests sending at once."""

    coalesce_updates: bool = True
    """Merge update triggers raised in the same event loop turn into one pass.

    When False, every enqueue, dequeue and requeue runs the update pass
    synchronously. Both settings schedule the same requests.
    """

    # === Metrics and Monitoring ===

    metrics_enabled: bool = True
    """Record per-queue counters in QueueMetrics."""

    prometheus_enabled: bool = False
    """Also export counters through prometheus_client, when installed."""

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if isinstance(self.retries, bool) or not isinstance(self.retries, int):
            raise ConfigurationError("retries must be an integer")
        if self.retries < 0:
            raise ConfigurationError("retries must be at least 0")
        if isinstance(self.concurrency, bool) or not isinstance(self.concurrency, int):
            raise ConfigurationError("concurrency must be an integer")
        if self.concurrency < 1:
            raise ConfigurationError("concurrency must be at least 1")


__all__ = [
    "DEFAULT_CONCURRENCY",
    "DEFAULT_RETRIES",
    "QueueConfig",
]
