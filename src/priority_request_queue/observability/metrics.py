# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Queue metrics for the Priority Request Queue.

This module provides:
1. QueueMetrics - Dataclass counting request lifecycle events per queue
2. PrometheusQueueMetrics - Optional Prometheus counters for the same events

The QueueMetrics class provides observability into:
- Submissions, dispatches and terminal outcomes
- Retries consumed from request budgets
- Preemptions of in-flight requests and the attempts they superseded

Usage:
    metrics = QueueMetrics()

    # Record a dispatch of an attempt
    metrics.record_dispatch()

    # Record a preemption
    metrics.record_preemption()

    # Get stats for JSON serialization
    stats = metrics.get_stats()
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

logger = logging.getLogger(__name__)

# Lifecycle events mirrored to Prometheus, each labelled by priority
QUEUE_EVENTS = (
    "submitted",
    "dispatched",
    "completed",
    "failed",
    "retried",
    "preempted",
    "superseded",
)

# Type declarations for optional prometheus_client imports
if TYPE_CHECKING:
    from prometheus_client import Counter as CounterType
else:
    CounterType = object

# Try to import prometheus_client for optional Prometheus metrics
try:
    from prometheus_client import Counter as _Counter

    Counter: type[CounterType] | None = _Counter
    PROMETHEUS_AVAILABLE = True
except ImportError:
    Counter = None
    PROMETHEUS_AVAILABLE = False


@dataclass
class QueueMetrics:
    """
    Lifecycle counters for one RequestQueue.

    Each queue owns its own instance, so counters never mix between queues.
    All updates happen on the queue's event loop.

    Example:
        >>> metrics = QueueMetrics()
        >>> metrics.record_submission()
        >>> metrics.record_dispatch()
        >>> metrics.record_completion()
        >>> metrics.get_success_rate()
        1.0
    """

    submitted: int = 0
    dispatched: int = 0
    completed: int = 0
    failed: int = 0
    retried: int = 0
    preempted: int = 0
    superseded: int = 0

    def record_submission(self) -> None:
        self.submitted += 1

    def record_dispatch(self) -> None:
        self.dispatched += 1

    def record_completion(self) -> None:
        self.completed += 1

    def record_failure(self) -> None:
        self.failed += 1

    def record_retry(self) -> None:
        self.retried += 1

    def record_preemption(self) -> None:
        self.preempted += 1

    def record_superseded(self) -> None:
        """Record an attempt completion discarded because it was preempted."""
        self.superseded += 1

    def get_success_rate(self) -> float:
        """
        Fraction of settled requests that succeeded.

        Returns 1.0 when nothing has settled yet (optimistic default).
        """
        settled = self.completed + self.failed
        return self.completed / settled if settled > 0 else 1.0

    def get_stats(self) -> dict[str, Any]:
        """
        Return metrics as a dictionary for JSON serialization.

        Returns:
            Dictionary with every counter plus the derived success rate.
        """
        return {
            "submitted": self.submitted,
            "dispatched": self.dispatched,
            "completed": self.completed,
            "failed": self.failed,
            "retried": self.retried,
            "preempted": self.preempted,
            "superseded": self.superseded,
            "success_rate": self.get_success_rate(),
        }

    def reset(self) -> None:
        """Reset all counters to zero."""
        self.submitted = 0
        self.dispatched = 0
        self.completed = 0
        self.failed = 0
        self.retried = 0
        self.preempted = 0
        self.superseded = 0


class PrometheusQueueMetrics:
    """
    Optional Prometheus counters for queue observability.

    Only instantiated if prometheus_client is available.

    Metrics (all labelled by ``priority``):
        - priority_request_queue_submitted_total
        - priority_request_queue_dispatched_total
        - priority_request_queue_completed_total
        - priority_request_queue_failed_total
        - priority_request_queue_retried_total
        - priority_request_queue_preempted_total
        - priority_request_queue_superseded_total

    Usage:
        >>> if PROMETHEUS_AVAILABLE:
        ...     prom_metrics = PrometheusQueueMetrics()
        ...     prom_metrics.observe("dispatched", "HIGH")
    """

    def __init__(self, registry: Any | None = None) -> None:
        """
        Initialize Prometheus queue metrics.

        Args:
            registry: Optional CollectorRegistry. If None, uses the default registry.

        Raises:
            ImportError: If prometheus_client is not available.
        """
        if not PROMETHEUS_AVAILABLE or Counter is None:
            raise ImportError(
                "prometheus_client is not available. "
                "Install with: pip install priority-request-queue[prometheus]"
            )

        self.counters = {
            event: Counter(
                f"priority_request_queue_{event}_total",
                f"Requests {event} by the priority request queue",
                ["priority"],
                registry=registry,
            )
            for event in QUEUE_EVENTS
        }

        logger.info("Prometheus queue metrics initialized")

    def observe(self, event: str, priority: str) -> None:
        """
        Increment the counter for ``event``.

        Args:
            event: One of QUEUE_EVENTS
            priority: Priority name of the request involved
        """
        self.counters[event].labels(priority=priority).inc()


# Module-level singleton for Prometheus metrics (optional)
_prometheus_queue_metrics: PrometheusQueueMetrics | None = None
_prometheus_lock = threading.Lock()


def get_prometheus_queue_metrics() -> PrometheusQueueMetrics | None:
    """
    Get or create the Prometheus queue metrics singleton.

    Uses double-checked locking so concurrent first calls cannot register
    the same collectors twice.

    Returns:
        PrometheusQueueMetrics instance if prometheus_client is available,
        None otherwise.
    """
    global _prometheus_queue_metrics

    if not PROMETHEUS_AVAILABLE:
        return None

    if _prometheus_queue_metrics is None:
        with _prometheus_lock:
            if _prometheus_queue_metrics is None:
                try:
                    _prometheus_queue_metrics = PrometheusQueueMetrics()
                except ValueError as e:
                    logger.warning(f"Failed to initialize Prometheus queue metrics: {e}")
                    return None

    return _prometheus_queue_metrics


def reset_prometheus_queue_metrics() -> None:
    """Reset the Prometheus queue metrics singleton (mainly for testing)."""
    global _prometheus_queue_metrics
    _prometheus_queue_metrics = None


__all__ = [
    "PROMETHEUS_AVAILABLE",
    "QUEUE_EVENTS",
    "PrometheusQueueMetrics",
    "QueueMetrics",
    "get_prometheus_queue_metrics",
    "reset_prometheus_queue_metrics",
]
