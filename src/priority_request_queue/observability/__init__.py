# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Observability for the priority request queue.

- QueueMetrics: per-queue lifecycle counters
- PrometheusQueueMetrics: optional Prometheus export (requires the
  'prometheus' extra)
"""

from .metrics import (
    PROMETHEUS_AVAILABLE,
    QUEUE_EVENTS,
    PrometheusQueueMetrics,
    QueueMetrics,
    get_prometheus_queue_metrics,
    reset_prometheus_queue_metrics,
)

__all__ = [
    "PROMETHEUS_AVAILABLE",
    "QUEUE_EVENTS",
    "PrometheusQueueMetrics",
    "QueueMetrics",
    "get_prometheus_queue_metrics",
    "reset_prometheus_queue_metrics",
]
