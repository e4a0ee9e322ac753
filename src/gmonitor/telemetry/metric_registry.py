"""Self-instrumentation for the batching layer.

Module-level constants on a dedicated CollectorRegistry so applications can
expose gmonitor's own health next to their metrics without picking up
python_gc_*, process_*, etc.
"""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram

PREFIX = "gmonitor_"

GMONITOR_REGISTRY = CollectorRegistry()

# --- Batching ---
BATCH_BUFFER_SIZE = Gauge(
    f"{PREFIX}batch_buffer_size",
    "Distinct group keys currently pending in a metric's batch buffer",
    labelnames=["metric_type"],
    registry=GMONITOR_REGISTRY,
)

BATCH_FLUSHES_TOTAL = Counter(
    f"{PREFIX}batch_flushes_total",
    "Total time series batches sent",
    labelnames=["metric_type", "status"],
    registry=GMONITOR_REGISTRY,
)

POINTS_SENT_TOTAL = Counter(
    f"{PREFIX}points_sent_total",
    "Total points written to the Monitoring API",
    labelnames=["metric_type"],
    registry=GMONITOR_REGISTRY,
)

ABANDONED_POINTS_TOTAL = Counter(
    f"{PREFIX}abandoned_points_total",
    "Points dropped because their flush timer was cleared",
    labelnames=["metric_type"],
    registry=GMONITOR_REGISTRY,
)

FLUSH_DURATION_SECONDS = Histogram(
    f"{PREFIX}flush_duration_seconds",
    "Latency of timeSeries.create requests in seconds",
    labelnames=["metric_type"],
    buckets=[0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
    registry=GMONITOR_REGISTRY,
)
