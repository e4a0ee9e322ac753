from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from gmonitor.metrics.merge_policy import Labels, MergePolicy
from gmonitor.models import DataPoint, MetricKind, TimeInterval


class GaugePolicy(MergePolicy):
    """Last value wins.

    ``report`` shapes: ``(value)``, ``(value, labels)``, ``(value, end_time, labels)``.
    """

    metric_kind = MetricKind.GAUGE

    def merge(self, old: DataPoint, new: DataPoint) -> DataPoint:
        return new

    def normalize(
        self,
        end_time: datetime | Mapping[str, Any] | None = None,
        labels: Labels | None = None,
        *,
        now: datetime,
    ) -> tuple[TimeInterval, Labels | None]:
        if labels is None and isinstance(end_time, Mapping) and not TimeInterval.is_interval_like(end_time):
            # (value, labels)
            labels, end_time = dict(end_time), None
        # Gauge points are instants: only the end of the interval is sent
        return TimeInterval(end_time=TimeInterval.coerce(end_time).end_time), labels
