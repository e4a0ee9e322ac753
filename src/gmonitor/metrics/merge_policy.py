from __future__ import annotations

from datetime import datetime
from typing import Any

from gmonitor.models import DataPoint, MetricKind, TimeInterval

Labels = dict[str, str]


class MergePolicy:
    """How a metric kind merges colliding points and reads ``report`` arguments.

    One instance belongs to exactly one Metric, so policies may keep per-metric
    state (see ``CumulativePolicy``).
    """

    metric_kind: MetricKind

    def merge(self, old: DataPoint, new: DataPoint) -> DataPoint:
        raise NotImplementedError

    def normalize(self, *args: Any, **kwargs: Any) -> tuple[TimeInterval, Labels | None]:
        raise NotImplementedError

    def on_create(self, now: datetime) -> None:
        """Called once the metric descriptor has been registered."""
