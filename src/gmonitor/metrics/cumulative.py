from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any

from gmonitor.metrics.merge_policy import Labels, MergePolicy
from gmonitor.models import DataPoint, MetricKind, TimeInterval, value_field


class CumulativePolicy(MergePolicy):
    """Running total since a tracked start time.

    The start time is the metric's creation time, replaced whenever a caller
    passes an explicit ``start_time``, and carried forward otherwise. A metric
    that was never created starts at its first report.

    ``report`` shapes: ``(value)``, ``(value, labels)``, ``(value, interval)``,
    ``(value, interval, labels)``; a bare ``datetime`` is taken as the end time.
    """

    metric_kind = MetricKind.CUMULATIVE

    def __init__(self) -> None:
        self._start_time: datetime | None = None

    @property
    def start_time(self) -> datetime | None:
        return self._start_time

    def on_create(self, now: datetime) -> None:
        self._start_time = now

    def merge(self, old: DataPoint, new: DataPoint) -> DataPoint:
        field = value_field(new.value_type)
        return new.model_copy(update={"value": {field: old.value[field] + new.value[field]}})

    def normalize(
        self,
        interval: TimeInterval | Mapping[str, Any] | datetime | None = None,
        labels: Labels | None = None,
        *,
        now: datetime,
    ) -> tuple[TimeInterval, Labels | None]:
        if labels is None and isinstance(interval, Mapping) and not TimeInterval.is_interval_like(interval):
            # (value, labels)
            labels, interval = dict(interval), None
        interval = TimeInterval.coerce(interval)
        if interval.start_time is not None:
            self._start_time = interval.start_time
            return interval, labels
        if self._start_time is None:
            self._start_time = interval.end_time or now
        return interval.model_copy(update={"start_time": self._start_time}), labels
