"""A declared time series type and the throttled reporting engine behind it."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from loguru import logger

from gmonitor import settings
from gmonitor.exceptions import ValidationError
from gmonitor.metrics.batch_buffer import BatchBuffer, GroupByFn
from gmonitor.metrics.cumulative import CumulativePolicy
from gmonitor.metrics.gauge import GaugePolicy
from gmonitor.metrics.merge_policy import Labels, MergePolicy
from gmonitor.metrics.timer import IntervalTimer
from gmonitor.models import DataPoint, LabelDescriptor, MetricDescriptor, MetricKind, TimeInterval, ValueType, value_field
from gmonitor.telemetry.metric_registry import (
    ABANDONED_POINTS_TOTAL,
    BATCH_BUFFER_SIZE,
    BATCH_FLUSHES_TOTAL,
    FLUSH_DURATION_SECONDS,
    POINTS_SENT_TOTAL,
)

if TYPE_CHECKING:
    from gmonitor.monitor import Monitor


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_policy(metric_kind: MetricKind) -> MergePolicy:
    if metric_kind == MetricKind.GAUGE:
        return GaugePolicy()
    return CumulativePolicy()


class Metric:
    """One metric type registered with Cloud Monitoring.

    Without a throttle every ``report`` writes its point immediately. With a
    throttle, points are pushed into a ``BatchBuffer`` and written together when
    the flush timer fires; every report made while a timer is armed gets a
    shielded view of the same pending future, which settles with the result of
    that batch. Cancelling one caller's view leaves the others untouched.

    ``report`` is synchronous up to the point where it hands back a future, so
    pushing a point and arming the timer can't interleave with another report
    on the same event loop.
    """

    def __init__(
        self,
        monitor: Monitor,
        metric_kind: MetricKind | str,
        metric_type: str,
        policy: MergePolicy | None = None,
        *,
        metric_domain: str | None = None,
        value_type: ValueType | str | None = None,
        throttle: float | None = None,
        group_by: GroupByFn | None = None,
        description: str | None = None,
        display_name: str | None = None,
        labels: list[LabelDescriptor | dict[str, Any]] | None = None,
        unit: str | None = None,
    ):
        if monitor is None:
            raise ValidationError("monitor is required")
        if not metric_kind:
            raise ValidationError("metricKind is required")
        if not metric_type:
            raise ValidationError("metricType is required")
        try:
            self._metric_kind = MetricKind(metric_kind)
            self._value_type = ValueType(value_type or ValueType.INT64)
        except ValueError as e:
            raise ValidationError(str(e)) from e

        self._policy = policy or default_policy(self._metric_kind)
        if self._policy.metric_kind != self._metric_kind:
            raise ValidationError(
                f"{type(self._policy).__name__} cannot merge {self._metric_kind.value} points"
            )

        self._monitor = monitor
        self._metric_type = metric_type
        self._metric_domain = metric_domain or settings.METRIC_DOMAIN
        self._throttle = monitor.default_throttle if throttle is None else throttle
        self._metric_name = f"{self._metric_domain}/{metric_type}"
        self._resource_name = f"{monitor.project_name}/metricDescriptors/{self._metric_name}"

        try:
            self._descriptor = MetricDescriptor(
                name=self._resource_name,
                type=self._metric_name,
                metric_kind=self._metric_kind,
                value_type=self._value_type,
                description=description,
                display_name=display_name,
                labels=labels,
                unit=unit,
            )
        except ValueError as e:
            raise ValidationError(f"Invalid descriptor for {self._metric_name}: {e}") from e

        self._buffer = BatchBuffer(self._policy.merge, group_by)
        self._pending: asyncio.Future | None = None
        self._timer: IntervalTimer | None = None
        self._tasks: set[asyncio.Task] = set()

        monitor.register(self)

    def __repr__(self) -> str:
        return f"<Metric {self._metric_kind.value} {self._metric_name}>"

    @property
    def metric_kind(self) -> MetricKind:
        return self._metric_kind

    @property
    def metric_type(self) -> str:
        return self._metric_type

    @property
    def metric_name(self) -> str:
        return self._metric_name

    @property
    def resource_name(self) -> str:
        return self._resource_name

    @property
    def value_type(self) -> ValueType:
        return self._value_type

    @property
    def throttle(self) -> float:
        return self._throttle

    @property
    def policy(self) -> MergePolicy:
        return self._policy

    @property
    def descriptor(self) -> MetricDescriptor:
        return self._descriptor

    @property
    def accumulating(self) -> bool:
        """True while a flush cycle is armed and collecting points."""
        return self._pending is not None

    @property
    def buffer_size(self) -> int:
        return len(self._buffer)

    # --- Descriptor lifecycle ---

    async def create(self) -> dict:
        """Register this metric's descriptor."""
        self._policy.on_create(utcnow())
        token = await self._monitor.get_access_token()
        response = await self._monitor.client.create_metric_descriptor(
            self._monitor.project_name, self._descriptor, token
        )
        logger.info(f"Created metric descriptor {self._resource_name}")
        return response

    async def delete(self) -> dict:
        """Delete this metric's descriptor."""
        token = await self._monitor.get_access_token()
        response = await self._monitor.client.delete_metric_descriptor(self._resource_name, token)
        logger.info(f"Deleted metric descriptor {self._resource_name}")
        return response

    # --- Reporting ---

    def format_data_point(
        self,
        value: Any,
        interval: TimeInterval | None = None,
        labels: Labels | None = None,
    ) -> DataPoint:
        if value is None:
            raise ValidationError("value is required")
        return DataPoint(
            metric_type=self._metric_name,
            labels=labels or {},
            resource=self._monitor.resource,
            metric_kind=self._metric_kind,
            value_type=self._value_type,
            interval=interval or TimeInterval(),
            value={value_field(self._value_type): value},
        )

    def report(self, value: Any, *args: Any, **kwargs: Any) -> asyncio.Future:
        """Report ``value`` and return a future of the write that carries it.

        The remaining arguments are read by the metric's merge policy (end time,
        interval, labels). Must be called from a running event loop. Raises
        ``ValidationError`` immediately when ``value`` is None.
        """
        if value is None:
            raise ValidationError("value is required")
        now = utcnow()
        interval, labels = self._policy.normalize(*args, now=now, **kwargs)
        if interval.end_time is None:
            interval = interval.model_copy(update={"end_time": now})
        point = self.format_data_point(value, interval=interval, labels=labels)

        if not self._throttle:
            return self._track(asyncio.ensure_future(self._send([point])))
        return self._enqueue(point)

    async def flush(self) -> dict | None:
        """Send the accumulating batch now instead of waiting for the timer."""
        if self._pending is None:
            return None
        future = self._pending
        if self._timer is not None:
            self._timer.cancel()
        self._on_timer()
        return await asyncio.shield(future)

    def clear_timers(self) -> None:
        """Cancel the flush timer without sending.

        Reports waiting on the cancelled cycle are never settled. Callers that
        use this must bound their waits themselves (e.g. ``asyncio.wait_for``,
        which only cancels that caller's view of the cycle).
        A write already in flight is not cancelled.
        """
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None
        self._pending = None
        abandoned = self._buffer.drain_and_reset()
        BATCH_BUFFER_SIZE.labels(metric_type=self._metric_type).set(0)
        ABANDONED_POINTS_TOTAL.labels(metric_type=self._metric_type).inc(len(abandoned))
        logger.warning(
            f"Cleared flush timer for {self._metric_name}, abandoning {len(abandoned)} pending point(s)"
        )

    def dispose(self) -> None:
        """Clear timers and stop receiving the monitor's broadcasts."""
        self.clear_timers()
        self._monitor.unregister(self)

    # --- Batching internals ---

    def _enqueue(self, point: DataPoint) -> asyncio.Future:
        self._buffer.push(point)
        BATCH_BUFFER_SIZE.labels(metric_type=self._metric_type).set(len(self._buffer))
        if self._pending is None:
            self._pending = asyncio.get_running_loop().create_future()
            self._timer = IntervalTimer(self._throttle, self._on_timer)
            self._timer.start()
        return asyncio.shield(self._pending)

    def _on_timer(self) -> None:
        # New reports from here on open a fresh cycle
        future = self._pending
        self._pending = None
        self._timer = None
        points = self._buffer.drain_and_reset()
        BATCH_BUFFER_SIZE.labels(metric_type=self._metric_type).set(0)
        self._track(asyncio.ensure_future(self._flush_batch(points, future)))

    async def _flush_batch(self, points: list[DataPoint], future: asyncio.Future) -> None:
        try:
            result = await self._send(points) if points else None
        except Exception as e:
            if not future.done():
                future.set_exception(e)
            return
        if not future.done():
            future.set_result(result)

    async def _send(self, points: list[DataPoint]) -> dict:
        token = await self._monitor.get_access_token()
        try:
            with FLUSH_DURATION_SECONDS.labels(metric_type=self._metric_type).time():
                response = await self._monitor.client.create_time_series(
                    self._monitor.project_name, points, token
                )
        except Exception:
            BATCH_FLUSHES_TOTAL.labels(metric_type=self._metric_type, status="error").inc()
            logger.warning(f"Failed to write {len(points)} point(s) for {self._metric_name}")
            raise
        BATCH_FLUSHES_TOTAL.labels(metric_type=self._metric_type, status="success").inc()
        POINTS_SENT_TOTAL.labels(metric_type=self._metric_type).inc(len(points))
        logger.debug(f"Wrote {len(points)} point(s) for {self._metric_name}")
        return response

    def _track(self, task: asyncio.Future) -> asyncio.Future:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task
