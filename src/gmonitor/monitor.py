from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

from loguru import logger

from gmonitor import settings
from gmonitor.auth import CredentialProvider
from gmonitor.client import MonitoringClient
from gmonitor.exceptions import ValidationError
from gmonitor.metrics.cumulative import CumulativePolicy
from gmonitor.metrics.gauge import GaugePolicy
from gmonitor.metrics.metric import Metric
from gmonitor.models import MetricKind, MonitoredResource


class Monitor:
    """Shared configuration and lifecycle for the metrics of one project.

    Metrics register themselves on construction, so ``clear_timers`` and
    ``flush`` reach every live metric without a process-wide event channel.
    """

    def __init__(
        self,
        project: str | None = None,
        resource: MonitoredResource | Mapping[str, Any] | None = None,
        auth: Mapping[str, Any] | str | None = None,
        throttle: float | None = None,
        client: MonitoringClient | None = None,
        credentials: CredentialProvider | None = None,
    ):
        project = project or settings.PROJECT
        if not project:
            raise ValidationError("project is required")
        try:
            self._resource = MonitoredResource.model_validate(resource or {"type": "global"})
        except ValueError as e:
            raise ValidationError(f"Invalid resource: {e}") from e

        self._project = project
        self._default_throttle = settings.DEFAULT_THROTTLE_SEC if throttle is None else throttle
        self._client = client or MonitoringClient()
        self._credentials = credentials or CredentialProvider(auth)
        self._metrics: list[Metric] = []

    @property
    def project(self) -> str:
        return self._project

    @property
    def project_name(self) -> str:
        return f"projects/{self._project}"

    @property
    def resource(self) -> MonitoredResource:
        return self._resource

    @property
    def default_throttle(self) -> float:
        return self._default_throttle

    @property
    def client(self) -> MonitoringClient:
        return self._client

    @property
    def credentials(self) -> CredentialProvider:
        return self._credentials

    @property
    def metrics(self) -> tuple[Metric, ...]:
        return tuple(self._metrics)

    async def get_access_token(self) -> str:
        return await self._credentials.get_access_token()

    # --- Factories ---

    async def create_gauge(self, metric_type: str, **opts: Any) -> Metric:
        """Register a gauge descriptor and return the metric (not the API response)."""
        gauge = Metric(self, MetricKind.GAUGE, metric_type, GaugePolicy(), **opts)
        try:
            await gauge.create()
        except Exception:
            gauge.dispose()
            raise
        return gauge

    async def create_cumulative(self, metric_type: str, **opts: Any) -> Metric:
        """Register a cumulative descriptor and return the metric (not the API response)."""
        cumulative = Metric(self, MetricKind.CUMULATIVE, metric_type, CumulativePolicy(), **opts)
        try:
            await cumulative.create()
        except Exception:
            cumulative.dispose()
            raise
        return cumulative

    # --- Registration ---

    def register(self, metric: Metric) -> None:
        if metric not in self._metrics:
            self._metrics.append(metric)

    def unregister(self, metric: Metric) -> None:
        if metric in self._metrics:
            self._metrics.remove(metric)

    def clear_timers(self) -> None:
        """Cancel every registered metric's flush timer. See ``Metric.clear_timers``."""
        logger.info(f"Clearing flush timers for {len(self._metrics)} metric(s)")
        for metric in list(self._metrics):
            metric.clear_timers()

    async def flush(self) -> None:
        """Send every accumulating batch now. Raises the first failed batch's error."""
        results = await asyncio.gather(*(metric.flush() for metric in list(self._metrics)), return_exceptions=True)
        errors = [r for r in results if isinstance(r, BaseException)]
        if errors:
            logger.warning(f"{len(errors)} of {len(results)} metric flush(es) failed")
            raise errors[0]
