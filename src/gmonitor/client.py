"""Thin aiohttp client for the Cloud Monitoring v3 REST API."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
from loguru import logger

from gmonitor import settings
from gmonitor.exceptions import TransportError
from gmonitor.models import DataPoint, MetricDescriptor, TimeSeriesBatch


class MonitoringClient:
    def __init__(self, base_url: str | None = None, timeout_sec: float | None = None):
        self._base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self._timeout_sec = timeout_sec or settings.REQUEST_TIMEOUT_SEC

    @property
    def base_url(self) -> str:
        return self._base_url

    async def create_metric_descriptor(self, project_name: str, descriptor: MetricDescriptor, token: str) -> dict:
        return await self._request("POST", f"/{project_name}/metricDescriptors", token, body=descriptor.to_wire())

    async def delete_metric_descriptor(self, resource_name: str, token: str) -> dict:
        return await self._request("DELETE", f"/{resource_name}", token)

    async def create_time_series(self, project_name: str, points: list[DataPoint], token: str) -> dict:
        body = TimeSeriesBatch(points=points).to_wire()
        return await self._request("POST", f"/{project_name}/timeSeries", token, body=body)

    async def _request(self, method: str, path: str, token: str, body: dict[str, Any] | None = None) -> dict:
        url = self._base_url + path
        headers = {"Authorization": f"Bearer {token}"}
        timeout = aiohttp.ClientTimeout(total=self._timeout_sec)
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.request(method, url, json=body, headers=headers) as r:
                    text = await r.text()
                    if r.status >= 400:
                        raise TransportError(f"{method} {path} failed {r.status}: {text}", status=r.status, body=text)
                    if not text:
                        return {}
                    return await r.json(content_type=None)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"Error calling Monitoring API {method} {path}: {e}")
            raise TransportError(f"{method} {path} failed: {e!r}") from e
