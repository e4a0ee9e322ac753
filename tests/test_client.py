"""Tests for the Monitoring REST client against a local aiohttp server."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest
from aiohttp import web
from aiohttp import test_utils

from gmonitor.client import MonitoringClient
from gmonitor.exceptions import TransportError
from gmonitor.models import DataPoint, MetricDescriptor, MetricKind, MonitoredResource, TimeInterval

END = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def requests_seen():
    return []


@pytest.fixture
def app(requests_seen):
    async def record(request: web.Request) -> web.Response:
        body = await request.json() if request.can_read_body else None
        requests_seen.append((request.method, request.path, request.headers.get("Authorization"), body))
        if request.path.endswith("/broken/timeSeries"):
            return web.Response(status=500, text="backend error")
        if request.path.endswith("/slow/timeSeries"):
            await asyncio.sleep(1)
        if request.method == "DELETE":
            return web.Response(status=200)
        return web.json_response({"ok": True})

    application = web.Application()
    application.router.add_route("*", "/{tail:.*}", record)
    return application


def _point() -> DataPoint:
    return DataPoint(
        metric_type="custom.googleapis.com/requests",
        labels={"route": "/"},
        resource=MonitoredResource(type="global"),
        metric_kind=MetricKind.CUMULATIVE,
        interval=TimeInterval(start_time=END.replace(hour=11), end_time=END),
        value={"int64Value": 3},
    )


@pytest.mark.asyncio
async def test_create_time_series(app, requests_seen):
    async with test_utils.TestServer(app) as server:
        client = MonitoringClient(base_url=str(server.make_url("/v3")))
        res = await client.create_time_series("projects/project", [_point()], "token")

    assert res == {"ok": True}
    method, path, auth, body = requests_seen[0]
    assert (method, path, auth) == ("POST", "/v3/projects/project/timeSeries", "Bearer token")
    assert body == {
        "timeSeries": [
            {
                "metric": {"type": "custom.googleapis.com/requests", "labels": {"route": "/"}},
                "resource": {"type": "global", "labels": {}},
                "metricKind": "CUMULATIVE",
                "valueType": "INT64",
                "points": [
                    {
                        "interval": {"startTime": "2024-05-01T11:00:00Z", "endTime": "2024-05-01T12:00:00Z"},
                        "value": {"int64Value": 3},
                    }
                ],
            }
        ]
    }


@pytest.mark.asyncio
async def test_create_and_delete_descriptor(app, requests_seen):
    descriptor = MetricDescriptor(
        name="projects/project/metricDescriptors/custom.googleapis.com/requests",
        type="custom.googleapis.com/requests",
        metric_kind=MetricKind.CUMULATIVE,
    )
    async with test_utils.TestServer(app) as server:
        client = MonitoringClient(base_url=str(server.make_url("/v3")))
        await client.create_metric_descriptor("projects/project", descriptor, "token")
        res = await client.delete_metric_descriptor(descriptor.name, "token")

    assert res == {}
    assert requests_seen[0][:2] == ("POST", "/v3/projects/project/metricDescriptors")
    assert requests_seen[0][3] == {
        "name": "projects/project/metricDescriptors/custom.googleapis.com/requests",
        "type": "custom.googleapis.com/requests",
        "metricKind": "CUMULATIVE",
        "valueType": "INT64",
    }
    assert requests_seen[1][:2] == (
        "DELETE",
        "/v3/projects/project/metricDescriptors/custom.googleapis.com/requests",
    )


@pytest.mark.asyncio
async def test_error_status_raises_transport_error(app):
    async with test_utils.TestServer(app) as server:
        client = MonitoringClient(base_url=str(server.make_url("/v3")))
        with pytest.raises(TransportError) as exc_info:
            await client.create_time_series("projects/broken", [_point()], "token")

    assert exc_info.value.status == 500
    assert exc_info.value.body == "backend error"


@pytest.mark.asyncio
async def test_connection_error_raises_transport_error(unused_tcp_port):
    client = MonitoringClient(base_url=f"http://127.0.0.1:{unused_tcp_port}/v3", timeout_sec=2)

    with pytest.raises(TransportError) as exc_info:
        await client.create_time_series("projects/project", [_point()], "token")

    assert exc_info.value.status is None


@pytest.mark.asyncio
async def test_timeout_raises_transport_error(app):
    async with test_utils.TestServer(app) as server:
        client = MonitoringClient(base_url=str(server.make_url("/v3")), timeout_sec=0.1)
        with pytest.raises(TransportError) as exc_info:
            await client.create_time_series("projects/slow", [_point()], "token")

    assert exc_info.value.status is None
