from __future__ import annotations

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from gmonitor.monitor import Monitor

NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.create_metric_descriptor = AsyncMock(return_value={"name": "descriptor"})
    client.delete_metric_descriptor = AsyncMock(return_value={})
    client.create_time_series = AsyncMock(return_value={})
    return client


@pytest.fixture
def mock_credentials():
    credentials = MagicMock()
    credentials.get_access_token = AsyncMock(return_value="token")
    return credentials


@pytest.fixture
def monitor(mock_client, mock_credentials):
    return Monitor(
        project="project",
        resource={"type": "gce_instance", "labels": {"instance_id": "1", "zone": "us-central1-a"}},
        throttle=0,
        client=mock_client,
        credentials=mock_credentials,
    )


@pytest.fixture
def fixed_now():
    with patch("gmonitor.metrics.metric.utcnow", return_value=NOW):
        yield NOW
