"""Batched reporting of custom metrics to Google Cloud Monitoring."""

from typing import Any

from gmonitor.exceptions import AuthError, GMonitorError, TransportError, ValidationError
from gmonitor.metrics import CumulativePolicy, GaugePolicy, Metric
from gmonitor.models import DataPoint, LabelDescriptor, MetricKind, MonitoredResource, TimeInterval, ValueType
from gmonitor.monitor import Monitor

__version__ = "0.1.0"


def create_monitor(**kwargs: Any) -> Monitor:
    return Monitor(**kwargs)


__all__ = [
    "AuthError",
    "CumulativePolicy",
    "DataPoint",
    "GMonitorError",
    "GaugePolicy",
    "LabelDescriptor",
    "Metric",
    "MetricKind",
    "Monitor",
    "MonitoredResource",
    "TimeInterval",
    "TransportError",
    "ValidationError",
    "ValueType",
    "create_monitor",
]
