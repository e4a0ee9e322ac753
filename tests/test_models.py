"""Tests for wire payload models."""

from datetime import datetime, timedelta, timezone

import pytest

from gmonitor.exceptions import ValidationError
from gmonitor.models import (
    DataPoint,
    LabelDescriptor,
    MetricDescriptor,
    MetricKind,
    MonitoredResource,
    TimeInterval,
    ValueType,
    format_timestamp,
    value_field,
)

END = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "value_type, field",
    [("INT64", "int64Value"), (ValueType.DOUBLE, "doubleValue"), ("BOOL", "boolValue"), ("STRING", "stringValue")],
)
def test_value_field(value_type, field):
    assert value_field(value_type) == field


def test_format_timestamp_converts_to_utc():
    plus_two = timezone(timedelta(hours=2))
    assert format_timestamp(datetime(2024, 5, 1, 14, 0, 0, tzinfo=plus_two)) == "2024-05-01T12:00:00Z"


class TestTimeInterval:
    def test_coerce_none(self):
        assert TimeInterval.coerce(None) == TimeInterval()

    def test_coerce_datetime_is_end_time(self):
        assert TimeInterval.coerce(END) == TimeInterval(end_time=END)

    def test_coerce_mapping_accepts_both_spellings(self):
        start = END - timedelta(hours=1)
        assert TimeInterval.coerce({"startTime": start, "endTime": END}) == TimeInterval(start_time=start, end_time=END)
        assert TimeInterval.coerce({"start_time": start}) == TimeInterval(start_time=start)

    def test_coerce_rfc3339_string_is_end_time(self):
        assert TimeInterval.coerce("2024-05-01T12:00:00Z") == TimeInterval(end_time=END)

    def test_coerce_epoch_seconds_is_end_time(self):
        assert TimeInterval.coerce(int(END.timestamp())) == TimeInterval(end_time=END)

    def test_coerce_unparseable_time(self):
        with pytest.raises(ValidationError):
            TimeInterval.coerce("yesterday-ish")
        with pytest.raises(ValidationError):
            TimeInterval.coerce({"end_time": "yesterday-ish"})

    def test_is_interval_like(self):
        assert TimeInterval.is_interval_like(END)
        assert TimeInterval.is_interval_like({"endTime": END})
        assert not TimeInterval.is_interval_like({"host": "a"})
        assert not TimeInterval.is_interval_like({})

    def test_frozen(self):
        interval = TimeInterval(end_time=END)
        with pytest.raises(ValueError):
            interval.end_time = None


def test_data_point_is_immutable():
    point = DataPoint(
        metric_type="custom.googleapis.com/cpu",
        resource=MonitoredResource(type="global"),
        metric_kind=MetricKind.GAUGE,
        value={"doubleValue": 0.5},
        value_type=ValueType.DOUBLE,
    )
    assert point.scalar == 0.5
    with pytest.raises(ValueError):
        point.labels = {"host": "a"}


def test_descriptor_omits_unset_fields():
    descriptor = MetricDescriptor(
        name="projects/p/metricDescriptors/custom.googleapis.com/cpu",
        type="custom.googleapis.com/cpu",
        metric_kind=MetricKind.GAUGE,
        value_type=ValueType.DOUBLE,
        labels=[LabelDescriptor(key="host")],
    )
    assert descriptor.to_wire() == {
        "name": "projects/p/metricDescriptors/custom.googleapis.com/cpu",
        "type": "custom.googleapis.com/cpu",
        "metricKind": "GAUGE",
        "valueType": "DOUBLE",
        "labels": [{"key": "host", "valueType": "STRING"}],
    }
