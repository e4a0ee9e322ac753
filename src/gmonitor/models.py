from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from gmonitor.exceptions import ValidationError


class MetricKind(str, Enum):
    GAUGE = "GAUGE"
    CUMULATIVE = "CUMULATIVE"


class ValueType(str, Enum):
    BOOL = "BOOL"
    INT64 = "INT64"
    DOUBLE = "DOUBLE"
    STRING = "STRING"
    DISTRIBUTION = "DISTRIBUTION"
    MONEY = "MONEY"


def value_field(value_type: ValueType | str) -> str:
    """Name of the typed value field on the wire, e.g. ``INT64`` -> ``int64Value``."""
    return f"{ValueType(value_type).value.lower()}Value"


def format_timestamp(value: datetime) -> str:
    """RFC 3339 in UTC, as the Monitoring API expects."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


_INTERVAL_KEYS = ("start_time", "end_time", "startTime", "endTime")


class MonitoredResource(BaseModel):
    """The monitored resource every point of a Monitor is attributed to."""

    type: str
    labels: dict[str, str] = {}

    @field_validator("type")
    @classmethod
    def type_required(cls, value: str) -> str:
        if not value:
            raise ValueError("resource.type is required")
        return value


class TimeInterval(BaseModel):
    model_config = ConfigDict(frozen=True)

    start_time: datetime | None = None
    end_time: datetime | None = None

    @staticmethod
    def is_interval_like(value: Any) -> bool:
        """True for values that describe an interval rather than a label map."""
        if isinstance(value, (TimeInterval, datetime)):
            return True
        if isinstance(value, Mapping):
            return any(key in value for key in _INTERVAL_KEYS)
        return False

    @classmethod
    def coerce(cls, value: TimeInterval | Mapping[str, Any] | datetime | str | float | None) -> TimeInterval:
        """Build an interval from an interval, a mapping, a bare end time, or nothing.

        A bare end time may be a ``datetime``, an RFC 3339 string or epoch
        seconds. Unparseable times raise ``ValidationError``.
        """
        if value is None:
            return cls()
        if isinstance(value, TimeInterval):
            return value
        try:
            if isinstance(value, Mapping):
                return cls(
                    start_time=value.get("start_time", value.get("startTime")),
                    end_time=value.get("end_time", value.get("endTime")),
                )
            return cls(end_time=value)
        except PydanticValidationError as e:
            raise ValidationError(f"Invalid interval {value!r}: {e}") from e

    def to_wire(self) -> dict[str, str]:
        wire = {}
        if self.start_time is not None:
            wire["startTime"] = format_timestamp(self.start_time)
        if self.end_time is not None:
            wire["endTime"] = format_timestamp(self.end_time)
        return wire


class DataPoint(BaseModel):
    """One observation waiting to be written as a time series point.

    Immutable: merging two points produces a new point with the same metric
    type, labels and resource (the fields a group key is derived from).
    """

    model_config = ConfigDict(frozen=True)

    metric_type: str
    labels: dict[str, str] = Field(default_factory=dict)
    resource: MonitoredResource
    metric_kind: MetricKind
    value_type: ValueType = ValueType.INT64
    interval: TimeInterval = Field(default_factory=TimeInterval)
    value: dict[str, Any]

    @property
    def scalar(self) -> Any:
        return self.value.get(value_field(self.value_type))

    def to_wire(self) -> dict[str, Any]:
        return {
            "metric": {"type": self.metric_type, "labels": dict(self.labels)},
            "resource": self.resource.model_dump(mode="json"),
            "metricKind": self.metric_kind.value,
            "valueType": self.value_type.value,
            "points": [{"interval": self.interval.to_wire(), "value": dict(self.value)}],
        }


class LabelDescriptor(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key: str
    value_type: str = "STRING"
    description: str | None = None


class MetricDescriptor(BaseModel):
    """Payload registered with ``metricDescriptors.create``."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str
    type: str
    metric_kind: MetricKind
    value_type: ValueType = ValueType.INT64
    description: str | None = None
    display_name: str | None = None
    labels: list[LabelDescriptor] | None = None
    unit: str | None = None

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class TimeSeriesBatch(BaseModel):
    """Body of a ``timeSeries.create`` request."""

    points: list[DataPoint]

    def to_wire(self) -> dict[str, Any]:
        return {"timeSeries": [point.to_wire() for point in self.points]}
