"""InfluxDB line protocol encoding for heart rate samples."""

import math
from typing import Dict, Mapping, Optional

from influxdb_client import Point, WritePrecision

from hr_relay.config import DEVICE_TAG, MEASUREMENT, SOURCE_TAG, VALUE_FIELD


def _field_value(value: float) -> float:
    # Point writes ints with an ``i`` suffix and skips non-finite floats
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"Field value must be numeric, got {type(value).__name__}")
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"Field value must be finite, got {value}")
    return value


def encode_record(
    value: float,
    timestamp: int,
    tags: Optional[Mapping[str, Optional[str]]] = None,
    measurement: str = MEASUREMENT,
    precision: str = WritePrecision.NS,
) -> str:
    """
    Build one line protocol record.

    ``timestamp`` is already in ``precision`` units. Tags with empty values
    are left out; integral values print without a decimal point and the
    field is always stored as a float.

    Example:
        >>> encode_record(72, 1704103200000000000)
        'heart_rate value=72 1704103200000000000'
    """
    point = Point(measurement)
    for key, tag_value in (tags or {}).items():
        if tag_value:
            point.tag(key, tag_value)
    point.field(VALUE_FIELD, _field_value(value))
    point.time(timestamp, precision)
    return point.to_line_protocol()


def sample_tags(device_id: Optional[str], source: Optional[str]) -> Dict[str, Optional[str]]:
    """Tag set attached to every sample."""
    return {DEVICE_TAG: device_id, SOURCE_TAG: source}
