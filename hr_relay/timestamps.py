"""Timestamp parsing for samples pushed by the phone shortcut."""

import re
from datetime import datetime, timedelta, timezone, tzinfo
from typing import List

from hr_relay.config import PRECISIONS
from hr_relay.errors import TimestampParseError

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# 2024-01-01T10:00:00Z, 2024-01-01 10:00:00.123456789+08:00, 2024-01-01T10:00
ISO_8601 = re.compile(
    r"^(?P<year>\d{4})-(?P<month>\d{2})-(?P<day>\d{2})[Tt ]"
    r"(?P<hour>\d{2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:[.,](?P<fraction>\d{1,9}))?)?"
    r"\s*(?P<offset>[Zz]|[+-]\d{2}(?::?\d{2})?)?$",
    re.ASCII,
)

# 2024/01/01 10:00:00
SLASH_DATE = re.compile(
    r"^(?P<year>\d{4})/(?P<month>\d{1,2})/(?P<day>\d{1,2})\s+"
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?$",
    re.ASCII,
)

# 2025年6月2日 21:28, as emitted by shortcuts on a Chinese locale
CHINESE_DATE = re.compile(
    r"^(?P<year>\d{4})年(?P<month>\d{1,2})月(?P<day>\d{1,2})日\s*"
    r"(?P<hour>\d{1,2}):(?P<minute>\d{2})(?::(?P<second>\d{2}))?$",
)

FORMATS: List[re.Pattern] = [ISO_8601, SLASH_DATE, CHINESE_DATE]


def _parse_offset(offset: str) -> tzinfo:
    if offset in ("Z", "z"):
        return timezone.utc
    sign = -1 if offset[0] == "-" else 1
    digits = offset[1:].replace(":", "")
    hours = int(digits[:2])
    minutes = int(digits[2:] or 0)
    if hours > 23 or minutes > 59:
        raise ValueError(f"Offset out of range: {offset}")
    return timezone(sign * timedelta(hours=hours, minutes=minutes))


def _match_to_ns(match: re.Match, default_tz: tzinfo) -> int:
    parts = match.groupdict()
    offset = parts.get("offset")
    tz = _parse_offset(offset) if offset else default_tz

    dt = datetime(
        int(parts["year"]),
        int(parts["month"]),
        int(parts["day"]),
        int(parts["hour"]),
        int(parts["minute"]),
        int(parts["second"] or 0),
        tzinfo=tz,
    )
    # Local times skipped or repeated by a DST change name no single instant
    if dt.utcoffset() != dt.replace(fold=1).utcoffset():
        raise ValueError(f"Ambiguous or nonexistent local time: {dt.replace(tzinfo=None)} in {tz}")

    delta = dt - EPOCH
    seconds = delta.days * 86_400 + delta.seconds
    fraction = parts.get("fraction") or ""
    nanos = int(fraction.ljust(9, "0")) if fraction else 0
    return seconds * 1_000_000_000 + nanos


def parse_timestamp_ns(value: str, default_tz: tzinfo = timezone.utc) -> int:
    """
    Parse a timestamp string into nanoseconds since the Unix epoch.

    Timestamps carrying no offset are read in ``default_tz``; local times
    that fall in a DST gap or overlap there are rejected. Fractional seconds
    are kept to the nanosecond.

    Raises:
        TimestampParseError: If no recognized format matches, or the match
            is not a single real instant.
    """
    text = value.strip()
    for pattern in FORMATS:
        match = pattern.match(text)
        if match is None:
            continue
        try:
            return _match_to_ns(match, default_tz)
        except (ValueError, OverflowError) as e:
            raise TimestampParseError(value) from e
    raise TimestampParseError(value)


def to_precision(epoch_ns: int, precision: str) -> int:
    """Convert nanoseconds since epoch to the given write precision."""
    try:
        divisor = PRECISIONS[precision]
    except KeyError:
        raise ValueError(f"Unknown precision: {precision}")
    return epoch_ns // divisor

