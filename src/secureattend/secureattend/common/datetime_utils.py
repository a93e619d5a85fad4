from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from ..core.constants import WEEKDAY_NAMES
from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def parse_clock_time(value: str) -> time:
    """Parse 'HH:MM' or 'HH:MM:SS' into a time."""
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValueError(f"Invalid time string: {value!r}")
    hours = int(parts[0])
    minutes = int(parts[1])
    seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
    return time(hour=hours, minute=minutes, second=seconds)


def get_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as e:
        raise ValidationError(f"Unknown timezone: {name!r}") from e


def now_in_zone(tz: ZoneInfo) -> datetime:
    """Current wall-clock time in the business timezone.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(tz)


def to_zone(value: datetime, tz: ZoneInfo) -> datetime:
    """Express a timestamp in ``tz``. Naive values are taken as already local to ``tz``."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def parse_timestamp(value: str, tz: ZoneInfo) -> datetime:
    """Parse an ISO-8601 timestamp from a clock device.

    A trailing 'Z' or an explicit offset is honored; a bare timestamp is UTC,
    matching what the biometric clients send.
    """
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    parsed = datetime.fromisoformat(raw)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=ZoneInfo("UTC"))
    return parsed.astimezone(tz)


def weekday_name(value: date) -> str:
    return WEEKDAY_NAMES[value.weekday()]


def hours_between(start: datetime, end: datetime) -> float:
    """Hours from start to end, rounded to 2 decimals, never negative."""
    seconds = (end - start).total_seconds()
    return max(0.0, round(seconds / 3600, 2))


def previous_day(value: date) -> date:
    return value - timedelta(days=1)


def coerce_time(value) -> time:
    """Normalize TIME values from storage or JSON payloads.

    Accepts:
    - datetime.time
    - datetime.timedelta (mysql-connector returns TIME columns this way)
    - string ('08:30' or '08:30:00')
    """

    if isinstance(value, time):
        return value

    if isinstance(value, timedelta):
        total_seconds = int(value.total_seconds()) % 86400
        hours = total_seconds // 3600
        minutes = (total_seconds % 3600) // 60
        seconds = total_seconds % 60
        return time(hour=hours, minute=minutes, second=seconds)

    if isinstance(value, str):
        return parse_clock_time(value)

    raise TypeError(f"Unsupported time value type: {type(value)!r}")


def coerce_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        return parse_iso_date(value.strip()[:10])
    raise TypeError(f"Unsupported date value type: {type(value)!r}")
