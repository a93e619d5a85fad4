"""Normalize stored schedule rows into ``ScheduleAssignment`` values.

The ``employee_schedules`` table has carried several shapes over time:

- ``days``: JSON list of weekday names, or (older rows) a single weekday string
- ``schedule_dates``: JSON list of ISO dates, or a JSON object mapping weekday
  names to ISO dates, e.g. ``{"Monday": ["2025-11-24", "2025-12-01"]}``
- ``specific_date``: deprecated single ISO date
- ``shifts``: JSON array of ``{shift_name, start_time, end_time, days}``;
  each entry becomes its own assignment

A non-empty date list always wins over weekday names on the same row. An
empty one (``{}``, ``[]``, ``{"Monday": []}``) counts as no date list.
"""

from __future__ import annotations

import json
from typing import Any, Mapping, Optional

from ..common.datetime_utils import coerce_date, coerce_time
from ..core.constants import WEEKDAY_NAMES
from ..core.enums import ScheduleStatus
from ..core.exceptions import DataError
from ..shifts.model import Shift
from .model import Recurrence, Recurring, ScheduleAssignment, SpecificDates

_WEEKDAY_LOOKUP = {name.lower(): name for name in WEEKDAY_NAMES}


def _load_json(value: Any, field_name: str) -> Any:
    if value is None:
        return None
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            # A bare weekday or date string predates the JSON columns.
            if text.lower() in _WEEKDAY_LOOKUP or text[:4].isdigit():
                return text
            raise DataError(f"{field_name} is not valid JSON: {text[:40]!r}") from e
    return value


def normalize_weekday(value: Any) -> str:
    if not isinstance(value, str):
        raise DataError(f"weekday must be a string, got {type(value).__name__}")
    name = _WEEKDAY_LOOKUP.get(value.strip().lower())
    if not name:
        raise DataError(f"unknown weekday {value!r}")
    return name


def _parse_dates(raw: Any) -> SpecificDates:
    if isinstance(raw, Mapping):
        values = [d for dates in raw.values() for d in (dates or [])]
    elif isinstance(raw, (list, tuple)):
        values = list(raw)
    elif isinstance(raw, str):
        values = [raw]
    else:
        raise DataError(f"schedule_dates has unsupported shape {type(raw).__name__}")

    try:
        return SpecificDates(dates=frozenset(coerce_date(v) for v in values))
    except (TypeError, ValueError) as e:
        raise DataError(f"schedule_dates contains an invalid date: {e}") from e


def _parse_weekdays(raw: Any) -> Recurring:
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, (list, tuple)):
        raise DataError(f"days has unsupported shape {type(raw).__name__}")
    return Recurring(weekdays=frozenset(normalize_weekday(d) for d in raw))


def parse_recurrence(source: Mapping[str, Any]) -> Optional[Recurrence]:
    """Pick the recurrence described by ``source``; None when it carries none."""

    schedule_dates = _load_json(source.get("schedule_dates"), "schedule_dates")
    if schedule_dates is not None:
        dated = _parse_dates(schedule_dates)
        # An empty list or object is a placeholder written next to `days`.
        if dated.dates:
            return dated

    days = _load_json(source.get("days"), "days")
    if days is not None and days != []:
        return _parse_weekdays(days)

    specific_date = source.get("specific_date")
    if specific_date:
        return _parse_dates([specific_date])

    if days == []:
        return Recurring(weekdays=frozenset())
    return None


def _parse_shift(source: Mapping[str, Any]) -> Shift:
    start = source.get("start_time") or source.get("shift_start")
    end = source.get("end_time") or source.get("shift_end")
    if start is None or end is None:
        raise DataError("shift is missing start_time/end_time")
    try:
        return Shift(
            shift_name=str(source.get("shift_name") or "Shift"),
            start_time=coerce_time(start),
            end_time=coerce_time(end),
        )
    except (TypeError, ValueError) as e:
        raise DataError(f"invalid shift time: {e}") from e


def _parse_status(value: Any) -> ScheduleStatus:
    try:
        return ScheduleStatus(value or ScheduleStatus.ACTIVE.value)
    except ValueError as e:
        raise DataError(f"unknown schedule status {value!r}") from e


def _optional_date(value: Any):
    if not value:
        return None
    try:
        return coerce_date(value)
    except (TypeError, ValueError) as e:
        raise DataError(f"invalid bound date {value!r}") from e


def build_assignments(row: Mapping[str, Any]) -> list[ScheduleAssignment]:
    """Turn one stored schedule row into one or more assignments.

    Raises DataError when the row cannot be interpreted.
    """

    employee_id = row.get("employee_id")
    if not employee_id:
        raise DataError("schedule row has no employee_id")

    try:
        schedule_id = int(row.get("id") or row.get("schedule_id") or 0)
    except (TypeError, ValueError) as e:
        raise DataError(f"invalid schedule id {row.get('id')!r}") from e

    common = dict(
        schedule_id=schedule_id,
        employee_id=str(employee_id),
        status=_parse_status(row.get("status")),
        start_date=_optional_date(row.get("start_date")),
        end_date=_optional_date(row.get("end_date")),
        department=row.get("department"),
    )
    row_recurrence = parse_recurrence(row)

    shifts = _load_json(row.get("shifts"), "shifts")
    if shifts:
        if not isinstance(shifts, list):
            raise DataError("shifts must be a JSON array")
        out: list[ScheduleAssignment] = []
        for entry in shifts:
            if not isinstance(entry, Mapping):
                raise DataError("shifts entries must be objects")
            recurrence = parse_recurrence(entry) or row_recurrence
            if recurrence is None:
                raise DataError("shift entry has no days or dates")
            out.append(ScheduleAssignment(shift=_parse_shift(entry), recurrence=recurrence, **common))
        return out

    if row_recurrence is None:
        raise DataError("schedule row has no days or dates")
    return [ScheduleAssignment(shift=_parse_shift(row), recurrence=row_recurrence, **common)]
