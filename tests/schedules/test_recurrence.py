from __future__ import annotations

import logging
from datetime import date, time, timedelta

import pytest

from secureattend.attendance.resolver import match_schedule
from secureattend.core.exceptions import DataError
from secureattend.schedules.model import MatchKind, Recurring, SpecificDates
from secureattend.schedules.mysql_schedule_repository import _normalize
from secureattend.schedules.recurrence import build_assignments, normalize_weekday, parse_recurrence

MONDAY = date(2025, 1, 6)


def test_days_json_list():
    rec = parse_recurrence({"days": '["monday", "FRIDAY"]'})

    assert rec == Recurring(weekdays=frozenset({"Monday", "Friday"}))
    assert rec.kind == MatchKind.WEEKDAY


def test_legacy_single_weekday_string():
    rec = parse_recurrence({"days": "Tuesday"})

    assert rec == Recurring(weekdays=frozenset({"Tuesday"}))


def test_schedule_dates_list_wins_over_days():
    rec = parse_recurrence({"days": ["Monday"], "schedule_dates": '["2025-01-07", "2025-01-09"]'})

    assert rec == SpecificDates(dates=frozenset({date(2025, 1, 7), date(2025, 1, 9)}))
    assert rec.includes(MONDAY) is False


def test_schedule_dates_grouped_by_weekday():
    rec = parse_recurrence({"schedule_dates": {"Monday": ["2025-01-06", "2025-01-13"], "Friday": []}})

    assert rec.includes(MONDAY)
    assert rec.includes(MONDAY + timedelta(days=7))
    assert not rec.includes(MONDAY + timedelta(days=14))


def test_deprecated_specific_date():
    rec = parse_recurrence({"specific_date": date(2025, 1, 6)})

    assert rec == SpecificDates(dates=frozenset({MONDAY}))


@pytest.mark.parametrize("placeholder", ["{}", "[]", '{"Monday": []}', {}, []])
def test_empty_date_list_falls_back_to_days(placeholder):
    rec = parse_recurrence({"days": ["Monday"], "schedule_dates": placeholder})

    assert rec == Recurring(weekdays=frozenset({"Monday"}))
    assert rec.includes(MONDAY) is True


def test_empty_date_list_falls_back_to_specific_date():
    rec = parse_recurrence({"schedule_dates": "{}", "specific_date": "2025-01-06"})

    assert rec == SpecificDates(dates=frozenset({MONDAY}))


def test_empty_date_list_alone_is_rejected():
    with pytest.raises(DataError):
        build_assignments({"id": 1, "employee_id": "E1", "start_time": "08:00", "end_time": "17:00", "schedule_dates": "{}"})


def test_newly_assigned_weekday_schedule_is_matched():
    rows = build_assignments(
        {
            "id": 1,
            "employee_id": "E1",
            "start_time": "08:00",
            "end_time": "17:00",
            "days": '["Monday"]',
            "schedule_dates": "{}",
        }
    )

    sc = match_schedule(rows, MONDAY)

    assert sc is not None
    assert sc.schedule_id == 1
    assert sc.match(MONDAY) == MatchKind.WEEKDAY
    assert match_schedule(rows, MONDAY + timedelta(days=1)) is None


def test_empty_days_without_dates():
    assert parse_recurrence({"days": "[]"}) == Recurring(weekdays=frozenset())


def test_no_recurrence_at_all():
    assert parse_recurrence({}) is None


@pytest.mark.parametrize(
    "source",
    [
        {"days": '["Mondy"]'},
        {"days": "{not json"},
        {"schedule_dates": '["2025-13-40"]'},
        {"schedule_dates": "42"},
    ],
)
def test_malformed_payloads_raise_data_error(source):
    with pytest.raises(DataError):
        parse_recurrence(source)


def test_normalize_weekday_rejects_non_strings():
    with pytest.raises(DataError):
        normalize_weekday(3)


def test_row_with_timedelta_times_from_mysql():
    (sc,) = build_assignments(
        {
            "id": 3,
            "employee_id": "E1",
            "shift_name": "Night",
            "start_time": timedelta(hours=22),
            "end_time": timedelta(hours=6),
            "days": '["Monday"]',
        }
    )

    assert sc.schedule_id == 3
    assert sc.shift.start_time == time(22, 0)
    assert sc.shift.end_time == time(6, 0)
    assert sc.shift.is_overnight is True
    assert sc.match(MONDAY) == MatchKind.WEEKDAY


def test_shifts_array_expands_to_one_assignment_per_entry():
    rows = build_assignments(
        {
            "id": 5,
            "employee_id": "E1",
            "days": '["Monday"]',
            "shifts": '[{"shift_name": "AM", "start_time": "06:00", "end_time": "10:00"},'
            ' {"shift_name": "PM", "shift_start": "18:00", "shift_end": "22:00", "days": ["Tuesday"]}]',
        }
    )

    am, pm = rows
    assert am.shift.shift_name == "AM"
    assert am.match(MONDAY) == MatchKind.WEEKDAY
    assert pm.match(MONDAY) is None
    assert pm.match(MONDAY + timedelta(days=1)) == MatchKind.WEEKDAY


def test_bounds_limit_matching():
    (sc,) = build_assignments(
        {
            "id": 1,
            "employee_id": "E1",
            "start_time": "08:00",
            "end_time": "17:00",
            "days": '["Monday"]',
            "start_date": "2025-01-07",
        }
    )

    assert sc.match(MONDAY) is None
    assert sc.match(MONDAY + timedelta(days=7)) == MatchKind.WEEKDAY


def test_row_without_times_is_rejected():
    with pytest.raises(DataError):
        build_assignments({"id": 1, "employee_id": "E1", "days": '["Monday"]'})


def test_repository_skips_rows_it_cannot_read(caplog):
    rows = [
        {"id": 1, "employee_id": "E1", "start_time": "08:00", "end_time": "17:00", "days": '["Monday"]'},
        {"id": 2, "employee_id": "E2", "start_time": "08:00", "end_time": "17:00", "days": "{broken"},
    ]

    with caplog.at_level(logging.WARNING):
        out = _normalize(rows)

    assert [sc.employee_id for sc in out] == ["E1"]
    assert "Skipping schedule 2 for E2" in caplog.text
