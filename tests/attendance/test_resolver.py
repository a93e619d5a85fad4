from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest

from secureattend.attendance.model import AttendanceRecord
from secureattend.attendance.resolver import is_overtime_eligible, match_schedule, resolve_status
from secureattend.attendance.settings import ResolverConfig
from secureattend.core.enums import AttendanceStatus, DayState, ScheduleStatus
from secureattend.schedules.recurrence import build_assignments

from tests.fakes import assignment, employee

MNL = ZoneInfo("Asia/Manila")
MONDAY = date(2025, 1, 6)
CONFIG = ResolverConfig(grace_period_minutes=30, timezone="Asia/Manila")


def at(d: date, hh: int, mm: int = 0) -> datetime:
    return datetime.combine(d, time(hh, mm), tzinfo=MNL)


def record(
    *,
    work_date: date = MONDAY,
    clock_in=None,
    clock_out=None,
    status: AttendanceStatus = AttendanceStatus.PRESENT,
    total_hours=None,
) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=1,
        employee_id="E1",
        work_date=work_date,
        clock_in=clock_in,
        clock_out=clock_out,
        status=status,
        total_hours=total_hours,
        version=1,
    )


# --- scheduling -------------------------------------------------------------


def test_explicit_dates_decide_regardless_of_weekday_list():
    (sc,) = build_assignments(
        {
            "id": 7,
            "employee_id": "E1",
            "start_time": "08:00",
            "end_time": "17:00",
            "days": '["Monday", "Tuesday"]',
            "schedule_dates": '["2025-01-08"]',
        }
    )
    schedules = [sc]

    assert match_schedule(schedules, MONDAY) is None
    assert match_schedule(schedules, MONDAY + timedelta(days=1)) is None
    assert match_schedule(schedules, date(2025, 1, 8)) is sc


@pytest.mark.parametrize("offset", range(7))
def test_weekday_list_matches_only_listed_weekdays(offset):
    sc = assignment(days=["Monday", "Wednesday"])
    target = MONDAY + timedelta(days=offset)

    expected = target.weekday() in (0, 2)
    assert (match_schedule([sc], target) is not None) is expected


def test_inactive_assignment_never_matches():
    sc = assignment(days=["Monday"], status=ScheduleStatus.INACTIVE)
    assert match_schedule([sc], MONDAY) is None


def test_specific_date_beats_weekday_then_lowest_schedule_id():
    weekly = assignment(days=["Monday"], schedule_id=1, shift_name="Weekly")
    dated = assignment(dates=[MONDAY], schedule_id=9, start=time(13, 0), end=time(22, 0), shift_name="Dated")
    weekly_late = assignment(days=["Monday"], schedule_id=2, shift_name="Weekly2")

    assert match_schedule([weekly, dated, weekly_late], MONDAY) is dated
    assert match_schedule([weekly_late, weekly], MONDAY) is weekly


def test_other_employees_assignments_are_ignored():
    res = resolve_status(
        employee("E1"),
        [assignment("E2", days=["Monday"])],
        None,
        at(MONDAY, 23),
        CONFIG,
        target_date=MONDAY,
    )

    assert res.state == DayState.UNSCHEDULED
    assert res.patch == {}


# --- scheduled, no record ---------------------------------------------------


def test_unscheduled_without_record_is_a_no_op():
    res = resolve_status(employee(), [assignment(days=["Tuesday"])], None, at(MONDAY, 23), CONFIG, target_date=MONDAY)

    assert res.status is None
    assert res.state == DayState.UNSCHEDULED
    assert res.changed is False


def test_absent_after_shift_end_plus_grace():
    sc = assignment(days=["Monday"], start=time(8, 0), end=time(17, 0))

    res = resolve_status(employee(), [sc], None, at(MONDAY, 17, 31), CONFIG, target_date=MONDAY)

    assert res.status == AttendanceStatus.ABSENT
    assert res.state == DayState.ABSENT
    assert res.patch["status"] == AttendanceStatus.ABSENT
    assert res.patch["clock_in"] is None
    assert res.patch["clock_out"] is None


def test_not_absent_shortly_after_shift_start():
    sc = assignment(days=["Monday"], start=time(8, 0), end=time(17, 0))

    res = resolve_status(employee(), [sc], None, at(MONDAY, 8, 31), CONFIG, target_date=MONDAY)

    assert res.status is None
    assert res.state == DayState.SCHEDULED_NO_RECORD
    assert res.changed is False


def test_absent_exactly_at_deadline():
    sc = assignment(days=["Monday"], start=time(8, 0), end=time(17, 0))

    res = resolve_status(employee(), [sc], None, at(MONDAY, 17, 30), CONFIG, target_date=MONDAY)

    assert res.status == AttendanceStatus.ABSENT


def test_grace_period_is_configurable():
    sc = assignment(days=["Monday"], start=time(8, 0), end=time(17, 0))
    config = ResolverConfig(grace_period_minutes=90)

    res = resolve_status(employee(), [sc], None, at(MONDAY, 18, 0), config, target_date=MONDAY)

    assert res.changed is False


# --- clocked in, open -------------------------------------------------------


def test_open_session_before_deadline_is_unchanged():
    sc = assignment(dates=[MONDAY], start=time(8, 0), end=time(17, 0))
    rec = record(clock_in=at(MONDAY, 8, 0))

    res = resolve_status(employee(), [sc], rec, at(MONDAY, 17, 10), CONFIG)

    assert res.changed is False
    assert res.status == AttendanceStatus.PRESENT
    assert res.state == DayState.CLOCKED_IN_OPEN


def test_open_session_after_deadline_is_missed_clock_out_with_hours_to_now():
    sc = assignment(days=["Monday"], start=time(8, 0), end=time(17, 0))
    rec = record(clock_in=at(MONDAY, 8, 0))

    res = resolve_status(employee(), [sc], rec, at(MONDAY, 18, 0), CONFIG)

    assert res.status == AttendanceStatus.MISSED_CLOCK_OUT
    assert res.state == DayState.MISSED_CLOCK_OUT
    assert res.patch == {"status": AttendanceStatus.MISSED_CLOCK_OUT}
    assert res.hours == 10.0


@pytest.mark.parametrize(
    "hh, mm, expected",
    [
        (6, 15, None),
        (6, 25, None),
        (6, 30, AttendanceStatus.MISSED_CLOCK_OUT),
        (6, 35, AttendanceStatus.MISSED_CLOCK_OUT),
    ],
)
def test_overnight_shift_deadline_rolls_to_next_day(hh, mm, expected):
    sc = assignment(days=["Monday"], start=time(22, 0), end=time(6, 0), shift_name="Night")
    rec = record(clock_in=at(MONDAY, 21, 55), status=AttendanceStatus.PRESENT)
    tuesday = MONDAY + timedelta(days=1)

    res = resolve_status(employee(), [sc], rec, at(tuesday, hh, mm), CONFIG)

    assert res.target_date == MONDAY
    assert res.window.end == at(tuesday, 6, 0)
    if expected is None:
        assert res.changed is False
        assert res.status == AttendanceStatus.PRESENT
    else:
        assert res.status == expected


def test_overnight_absent_belongs_to_start_date():
    sc = assignment(days=["Monday"], start=time(22, 0), end=time(6, 0))
    tuesday = MONDAY + timedelta(days=1)

    before = resolve_status(employee(), [sc], None, at(tuesday, 6, 10), CONFIG, target_date=MONDAY)
    after = resolve_status(employee(), [sc], None, at(tuesday, 6, 31), CONFIG, target_date=MONDAY)

    assert before.changed is False
    assert after.status == AttendanceStatus.ABSENT


def test_naive_now_is_read_in_business_timezone():
    sc = assignment(days=["Monday"], start=time(8, 0), end=time(17, 0))

    res = resolve_status(employee(), [sc], None, datetime(2025, 1, 6, 17, 31), CONFIG, target_date=MONDAY)

    assert res.status == AttendanceStatus.ABSENT


def test_utc_clock_in_is_localized():
    sc = assignment(days=["Monday"], start=time(8, 0), end=time(17, 0))
    # 00:10 UTC == 08:10 Manila
    rec = record(
        clock_in=datetime(2025, 1, 6, 0, 10, tzinfo=ZoneInfo("UTC")),
        clock_out=datetime(2025, 1, 6, 9, 0, tzinfo=ZoneInfo("UTC")),
        status=AttendanceStatus.PRESENT,
    )

    res = resolve_status(employee(), [sc], rec, at(MONDAY, 18), CONFIG)

    assert res.status == AttendanceStatus.LATE
    assert res.patch == {"status": AttendanceStatus.LATE}


# --- clocked in and out -----------------------------------------------------


def test_completed_on_time_is_present():
    sc = assignment(days=["Monday"], start=time(8, 0), end=time(17, 0))
    rec = record(clock_in=at(MONDAY, 8, 0), clock_out=at(MONDAY, 17, 0), total_hours=9.0)

    res = resolve_status(employee(), [sc], rec, at(MONDAY, 20), CONFIG)

    assert res.status == AttendanceStatus.PRESENT
    assert res.changed is False
    assert res.hours == 9.0


def test_completed_after_start_is_late_with_default_tolerance():
    sc = assignment(days=["Monday"], start=time(8, 0), end=time(17, 0))
    rec = record(clock_in=at(MONDAY, 8, 1), clock_out=at(MONDAY, 17, 0), status=AttendanceStatus.LATE)

    res = resolve_status(employee(), [sc], rec, at(MONDAY, 20), CONFIG)

    assert res.status == AttendanceStatus.LATE
    assert res.state == DayState.LATE
    assert res.changed is False


def test_late_tolerance_keeps_small_delay_present():
    sc = assignment(days=["Monday"], start=time(8, 0), end=time(17, 0))
    rec = record(clock_in=at(MONDAY, 8, 10), clock_out=at(MONDAY, 17, 0), status=AttendanceStatus.LATE)
    config = ResolverConfig(late_tolerance_minutes=15)

    res = resolve_status(employee(), [sc], rec, at(MONDAY, 20), config)

    assert res.status == AttendanceStatus.PRESENT
    assert res.patch == {"status": AttendanceStatus.PRESENT}


def test_legacy_completed_status_reads_as_present_when_unscheduled():
    rec = record(clock_in=at(MONDAY, 9), clock_out=at(MONDAY, 18), status=AttendanceStatus.COMPLETED)

    res = resolve_status(employee(), [], rec, at(MONDAY, 20), CONFIG)

    assert res.status == AttendanceStatus.PRESENT
    assert res.hours == 9.0


# --- terminal states --------------------------------------------------------


@pytest.mark.parametrize(
    "status",
    [AttendanceStatus.ABSENT, AttendanceStatus.MISSED_CLOCK_OUT, AttendanceStatus.OVERTIME],
)
def test_terminal_and_overtime_records_are_never_rewritten(status):
    sc = assignment(days=["Monday"])
    clock_in = None if status == AttendanceStatus.ABSENT else at(MONDAY, 8)
    rec = record(clock_in=clock_in, status=status)

    res = resolve_status(employee(), [sc], rec, at(MONDAY + timedelta(days=3), 12), CONFIG)

    assert res.status == status
    assert res.changed is False


# --- overtime eligibility ---------------------------------------------------


def test_overtime_eligibility():
    sc = assignment(days=["Monday"])
    present = record(clock_in=at(MONDAY, 8), status=AttendanceStatus.PRESENT)
    late = record(clock_in=at(MONDAY, 9), status=AttendanceStatus.LATE)

    assert is_overtime_eligible([sc], present, MONDAY) is True
    assert is_overtime_eligible([sc], late, MONDAY) is True
    assert is_overtime_eligible([], present, MONDAY) is False
    assert is_overtime_eligible([sc], None, MONDAY) is False
    assert is_overtime_eligible([sc], record(clock_in=None, status=AttendanceStatus.ABSENT), MONDAY) is False
    assert is_overtime_eligible([sc], record(clock_in=at(MONDAY, 8), status=AttendanceStatus.OVERTIME), MONDAY) is False
