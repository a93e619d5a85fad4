from __future__ import annotations

from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo

import pytest

from secureattend.attendance.service import AttendanceService
from secureattend.attendance.settings import ResolverConfig
from secureattend.core.enums import AttendanceStatus, DayState
from secureattend.core.exceptions import NotFoundError, ValidationError
from secureattend.schedules.service import ScheduleService

from tests.fakes import InMemoryAttendance, InMemoryEmployees, InMemorySchedules, assignment, employee

MNL = ZoneInfo("Asia/Manila")
MONDAY = date(2025, 1, 6)


def at(hh: int, mm: int = 0) -> datetime:
    return datetime.combine(MONDAY, time(hh, mm), tzinfo=MNL)


def make_service():
    attendance = InMemoryAttendance()
    service = AttendanceService(
        attendance,
        InMemoryEmployees(employee("E1"), employee("E2"), employee("E3")),
        ScheduleService(
            InMemorySchedules(
                assignment("E1", days=["Monday"], schedule_id=1),
                assignment("E2", days=["Monday"], schedule_id=2),
            )
        ),
        config=ResolverConfig(timezone="Asia/Manila"),
    )
    return service, attendance


def test_day_view_lists_scheduled_and_recorded_employees():
    service, attendance = make_service()
    attendance.add("E2", MONDAY, clock_in=at(8), status=AttendanceStatus.PRESENT)
    attendance.add("E3", MONDAY, clock_in=at(10), clock_out=at(12), status=AttendanceStatus.PRESENT)

    rows = service.day_view(MONDAY, now=at(12, 30))

    assert [r.employee_id for r in rows] == ["E1", "E2", "E3"]
    e1, e2, e3 = rows
    assert e1.state == DayState.SCHEDULED_NO_RECORD
    assert e1.status is None
    assert e2.state == DayState.CLOCKED_IN_OPEN
    assert e2.hours == 4.5
    assert e3.shift is None
    assert e3.status == AttendanceStatus.PRESENT
    assert e3.to_dict()["shift"] == "-"


def test_day_view_does_not_write():
    service, attendance = make_service()

    rows = service.day_view(MONDAY, now=at(23))

    assert rows[0].status == AttendanceStatus.ABSENT
    assert attendance.all() == []


def test_resolve_for_unknown_employee():
    service, _ = make_service()

    with pytest.raises(NotFoundError):
        service.resolve_for("NOPE", MONDAY, now=at(9))


def test_resolve_for_defaults_to_today_in_business_timezone():
    service, _ = make_service()

    res = service.resolve_for("E1", now=at(9))

    assert res.target_date == MONDAY
    assert res.scheduled is True


def test_history_filters_and_orders_newest_first():
    service, attendance = make_service()
    tuesday = MONDAY + timedelta(days=1)
    attendance.add("E1", MONDAY, clock_in=at(8), status=AttendanceStatus.PRESENT)
    attendance.add("E2", MONDAY, clock_in=at(9), status=AttendanceStatus.LATE)
    attendance.add("E1", tuesday, status=AttendanceStatus.ABSENT)
    attendance.add("GONE", MONDAY, clock_in=at(7), status=AttendanceStatus.PRESENT)

    everything = service.history()
    assert [(r["employee_id"], r["work_date"]) for r in everything] == [
        ("E1", "2025-01-07"),
        ("E2", "2025-01-06"),
        ("E1", "2025-01-06"),
        ("GONE", "2025-01-06"),
    ]
    assert everything[-1]["employee_name"] == "Unknown Employee"
    assert everything[-1]["department"] == "N/A"

    assert [r["work_date"] for r in service.history(employee_id="E1")] == ["2025-01-07", "2025-01-06"]
    assert [r["employee_id"] for r in service.history(work_date=tuesday)] == ["E1"]
    ranged = service.history(work_date=tuesday, start_date=MONDAY, end_date=MONDAY)
    assert {r["work_date"] for r in ranged} == {"2025-01-06"}
    assert ranged[0]["employee_name"] == "Ana Cruz-E2"


@pytest.mark.parametrize("start, end", [(MONDAY, None), (MONDAY + timedelta(days=1), MONDAY)])
def test_history_rejects_bad_ranges(start, end):
    service, _ = make_service()

    with pytest.raises(ValidationError):
        service.history(start_date=start, end_date=end)
