from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import AttendanceStatus, DayState

# Columns a caller may set through the attendance store.
WRITABLE_FIELDS = frozenset({"clock_in", "clock_out", "status", "total_hours", "overtime_hours"})


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: the primary attendance record of one employee on one date.

    ``version`` increases on every write and guards compare-and-swap updates.
    """

    attendance_id: int
    employee_id: str
    work_date: date
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    status: AttendanceStatus
    total_hours: Optional[float] = None
    overtime_hours: Optional[float] = None
    version: int = 0

    @property
    def is_open(self) -> bool:
        return self.clock_in is not None and self.clock_out is None


@dataclass(frozen=True)
class AttendanceDayRow:
    """Read-model for the "today's attendance" view."""

    employee_id: str
    full_name: str
    department: Optional[str]
    shift: Optional[str]
    state: DayState
    status: Optional[AttendanceStatus]
    clock_in: Optional[datetime]
    clock_out: Optional[datetime]
    hours: Optional[float]

    def to_dict(self) -> dict:
        return {
            "employee_id": self.employee_id,
            "full_name": self.full_name,
            "department": self.department or "-",
            "shift": self.shift or "-",
            "state": self.state.value,
            "status": self.status.value if self.status else None,
            "clock_in": self.clock_in.isoformat() if self.clock_in else None,
            "clock_out": self.clock_out.isoformat() if self.clock_out else None,
            "hours": self.hours,
        }


def record_to_dict(record: AttendanceRecord) -> dict:
    return {
        "attendance_id": record.attendance_id,
        "employee_id": record.employee_id,
        "work_date": record.work_date.strftime("%Y-%m-%d"),
        "clock_in": record.clock_in.isoformat() if record.clock_in else None,
        "clock_out": record.clock_out.isoformat() if record.clock_out else None,
        "status": record.status.value,
        "total_hours": record.total_hours,
        "overtime_hours": record.overtime_hours,
    }
