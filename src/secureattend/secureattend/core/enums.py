from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Status values stored on an attendance record."""

    PRESENT = "Present"
    LATE = "Late"
    ABSENT = "Absent"
    OVERTIME = "Overtime"
    MISSED_CLOCK_OUT = "Missed Clock-out"

    # Legacy values written by older biometric clients.
    IN = "IN"
    COMPLETED = "COMPLETED"


class DayState(str, Enum):
    """Where an employee stands for one calendar date."""

    UNSCHEDULED = "Unscheduled"
    SCHEDULED_NO_RECORD = "ScheduledNoRecord"
    CLOCKED_IN_OPEN = "ClockedInOpen"
    PRESENT = "Present"
    LATE = "Late"
    ABSENT = "Absent"
    MISSED_CLOCK_OUT = "MissedClockOut"
    OVERTIME = "Overtime"


class EmployeeStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"


class ScheduleStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
