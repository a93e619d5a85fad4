from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import IntEnum
from typing import FrozenSet, Optional, Union

from ..common.datetime_utils import weekday_name
from ..core.enums import ScheduleStatus
from ..shifts.model import Shift


class MatchKind(IntEnum):
    """How an assignment matched a date. Lower value wins a tie."""

    SPECIFIC_DATE = 0
    WEEKDAY = 1


@dataclass(frozen=True)
class Recurring:
    """Works every week on the listed weekday names ("Monday", ...)."""

    weekdays: FrozenSet[str]

    def includes(self, target: date) -> bool:
        return weekday_name(target) in self.weekdays

    kind = MatchKind.WEEKDAY


@dataclass(frozen=True)
class SpecificDates:
    """Works exactly on the listed calendar dates."""

    dates: FrozenSet[date]

    def includes(self, target: date) -> bool:
        return target in self.dates

    kind = MatchKind.SPECIFIC_DATE


Recurrence = Union[Recurring, SpecificDates]


@dataclass(frozen=True)
class ScheduleAssignment:
    """Links one employee to one shift on a recurrence.

    Stored rows are normalized into this shape by ``schedules.recurrence``;
    nothing downstream inspects the raw JSON again.
    """

    schedule_id: int
    employee_id: str
    shift: Shift
    recurrence: Recurrence
    status: ScheduleStatus = ScheduleStatus.ACTIVE
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    department: Optional[str] = None

    @property
    def is_active(self) -> bool:
        return self.status == ScheduleStatus.ACTIVE

    def in_bounds(self, target: date) -> bool:
        if self.start_date and target < self.start_date:
            return False
        if self.end_date and target > self.end_date:
            return False
        return True

    def match(self, target: date) -> Optional[MatchKind]:
        if not self.is_active or not self.in_bounds(target):
            return None
        if self.recurrence.includes(target):
            return self.recurrence.kind
        return None
