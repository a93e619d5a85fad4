"""Attendance status resolution for one employee on one date.

Pure functions only: callers fetch the schedules and the record, pass them
in, and decide whether to persist ``Resolution.patch``.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional, Union

from ..common.datetime_utils import to_zone
from ..core.enums import AttendanceStatus, DayState
from ..employees.model import Employee
from ..schedules.model import ScheduleAssignment
from ..shifts.model import ShiftWindow
from .factory import AttendanceStrategyFactory
from .model import AttendanceRecord
from .settings import ResolverConfig
from .strategies.base import DecisionContext

_DEFAULT_FACTORY = AttendanceStrategyFactory()

_STATE_BY_STATUS = {
    AttendanceStatus.ABSENT: DayState.ABSENT,
    AttendanceStatus.MISSED_CLOCK_OUT: DayState.MISSED_CLOCK_OUT,
    AttendanceStatus.OVERTIME: DayState.OVERTIME,
}


@dataclass(frozen=True)
class Resolution:
    employee_id: str
    target_date: date
    state: DayState
    status: Optional[AttendanceStatus]
    patch: Mapping[str, Any] = field(default_factory=dict)
    schedule: Optional[ScheduleAssignment] = None
    window: Optional[ShiftWindow] = None
    hours: Optional[float] = None
    note: Optional[str] = None

    @property
    def changed(self) -> bool:
        return bool(self.patch)

    @property
    def scheduled(self) -> bool:
        return self.schedule is not None


def match_schedule(schedules: Iterable[ScheduleAssignment], target_date: date) -> Optional[ScheduleAssignment]:
    """Pick the assignment that puts the employee to work on ``target_date``.

    An explicit-date match beats a weekday match; ties go to the lowest
    schedule_id, then the earliest shift start.
    """

    best = None
    best_key = None
    for sc in schedules:
        kind = sc.match(target_date)
        if kind is None:
            continue
        key = (kind, sc.schedule_id, sc.shift.start_time)
        if best_key is None or key < best_key:
            best, best_key = sc, key
    return best


def is_scheduled(schedules: Iterable[ScheduleAssignment], target_date: date) -> bool:
    return match_schedule(schedules, target_date) is not None


def classify(schedule: Optional[ScheduleAssignment], record: Optional[AttendanceRecord]) -> DayState:
    """State before any transition is applied."""

    if record is None:
        return DayState.UNSCHEDULED if schedule is None else DayState.SCHEDULED_NO_RECORD

    if record.status in _STATE_BY_STATUS:
        return _STATE_BY_STATUS[record.status]
    if record.is_open:
        return DayState.CLOCKED_IN_OPEN
    if record.status == AttendanceStatus.LATE:
        return DayState.LATE
    return DayState.PRESENT


def _state_after(before: DayState, status: Optional[AttendanceStatus], record: Optional[AttendanceRecord]) -> DayState:
    if status is None:
        return before
    if status in _STATE_BY_STATUS:
        return _STATE_BY_STATUS[status]
    if record is not None and record.is_open:
        return DayState.CLOCKED_IN_OPEN
    if status == AttendanceStatus.LATE:
        return DayState.LATE
    return DayState.PRESENT


def _localize(record: Optional[AttendanceRecord], config: ResolverConfig) -> Optional[AttendanceRecord]:
    if record is None:
        return None
    tz = config.tz
    return replace(
        record,
        clock_in=to_zone(record.clock_in, tz) if record.clock_in else None,
        clock_out=to_zone(record.clock_out, tz) if record.clock_out else None,
    )


def resolve_status(
    employee: Union[Employee, str],
    schedules: Iterable[ScheduleAssignment],
    record: Optional[AttendanceRecord],
    now: datetime,
    config: Optional[ResolverConfig] = None,
    *,
    target_date: Optional[date] = None,
    strategy_factory: Optional[AttendanceStrategyFactory] = None,
) -> Resolution:
    """Decide the status of ``employee`` on ``target_date``.

    ``target_date`` defaults to the record's date, else to ``now``'s date in
    the business timezone. Assignments belonging to other employees are ignored.
    """

    config = config or ResolverConfig()
    factory = strategy_factory or _DEFAULT_FACTORY
    employee_id = employee.employee_id if isinstance(employee, Employee) else str(employee)

    now = to_zone(now, config.tz)
    record = _localize(record, config)
    if target_date is None:
        target_date = record.work_date if record else now.date()

    own = [sc for sc in schedules if sc.employee_id == employee_id]
    schedule = match_schedule(own, target_date)
    window = schedule.shift.window_for(target_date, config.tz) if schedule else None

    before = classify(schedule, record)
    ctx = DecisionContext(target_date=target_date, now=now, window=window, record=record, config=config)
    decision = factory.for_state(before).decide(ctx)

    return Resolution(
        employee_id=employee_id,
        target_date=target_date,
        state=_state_after(before, decision.status, record),
        status=decision.status,
        patch=dict(decision.patch),
        schedule=schedule,
        window=window,
        hours=decision.hours,
        note=decision.note,
    )


def is_overtime_eligible(
    schedules: Iterable[ScheduleAssignment],
    record: Optional[AttendanceRecord],
    target_date: date,
) -> bool:
    """Present or Late, clocked in, scheduled that day, and not already on overtime."""

    if record is None or record.clock_in is None:
        return False
    if record.status not in (AttendanceStatus.PRESENT, AttendanceStatus.LATE):
        return False
    return is_scheduled(schedules, target_date)
