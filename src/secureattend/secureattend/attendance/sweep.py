from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import now_in_zone, previous_day, to_zone
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError
from ..employees.repository import EmployeeRepository
from ..schedules.service import ScheduleService
from .factory import AttendanceStrategyFactory
from .repository import AttendanceRepository
from .resolver import match_schedule, resolve_status
from .settings import ResolverConfig

logger = logging.getLogger(__name__)

# The only transitions a sweep is allowed to write.
SWEEP_STATUSES = (AttendanceStatus.ABSENT, AttendanceStatus.MISSED_CLOCK_OUT)


@dataclass
class SweepResult:
    target_date: date
    scheduled: int = 0
    marked_absent: int = 0
    marked_missed_clockout: int = 0
    conflicts: int = 0
    errors: list[dict] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return self.marked_absent + self.marked_missed_clockout

    def to_dict(self) -> dict:
        return {
            "target_date": self.target_date.strftime("%Y-%m-%d"),
            "scheduled": self.scheduled,
            "marked_absent": self.marked_absent,
            "marked_missed_clockout": self.marked_missed_clockout,
            "conflicts": self.conflicts,
            "errors": list(self.errors),
            "total_processed": self.total_processed,
        }


class AbsenceSweep:
    """Batch pass writing Absent and Missed Clock-out transitions that are due.

    Each run re-reads state and writes only what the resolver allows, so
    repeated or overlapping runs converge on the same rows. Writes are
    inserts guarded by the (employee, date) unique key or version-checked
    updates; losing a race is counted as a conflict and left for the next run.
    """

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        schedules: ScheduleService,
        *,
        config: ResolverConfig,
        strategy_factory: Optional[AttendanceStrategyFactory] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._schedules = schedules
        self._config = config
        self._factory = strategy_factory or AttendanceStrategyFactory()

    def run(self, target_date: Optional[date] = None, *, now: Optional[datetime] = None) -> SweepResult:
        now = to_zone(now, self._config.tz) if now else now_in_zone(self._config.tz)
        target_date = target_date or now.date()
        result = SweepResult(target_date=target_date)

        by_employee = self._schedules.by_employee()
        scheduled = {
            employee_id: schedules
            for employee_id, schedules in by_employee.items()
            if match_schedule(schedules, target_date) is not None
        }
        result.scheduled = len(scheduled)
        employees = {e.employee_id: e for e in self._employees.list_by_ids(scheduled.keys())}

        for employee_id, schedules in scheduled.items():
            employee = employees.get(employee_id)
            if employee is None or not employee.is_active:
                logger.info("Skipping %s on %s: employee not found or inactive", employee_id, target_date)
                continue

            try:
                self._sweep_one(employee, schedules, target_date, now, result)
            except ConflictError as e:
                result.conflicts += 1
                logger.info("Conflict for %s on %s, left for next run: %s", employee_id, target_date, e)
            except Exception as e:
                logger.exception("Sweep failed for %s on %s", employee_id, target_date)
                result.errors.append({"employee_id": employee_id, "error": str(e)})

        logger.info(
            "Sweep %s: scheduled=%d absent=%d missed_clockout=%d conflicts=%d errors=%d",
            target_date,
            result.scheduled,
            result.marked_absent,
            result.marked_missed_clockout,
            result.conflicts,
            len(result.errors),
        )
        return result

    def run_due(self, *, now: Optional[datetime] = None) -> list[SweepResult]:
        """Sweep yesterday (overnight shifts ending today) and today."""

        now = to_zone(now, self._config.tz) if now else now_in_zone(self._config.tz)
        today = now.date()
        return [self.run(previous_day(today), now=now), self.run(today, now=now)]

    def _sweep_one(self, employee, schedules, target_date: date, now: datetime, result: SweepResult) -> None:
        record = self._attendance.get_record(employee.employee_id, target_date)
        resolution = resolve_status(
            employee,
            schedules,
            record,
            now,
            self._config,
            target_date=target_date,
            strategy_factory=self._factory,
        )
        if not resolution.changed or resolution.status not in SWEEP_STATUSES:
            return

        self._attendance.upsert_record(
            employee_id=employee.employee_id,
            work_date=target_date,
            fields=resolution.patch,
            expected_version=record.version if record else None,
        )

        if resolution.status == AttendanceStatus.ABSENT:
            result.marked_absent += 1
            logger.info("Marked %s Absent on %s (shift %s)", employee.employee_id, target_date, resolution.schedule.shift.label())
        else:
            result.marked_missed_clockout += 1
            logger.info(
                "Marked %s Missed Clock-out on %s (%.2fh since clock-in)",
                employee.employee_id,
                target_date,
                resolution.hours or 0.0,
            )
