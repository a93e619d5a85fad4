from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import now_in_zone, to_zone
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..schedules.service import ScheduleService
from .factory import AttendanceStrategyFactory
from .model import AttendanceDayRow, record_to_dict
from .repository import AttendanceRepository
from .resolver import Resolution, match_schedule, resolve_status
from .settings import ResolverConfig


class AttendanceService:
    """Read side: what the resolver says about one employee or one whole day."""

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

    @property
    def config(self) -> ResolverConfig:
        return self._config

    def _now(self, now: Optional[datetime]) -> datetime:
        return to_zone(now, self._config.tz) if now else now_in_zone(self._config.tz)

    def resolve_for(
        self,
        employee_id: str,
        target_date: Optional[date] = None,
        *,
        now: Optional[datetime] = None,
    ) -> Resolution:
        now = self._now(now)
        target_date = target_date or now.date()

        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")

        record = self._attendance.get_record(employee_id, target_date)
        return resolve_status(
            employee,
            self._schedules.for_employee(employee_id),
            record,
            now,
            self._config,
            target_date=target_date,
            strategy_factory=self._factory,
        )

    def day_view(self, target_date: Optional[date] = None, *, now: Optional[datetime] = None) -> list[AttendanceDayRow]:
        """Everyone scheduled on ``target_date`` plus anyone with a record that day."""

        now = self._now(now)
        target_date = target_date or now.date()

        by_employee = self._schedules.by_employee()
        records = {r.employee_id: r for r in self._attendance.list_for_date(target_date)}
        scheduled_ids = {
            employee_id
            for employee_id, schedules in by_employee.items()
            if match_schedule(schedules, target_date) is not None
        }
        employee_ids = sorted(scheduled_ids | set(records))
        employees = {e.employee_id: e for e in self._employees.list_by_ids(employee_ids)}

        rows: list[AttendanceDayRow] = []
        for employee_id in employee_ids:
            employee = employees.get(employee_id)
            if employee is None:
                continue

            record = records.get(employee_id)
            res = resolve_status(
                employee,
                by_employee.get(employee_id, []),
                record,
                now,
                self._config,
                target_date=target_date,
                strategy_factory=self._factory,
            )
            rows.append(
                AttendanceDayRow(
                    employee_id=employee_id,
                    full_name=employee.full_name,
                    department=employee.department,
                    shift=res.schedule.shift.label() if res.schedule else None,
                    state=res.state,
                    status=res.status,
                    clock_in=to_zone(record.clock_in, self._config.tz) if record and record.clock_in else None,
                    clock_out=to_zone(record.clock_out, self._config.tz) if record and record.clock_out else None,
                    hours=res.hours,
                )
            )
        return rows

    def history(
        self,
        *,
        employee_id: Optional[str] = None,
        work_date: Optional[date] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[dict]:
        """Stored attendance records with employee details, newest first.

        A ``start_date``/``end_date`` range takes precedence over ``work_date``.
        """

        if (start_date is None) != (end_date is None):
            raise ValidationError("start_date and end_date must be given together")
        if start_date is not None:
            if start_date > end_date:
                raise ValidationError("start_date must not be after end_date")
        elif work_date is not None:
            start_date = end_date = work_date

        records = self._attendance.list_records(employee_id=employee_id, start_date=start_date, end_date=end_date)
        employees = {e.employee_id: e for e in self._employees.list_by_ids({r.employee_id for r in records})}

        out = []
        for r in records:
            employee = employees.get(r.employee_id)
            item = record_to_dict(r)
            item.update(
                employee_name=employee.full_name if employee else "Unknown Employee",
                department=(employee.department if employee else None) or "N/A",
                position=(employee.position if employee else None) or "N/A",
            )
            out.append(item)
        return out
