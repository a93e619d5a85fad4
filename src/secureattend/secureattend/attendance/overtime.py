from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from ..common.datetime_utils import now_in_zone
from ..common.validators import require_non_empty, require_non_negative_hours, require_positive_hours
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..schedules.service import ScheduleService
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .resolver import is_overtime_eligible, is_scheduled
from .settings import ResolverConfig

logger = logging.getLogger(__name__)


@dataclass
class OvertimeBatchResult:
    target_date: date
    reason: str
    overtime_hours: float
    results: list[dict] = field(default_factory=list)

    @property
    def success(self) -> int:
        return sum(1 for r in self.results if r["success"])

    @property
    def errors(self) -> int:
        return len(self.results) - self.success

    def to_dict(self) -> dict:
        return {
            "message": f"Overtime assignment complete: {self.success} success, {self.errors} errors",
            "target_date": self.target_date.strftime("%Y-%m-%d"),
            "reason": self.reason,
            "overtime_hours": self.overtime_hours,
            "results": list(self.results),
            "summary": {"total": len(self.results), "success": self.success, "errors": self.errors},
        }


class OvertimeService:
    """Admin-triggered overtime: Present|Late -> Overtime, and back while the session is open."""

    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        schedules: ScheduleService,
        *,
        config: ResolverConfig,
    ):
        self._attendance = attendance
        self._employees = employees
        self._schedules = schedules
        self._config = config

    def _today(self) -> date:
        return now_in_zone(self._config.tz).date()

    def list_eligible(self, target_date: Optional[date] = None) -> list[Employee]:
        target_date = target_date or self._today()
        records = self._attendance.list_for_date(
            target_date,
            statuses=(AttendanceStatus.PRESENT, AttendanceStatus.LATE),
        )
        eligible_ids = [
            r.employee_id
            for r in records
            if is_overtime_eligible(self._schedules.for_employee(r.employee_id), r, target_date)
        ]
        return [e for e in self._employees.list_by_ids(eligible_ids) if e.is_active]

    def assign_one(self, employee_id: str, overtime_hours: float, target_date: Optional[date] = None) -> AttendanceRecord:
        target_date = target_date or self._today()
        hours = require_positive_hours(overtime_hours, "overtime_hours")

        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")

        record = self._attendance.get_record(employee_id, target_date)
        if record is None or record.clock_in is None:
            raise NotFoundError("Employee must clock in for regular shift before overtime assignment")
        if record.status == AttendanceStatus.OVERTIME:
            raise ConflictError("Already has overtime assignment for this date")
        if record.status not in (AttendanceStatus.PRESENT, AttendanceStatus.LATE):
            raise ValidationError(f"Cannot assign overtime to a {record.status.value} record")
        if not is_scheduled(self._schedules.for_employee(employee_id), target_date):
            raise ValidationError("Employee is not scheduled to work on this date")

        updated = self._attendance.update_record(
            attendance_id=record.attendance_id,
            fields={"status": AttendanceStatus.OVERTIME, "overtime_hours": hours},
            expected_version=record.version,
        )
        if updated is None:
            raise ConflictError("Attendance record changed, try again")

        logger.info("Overtime assigned to %s for %s (%.2fh)", employee_id, target_date, hours)
        return updated

    def assign(
        self,
        employee_ids: Iterable[str],
        overtime_hours: float,
        reason: str,
        target_date: Optional[date] = None,
    ) -> OvertimeBatchResult:
        target_date = target_date or self._today()
        reason = require_non_empty(reason, "reason")
        hours = require_positive_hours(overtime_hours, "overtime_hours")
        ids = [str(e) for e in employee_ids]
        if not ids:
            raise ValidationError("employee_id or employee_ids is required")

        batch = OvertimeBatchResult(target_date=target_date, reason=reason, overtime_hours=hours)
        for employee_id in ids:
            try:
                record = self.assign_one(employee_id, hours, target_date)
                batch.results.append({"employee_id": employee_id, "success": True, "attendance_id": record.attendance_id})
            except DomainError as e:
                batch.results.append({"employee_id": employee_id, "success": False, "error": str(e)})
            except Exception as e:
                logger.exception("Error assigning overtime to %s", employee_id)
                batch.results.append({"employee_id": employee_id, "success": False, "error": str(e)})

        logger.info("Overtime assignment complete: %d success, %d errors", batch.success, batch.errors)
        return batch

    def remove(self, employee_id: str, target_date: Optional[date] = None) -> AttendanceRecord:
        target_date = target_date or self._today()

        record = self._attendance.get_record(employee_id, target_date)
        if record is None or record.status != AttendanceStatus.OVERTIME:
            raise NotFoundError("No overtime assignment found for this employee")
        if record.clock_out is not None:
            raise ValidationError("Cannot remove overtime - employee has already completed overtime work")

        updated = self._attendance.update_record(
            attendance_id=record.attendance_id,
            fields={"status": AttendanceStatus.PRESENT, "overtime_hours": None},
            expected_version=record.version,
        )
        if updated is None:
            raise ConflictError("Attendance record changed, try again")
        return updated

    def update_hours(self, attendance_id: int, overtime_hours: float) -> dict:
        """Admin correction of the hours on an Overtime record."""

        hours = require_non_negative_hours(overtime_hours, "overtime_hours")
        try:
            attendance_id = int(attendance_id)
        except (TypeError, ValueError) as e:
            raise ValidationError("attendance_id must be an integer") from e

        record = self._attendance.get_by_id(attendance_id)
        if record is None:
            raise NotFoundError("Attendance record not found")
        if record.status != AttendanceStatus.OVERTIME:
            raise ValidationError("Can only update overtime hours for records with Overtime status")

        updated = self._attendance.update_record(
            attendance_id=record.attendance_id,
            fields={"overtime_hours": hours},
            expected_version=record.version,
        )
        if updated is None:
            raise ConflictError("Attendance record changed, try again")

        employee = self._employees.get_by_id(record.employee_id)
        logger.info("Overtime hours updated for %s: %s -> %.2f", record.employee_id, record.overtime_hours, hours)
        return {
            "attendance_id": updated.attendance_id,
            "employee_id": updated.employee_id,
            "employee_name": employee.full_name if employee else updated.employee_id,
            "date": updated.work_date.strftime("%Y-%m-%d"),
            "previous_overtime_hours": record.overtime_hours,
            "new_overtime_hours": updated.overtime_hours,
        }

    def list_assignments(self, target_date: Optional[date] = None) -> list[dict]:
        target_date = target_date or self._today()
        records = self._attendance.list_for_date(target_date, statuses=(AttendanceStatus.OVERTIME,))
        employees = {e.employee_id: e for e in self._employees.list_by_ids(r.employee_id for r in records)}

        out = []
        for r in records:
            employee = employees.get(r.employee_id)
            out.append(
                {
                    "attendance_id": r.attendance_id,
                    "employee_id": r.employee_id,
                    "employee_name": employee.full_name if employee else "Unknown Employee",
                    "department": employee.department if employee else None,
                    "clock_in": r.clock_in.isoformat() if r.clock_in else None,
                    "clock_out": r.clock_out.isoformat() if r.clock_out else None,
                    "overtime_hours": r.overtime_hours,
                }
            )
        return out
