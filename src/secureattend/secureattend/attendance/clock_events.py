from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Iterable, Mapping, Optional

from ..common.datetime_utils import coerce_date, hours_between, now_in_zone, parse_timestamp, previous_day, to_zone
from ..core.constants import DEFAULT_REGULAR_SHIFT_HOURS, DOUBLE_TAP_SECONDS
from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, DomainError, NotFoundError, ValidationError
from ..employees.repository import EmployeeRepository
from ..schedules.service import ScheduleService
from ..shifts.model import ShiftWindow
from .model import AttendanceRecord
from .repository import AttendanceRepository
from .resolver import match_schedule
from .settings import ResolverConfig

logger = logging.getLogger(__name__)

_OPEN_STATUSES = (
    AttendanceStatus.PRESENT,
    AttendanceStatus.LATE,
    AttendanceStatus.IN,
    AttendanceStatus.OVERTIME,
    AttendanceStatus.MISSED_CLOCK_OUT,
)

# Synced statuses only ever move up this order.
_SYNC_PRIORITY = {
    AttendanceStatus.OVERTIME: 5,
    AttendanceStatus.MISSED_CLOCK_OUT: 4,
    AttendanceStatus.LATE: 3,
    AttendanceStatus.PRESENT: 2,
    AttendanceStatus.ABSENT: 1,
    AttendanceStatus.IN: 1,
}


@dataclass
class SyncResult:
    created: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    details: list[dict] = field(default_factory=list)

    def add(self, employee_id: str, action: str, message: str) -> None:
        if action == "created":
            self.created += 1
        elif action == "updated":
            self.updated += 1
        elif action == "skipped":
            self.skipped += 1
        else:
            self.errors += 1
        self.details.append({"employee_id": employee_id, "action": action, "message": message})

    def to_dict(self) -> dict:
        return {
            "message": "Sync completed",
            "results": {
                "created": self.created,
                "updated": self.updated,
                "skipped": self.skipped,
                "errors": self.errors,
                "details": list(self.details),
            },
        }


class ClockEventService:
    """Applies clock-in/clock-out events arriving from the biometric sync channel.

    Every write goes through the unique (employee, date) record: an Absent
    row written by the sweep is upgraded in place, never duplicated.
    """

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

    def _require_employee(self, employee_id: str):
        employee = self._employees.get_by_id(employee_id)
        if not employee:
            raise NotFoundError(f"Employee {employee_id} not found")
        return employee

    def _window_on(self, employee_id: str, work_date: date) -> Optional[ShiftWindow]:
        sc = match_schedule(self._schedules.for_employee(employee_id), work_date)
        return sc.shift.window_for(work_date, self._config.tz) if sc else None

    def _session_for(self, employee_id: str, clock_in: datetime) -> tuple[date, Optional[ShiftWindow]]:
        """Work date a clock-in belongs to, with the shift window it is measured against.

        A clock-in after midnight that still falls inside yesterday's
        overnight window belongs to yesterday.
        """

        yesterday = previous_day(clock_in.date())
        sc = match_schedule(self._schedules.for_employee(employee_id), yesterday)
        if sc is not None and sc.shift.is_overnight:
            window = sc.shift.window_for(yesterday, self._config.tz)
            if clock_in < window.end:
                return yesterday, window
        return clock_in.date(), self._window_on(employee_id, clock_in.date())

    def _clock_in_status(self, clock_in: datetime, window: Optional[ShiftWindow]) -> AttendanceStatus:
        if window is not None and clock_in > window.start + self._config.late_tolerance:
            return AttendanceStatus.LATE
        return AttendanceStatus.PRESENT

    def record_clock_in(
        self,
        employee_id: str,
        clock_in: Optional[datetime] = None,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        self._require_employee(employee_id)

        tz = self._config.tz
        clock_in = to_zone(clock_in or now or now_in_zone(tz), tz)
        work_date, window = self._session_for(employee_id, clock_in)
        status = self._clock_in_status(clock_in, window)
        fields = {
            "clock_in": clock_in,
            "clock_out": None,
            "status": status,
            "total_hours": None,
            "overtime_hours": None,
        }

        # One retry covers a sweep inserting Absent between our read and insert.
        for attempt in range(2):
            existing = self._attendance.get_record(employee_id, work_date)

            if existing is None:
                try:
                    record = self._attendance.create_record(employee_id=employee_id, work_date=work_date, fields=fields)
                except ConflictError:
                    if attempt:
                        raise
                    continue
                logger.info("Clock-in %s on %s (%s)", employee_id, work_date, status.value)
                return record

            if existing.status == AttendanceStatus.ABSENT:
                record = self._attendance.update_record(
                    attendance_id=existing.attendance_id,
                    fields=fields,
                    expected_version=existing.version,
                )
                if record is None:
                    if attempt:
                        raise ConflictError(f"Attendance for {employee_id} on {work_date} changed concurrently")
                    continue
                logger.info("Absent record upgraded to clock-in for %s on %s", employee_id, work_date)
                return record

            if existing.is_open:
                raise ValidationError("Employee already has an open session today")
            raise ConflictError("Attendance record already exists for today")

        raise ConflictError(f"Attendance for {employee_id} on {work_date} changed concurrently")

    def _find_open_session(self, employee_id: str, clock_out: datetime) -> Optional[AttendanceRecord]:
        for work_date in (clock_out.date(), previous_day(clock_out.date())):
            record = self._attendance.get_record(employee_id, work_date)
            if record and record.is_open and record.status in _OPEN_STATUSES:
                return record
        return None

    def _scheduled_hours(self, record: AttendanceRecord) -> float:
        sc = match_schedule(self._schedules.for_employee(record.employee_id), record.work_date)
        return sc.shift.scheduled_hours if sc else DEFAULT_REGULAR_SHIFT_HOURS

    def record_clock_out(
        self,
        employee_id: str,
        clock_out: Optional[datetime] = None,
        *,
        now: Optional[datetime] = None,
    ) -> AttendanceRecord:
        self._require_employee(employee_id)

        tz = self._config.tz
        clock_out = to_zone(clock_out or now or now_in_zone(tz), tz)

        session = self._find_open_session(employee_id, clock_out)
        if session is None:
            raise NotFoundError("No open session found for clock-out")

        clock_in = to_zone(session.clock_in, tz)
        if (clock_out - clock_in).total_seconds() < DOUBLE_TAP_SECONDS:
            raise ValidationError("Please wait before scanning again")

        total_hours = hours_between(clock_in, clock_out)
        fields: dict = {"clock_out": clock_out, "total_hours": total_hours}

        if session.status == AttendanceStatus.OVERTIME:
            fields["overtime_hours"] = round(max(0.0, total_hours - self._scheduled_hours(session)), 2)
        elif session.status == AttendanceStatus.IN:
            fields["status"] = self._clock_in_status(clock_in, self._window_on(employee_id, session.work_date))

        record = self._attendance.update_record(
            attendance_id=session.attendance_id,
            fields=fields,
            expected_version=session.version,
        )
        if record is None:
            raise ConflictError(f"Attendance for {employee_id} on {session.work_date} changed concurrently")

        logger.info("Clock-out %s for %s, total hours %.2f", employee_id, session.work_date, total_hours)
        return record

    # --- batch sync from the biometric app ---

    def _sync_timestamp(self, value: Any, key: str) -> Optional[datetime]:
        if value in (None, ""):
            return None
        if isinstance(value, datetime):
            return to_zone(value, self._config.tz)
        try:
            return parse_timestamp(str(value), self._config.tz)
        except ValueError as e:
            raise ValidationError(f"Invalid {key} date format") from e

    @staticmethod
    def _sync_hours(value: Any, key: str) -> Optional[float]:
        if value in (None, ""):
            return None
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"{key} must be a number") from e

    @staticmethod
    def _sync_status(value: Any) -> Optional[AttendanceStatus]:
        if not value:
            return None
        try:
            return AttendanceStatus(value)
        except ValueError as e:
            raise ValidationError(f"Unknown status {value!r}") from e

    def _sync_one(self, item: Mapping[str, Any]) -> tuple[str, str]:
        employee_id = str(item.get("employee_id") or "").strip()
        if not employee_id or not item.get("date"):
            raise ValidationError("Missing employee_id or date")
        try:
            work_date = coerce_date(item["date"])
        except (TypeError, ValueError) as e:
            raise ValidationError("date must be YYYY-MM-DD") from e

        if not self._employees.get_by_id(employee_id):
            raise NotFoundError("Employee not found")

        clock_in = self._sync_timestamp(item.get("clock_in"), "clock_in")
        clock_out = self._sync_timestamp(item.get("clock_out"), "clock_out")
        status = self._sync_status(item.get("status"))
        total_hours = self._sync_hours(item.get("total_hours"), "total_hours")
        overtime_hours = self._sync_hours(item.get("overtime_hours"), "overtime_hours")

        for attempt in range(2):
            existing = self._attendance.get_record(employee_id, work_date)

            if existing is None:
                fields = {
                    "clock_in": clock_in,
                    "clock_out": clock_out,
                    "status": status or AttendanceStatus.PRESENT,
                    "total_hours": total_hours,
                    "overtime_hours": overtime_hours,
                }
                action = "created"
            else:
                fields = {}
                if clock_in is not None and existing.clock_in is None:
                    fields["clock_in"] = clock_in
                if clock_out is not None and existing.clock_out is None:
                    fields["clock_out"] = clock_out
                if total_hours is not None and total_hours != existing.total_hours:
                    fields["total_hours"] = total_hours
                if status is not None and _SYNC_PRIORITY.get(status, 0) > _SYNC_PRIORITY.get(existing.status, 0):
                    fields["status"] = status
                if overtime_hours is not None and overtime_hours != existing.overtime_hours:
                    fields["overtime_hours"] = overtime_hours
                if not fields:
                    return employee_id, "skipped"
                action = "updated"

            try:
                self._attendance.upsert_record(
                    employee_id=employee_id,
                    work_date=work_date,
                    fields=fields,
                    expected_version=existing.version if existing else None,
                )
            except ConflictError:
                if attempt:
                    raise
                continue
            logger.info("Sync %s attendance for %s on %s", action, employee_id, work_date)
            return employee_id, action

        raise ConflictError(f"Attendance for {employee_id} on {work_date} changed concurrently")

    def sync(self, records: Iterable[Mapping[str, Any]]) -> SyncResult:
        """Merge attendance records pushed by the biometric app.

        Missing clock-in/clock-out values are filled in, never overwritten,
        and a status is only replaced by one ranked higher. Each record is
        handled on its own; a failure is reported and the batch continues.
        """

        if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Iterable):
            raise ValidationError("records array is required")

        result = SyncResult()
        messages = {
            "created": "New record created from biometric app",
            "updated": "Record updated from biometric app",
            "skipped": "No updates needed",
        }
        for item in records:
            employee_id = str(item.get("employee_id") or "unknown") if isinstance(item, Mapping) else "unknown"
            try:
                if not isinstance(item, Mapping):
                    raise ValidationError("Each record must be an object")
                employee_id, action = self._sync_one(item)
                result.add(employee_id, action, messages[action])
            except DomainError as e:
                result.add(employee_id, "error", str(e))
            except Exception as e:
                logger.exception("Error syncing attendance for %s", employee_id)
                result.add(employee_id, "error", str(e))

        logger.info(
            "Biometric sync: %d created, %d updated, %d skipped, %d errors",
            result.created,
            result.updated,
            result.skipped,
            result.errors,
        )
        return result
