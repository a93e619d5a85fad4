from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceRecord


class AttendanceRepository(Protocol):
    """Attendance store.

    At most one record exists per (employee_id, work_date); implementations
    enforce it with a unique key and never insert blindly.
    """

    def get_record(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_date(
        self,
        work_date: date,
        *,
        statuses: Optional[Iterable[AttendanceStatus]] = None,
    ) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_records(
        self,
        *,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        """History listing, newest work date first; bounds are inclusive."""

        raise NotImplementedError

    def create_record(self, *, employee_id: str, work_date: date, fields: Mapping[str, Any]) -> AttendanceRecord:
        """Insert the record for (employee_id, work_date).

        Raises ConflictError when one already exists.
        """

        raise NotImplementedError

    def update_record(
        self,
        *,
        attendance_id: int,
        fields: Mapping[str, Any],
        expected_version: int,
    ) -> Optional[AttendanceRecord]:
        """Compare-and-swap update.

        Returns None when the stored version no longer matches.
        """

        raise NotImplementedError

    def upsert_record(
        self,
        *,
        employee_id: str,
        work_date: date,
        fields: Mapping[str, Any],
        expected_version: Optional[int],
    ) -> AttendanceRecord:
        """Write the record keyed on (employee_id, work_date).

        ``expected_version`` is the version the caller read, or None when it
        saw no record. Inserts when None, otherwise CAS-updates; raises
        ConflictError when the stored row no longer matches what was read.
        """

        raise NotImplementedError
