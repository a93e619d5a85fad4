from __future__ import annotations

from datetime import date
from typing import Any, Iterable, Mapping, Optional, Sequence

from mysql.connector.errors import IntegrityError

from ..core.enums import AttendanceStatus
from ..core.exceptions import ConflictError, ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import (
    db_cursor,
    fetchall,
    fetchone,
    from_db_datetime,
    is_duplicate_key,
    to_db_datetime,
)
from .model import WRITABLE_FIELDS, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = "id, employee_id, work_date, clock_in, clock_out, status, total_hours, overtime_hours, version"


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["id"]),
        employee_id=str(r["employee_id"]),
        work_date=r["work_date"],
        clock_in=from_db_datetime(r.get("clock_in")),
        clock_out=from_db_datetime(r.get("clock_out")),
        status=AttendanceStatus(r["status"]),
        total_hours=float(r["total_hours"]) if r.get("total_hours") is not None else None,
        overtime_hours=float(r["overtime_hours"]) if r.get("overtime_hours") is not None else None,
        version=int(r.get("version") or 0),
    )


def _to_params(fields: Mapping[str, Any]) -> dict:
    unknown = set(fields) - WRITABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown attendance fields: {', '.join(sorted(unknown))}")

    out: dict = {}
    for key, value in fields.items():
        if key in ("clock_in", "clock_out"):
            value = to_db_datetime(value)
        elif key == "status":
            value = AttendanceStatus(value).value
        out[key] = value
    return out


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_record(self, employee_id: str, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendances WHERE employee_id=%s AND work_date=%s",
                (employee_id, work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendances WHERE id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_records(
        self,
        *,
        employee_id: Optional[str] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []
        if employee_id:
            clauses.append("employee_id=%s")
            params.append(employee_id)
        if start_date is not None:
            clauses.append("work_date>=%s")
            params.append(start_date)
        if end_date is not None:
            clauses.append("work_date<=%s")
            params.append(end_date)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                {where}
                ORDER BY work_date DESC, clock_in DESC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def list_for_date(
        self,
        work_date: date,
        *,
        statuses: Optional[Iterable[AttendanceStatus]] = None,
    ) -> Sequence[AttendanceRecord]:
        clauses = ["work_date=%s"]
        params: list[object] = [work_date]
        if statuses is not None:
            values = [AttendanceStatus(s).value for s in statuses]
            if not values:
                return []
            clauses.append(f"status IN ({', '.join(['%s'] * len(values))})")
            params.extend(values)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendances
                WHERE {" AND ".join(clauses)}
                ORDER BY employee_id ASC
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def create_record(self, *, employee_id: str, work_date: date, fields: Mapping[str, Any]) -> AttendanceRecord:
        params = _to_params(fields)
        if "status" not in params:
            raise ValidationError("status is required")

        columns = ["employee_id", "work_date", *params.keys(), "version"]
        values = [employee_id, work_date, *params.values(), 1]
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    f"""
                    INSERT INTO attendances({", ".join(columns)})
                    VALUES({", ".join(["%s"] * len(values))})
                    """,
                    tuple(values),
                )
                attendance_id = int(cur.lastrowid)
                cur.execute(f"SELECT {_COLUMNS} FROM attendances WHERE id=%s", (attendance_id,))
                return _to_record(fetchone(cur))
        except IntegrityError as e:
            if is_duplicate_key(e):
                raise ConflictError(f"Attendance for {employee_id} on {work_date} already exists") from e
            raise

    def update_record(
        self,
        *,
        attendance_id: int,
        fields: Mapping[str, Any],
        expected_version: int,
    ) -> Optional[AttendanceRecord]:
        params = _to_params(fields)
        assignments = [f"{k}=%s" for k in params] + ["version=version+1"]

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE attendances
                SET {", ".join(assignments)}
                WHERE id=%s AND version=%s
                """,
                (*params.values(), int(attendance_id), int(expected_version)),
            )
            if cur.rowcount == 0:
                return None
            cur.execute(f"SELECT {_COLUMNS} FROM attendances WHERE id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def upsert_record(
        self,
        *,
        employee_id: str,
        work_date: date,
        fields: Mapping[str, Any],
        expected_version: Optional[int],
    ) -> AttendanceRecord:
        if expected_version is None:
            return self.create_record(employee_id=employee_id, work_date=work_date, fields=fields)

        existing = self.get_record(employee_id, work_date)
        updated = None
        if existing is not None:
            updated = self.update_record(
                attendance_id=existing.attendance_id,
                fields=fields,
                expected_version=expected_version,
            )
        if updated is None:
            raise ConflictError(f"Attendance for {employee_id} on {work_date} changed concurrently")
        return updated
