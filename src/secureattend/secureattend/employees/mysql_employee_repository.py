from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import EmployeeStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = "employee_id, firstname, lastname, department, position, status"


def _to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=str(row["employee_id"]),
        firstname=row.get("firstname") or "",
        lastname=row.get("lastname") or "",
        department=row.get("department"),
        position=row.get("position"),
        status=EmployeeStatus(row.get("status") or EmployeeStatus.ACTIVE.value),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (employee_id,))
            row = fetchone(cur)
            return _to_employee(row) if row else None

    def list_by_ids(self, employee_ids: Iterable[str]) -> Sequence[Employee]:
        ids = [str(e) for e in employee_ids]
        if not ids:
            return []

        placeholders = ", ".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employees
                WHERE employee_id IN ({placeholders})
                ORDER BY employee_id
                """,
                tuple(ids),
            )
            return [_to_employee(r) for r in fetchall(cur)]
