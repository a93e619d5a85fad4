from __future__ import annotations

import logging
from typing import Iterable, Sequence

from ..core.exceptions import DataError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall
from .model import ScheduleAssignment
from .recurrence import build_assignments
from .repository import ScheduleRepository

logger = logging.getLogger(__name__)

_COLUMNS = """
    id, employee_id, shift_name, start_time, end_time, days, schedule_dates,
    specific_date, shifts, start_date, end_date, department, status
"""


def _normalize(rows: Iterable[dict]) -> list[ScheduleAssignment]:
    out: list[ScheduleAssignment] = []
    for r in rows:
        try:
            out.extend(build_assignments(r))
        except DataError as e:
            logger.warning("Skipping schedule %s for %s: %s", r.get("id"), r.get("employee_id"), e)
    return out


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_active_for_employee(self, employee_id: str) -> Sequence[ScheduleAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employee_schedules
                WHERE employee_id=%s AND status='Active'
                ORDER BY id
                """,
                (employee_id,),
            )
            rows = fetchall(cur)
        return _normalize(rows)

    def list_active(self) -> Sequence[ScheduleAssignment]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM employee_schedules
                WHERE status='Active'
                ORDER BY employee_id, id
                """
            )
            rows = fetchall(cur)
        return _normalize(rows)
