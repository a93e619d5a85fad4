from __future__ import annotations

from collections import defaultdict
from datetime import date

from ..attendance.resolver import match_schedule
from .model import ScheduleAssignment
from .repository import ScheduleRepository


class ScheduleService:
    def __init__(self, schedules: ScheduleRepository):
        self._schedules = schedules

    def for_employee(self, employee_id: str) -> list[ScheduleAssignment]:
        return list(self._schedules.get_active_for_employee(str(employee_id)))

    def by_employee(self) -> dict[str, list[ScheduleAssignment]]:
        grouped: dict[str, list[ScheduleAssignment]] = defaultdict(list)
        for sc in self._schedules.list_active():
            grouped[sc.employee_id].append(sc)
        return dict(grouped)

    def scheduled_on(self, work_date: date) -> dict[str, ScheduleAssignment]:
        """Employees expected at work on ``work_date`` and the assignment that says so."""

        out: dict[str, ScheduleAssignment] = {}
        for employee_id, schedules in self.by_employee().items():
            sc = match_schedule(schedules, work_date)
            if sc is not None:
                out[employee_id] = sc
        return out
