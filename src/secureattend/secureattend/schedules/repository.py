from __future__ import annotations

from typing import Protocol, Sequence

from .model import ScheduleAssignment


class ScheduleRepository(Protocol):
    """Read-only access to schedule assignments.

    Implementations return normalized assignments only; rows that fail to
    parse are logged and left out.
    """

    def get_active_for_employee(self, employee_id: str) -> Sequence[ScheduleAssignment]:
        raise NotImplementedError

    def list_active(self) -> Sequence[ScheduleAssignment]:
        raise NotImplementedError
