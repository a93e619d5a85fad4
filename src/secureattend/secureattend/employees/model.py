from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import EmployeeStatus


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee as referenced by schedules and attendance.

    Note: plain data object (no DB access). ``employee_id`` is the
    business-facing ID printed on badges, e.g. "TSI00123".
    """

    employee_id: str
    firstname: str
    lastname: str
    department: Optional[str] = None
    position: Optional[str] = None
    status: EmployeeStatus = EmployeeStatus.ACTIVE

    @property
    def full_name(self) -> str:
        name = f"{self.firstname} {self.lastname}".strip()
        return name or self.employee_id

    @property
    def is_active(self) -> bool:
        return self.status == EmployeeStatus.ACTIVE
