from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from .model import Employee


class EmployeeRepository(Protocol):
    """Read-only employee lookups.

    Services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, employee_id: str) -> Optional[Employee]:
        raise NotImplementedError

    def list_by_ids(self, employee_ids: Iterable[str]) -> Sequence[Employee]:
        raise NotImplementedError
