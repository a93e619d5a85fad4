from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Mapping, Optional

from ...core.enums import AttendanceStatus
from ...shifts.model import ShiftWindow
from ..model import AttendanceRecord
from ..settings import ResolverConfig


@dataclass(frozen=True)
class DecisionContext:
    """Everything a strategy may look at. Already fetched; no store access."""

    target_date: date
    now: datetime
    window: Optional[ShiftWindow]
    record: Optional[AttendanceRecord]
    config: ResolverConfig

    @property
    def deadline(self) -> Optional[datetime]:
        """Shift end plus grace period; None when the day has no shift."""
        if self.window is None:
            return None
        return self.window.end + self.config.grace

    @property
    def grace_elapsed(self) -> bool:
        deadline = self.deadline
        return deadline is not None and self.now >= deadline


@dataclass(frozen=True)
class StatusDecision:
    """Outcome of one strategy.

    ``status`` is what to display (None: nothing recorded for the day).
    ``patch`` holds the fields to write; empty means no write is due.
    """

    status: Optional[AttendanceStatus]
    patch: Mapping[str, Any] = field(default_factory=dict)
    hours: Optional[float] = None
    note: Optional[str] = None


class AttendanceStrategy(ABC):
    """Strategy Pattern: encapsulate how we decide an attendance status."""

    @abstractmethod
    def decide(self, ctx: DecisionContext) -> StatusDecision:
        raise NotImplementedError
