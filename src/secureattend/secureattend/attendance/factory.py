from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import DayState
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AttendanceStrategy
from .strategies.completed_strategy import CompletedStrategy
from .strategies.missed_clockout_strategy import MissedClockOutStrategy
from .strategies.unchanged_strategy import UnchangedStrategy


@dataclass
class AttendanceStrategyFactory:
    """Factory Pattern: choose the strategy for the state an employee is in."""

    def for_state(self, state: DayState) -> AttendanceStrategy:
        if state == DayState.SCHEDULED_NO_RECORD:
            return AbsentStrategy()
        if state == DayState.CLOCKED_IN_OPEN:
            return MissedClockOutStrategy()
        if state in (DayState.PRESENT, DayState.LATE):
            return CompletedStrategy()
        return UnchangedStrategy()
