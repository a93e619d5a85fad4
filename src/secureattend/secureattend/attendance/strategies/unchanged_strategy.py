from __future__ import annotations

from .base import AttendanceStrategy, DecisionContext, StatusDecision


class UnchangedStrategy(AttendanceStrategy):
    """Nothing to do: unscheduled day, a terminal status, or an overtime session."""

    def decide(self, ctx: DecisionContext) -> StatusDecision:
        record = ctx.record
        if record is None:
            return StatusDecision(status=None)
        return StatusDecision(status=record.status, hours=record.total_hours)
