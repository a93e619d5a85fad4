from __future__ import annotations

from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DecisionContext, StatusDecision


class AbsentStrategy(AttendanceStrategy):
    """Scheduled, no record: Absent once shift end + grace has passed."""

    def decide(self, ctx: DecisionContext) -> StatusDecision:
        if not ctx.grace_elapsed:
            return StatusDecision(status=None, note="within grace period")

        return StatusDecision(
            status=AttendanceStatus.ABSENT,
            patch={
                "clock_in": None,
                "clock_out": None,
                "status": AttendanceStatus.ABSENT,
                "total_hours": 0.0,
                "overtime_hours": 0.0,
            },
            hours=0.0,
        )
