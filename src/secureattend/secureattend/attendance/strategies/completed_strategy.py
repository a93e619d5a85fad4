from __future__ import annotations

from ...common.datetime_utils import hours_between
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DecisionContext, StatusDecision


class CompletedStrategy(AttendanceStrategy):
    """Clocked in and out: Present, or Late when clock-in came after start + tolerance."""

    def decide(self, ctx: DecisionContext) -> StatusDecision:
        record = ctx.record
        if record is None or record.clock_in is None:
            return StatusDecision(status=record.status if record else None)

        hours = record.total_hours
        if hours is None and record.clock_out is not None:
            hours = hours_between(record.clock_in, record.clock_out)

        if ctx.window is None:
            legacy = (AttendanceStatus.COMPLETED, AttendanceStatus.IN)
            status = AttendanceStatus.PRESENT if record.status in legacy else record.status
        elif record.clock_in > ctx.window.start + ctx.config.late_tolerance:
            status = AttendanceStatus.LATE
        else:
            status = AttendanceStatus.PRESENT

        patch = {"status": status} if status != record.status else {}
        return StatusDecision(status=status, patch=patch, hours=hours)
