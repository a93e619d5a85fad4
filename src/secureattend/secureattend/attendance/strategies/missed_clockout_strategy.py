from __future__ import annotations

from ...common.datetime_utils import hours_between
from ...core.enums import AttendanceStatus
from .base import AttendanceStrategy, DecisionContext, StatusDecision


class MissedClockOutStrategy(AttendanceStrategy):
    """Clocked in, never clocked out: Missed Clock-out once shift end + grace has passed.

    Hours are measured up to ``now`` for display only; they are not written.
    """

    def decide(self, ctx: DecisionContext) -> StatusDecision:
        record = ctx.record
        hours = hours_between(record.clock_in, ctx.now) if record and record.clock_in else None

        if not ctx.grace_elapsed:
            return StatusDecision(status=record.status if record else None, hours=hours)

        return StatusDecision(
            status=AttendanceStatus.MISSED_CLOCK_OUT,
            patch={"status": AttendanceStatus.MISSED_CLOCK_OUT},
            hours=hours,
        )
