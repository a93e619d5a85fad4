from datetime import date, datetime, time
from zoneinfo import ZoneInfo

import pytest

from secureattend.attendance.factory import AttendanceStrategyFactory
from secureattend.attendance.settings import ResolverConfig
from secureattend.attendance.strategies.absent_strategy import AbsentStrategy
from secureattend.attendance.strategies.base import DecisionContext
from secureattend.attendance.strategies.completed_strategy import CompletedStrategy
from secureattend.attendance.strategies.missed_clockout_strategy import MissedClockOutStrategy
from secureattend.attendance.strategies.unchanged_strategy import UnchangedStrategy
from secureattend.core.enums import DayState
from secureattend.shifts.model import Shift

MNL = ZoneInfo("Asia/Manila")


@pytest.mark.parametrize(
    "state, expected",
    [
        (DayState.SCHEDULED_NO_RECORD, AbsentStrategy),
        (DayState.CLOCKED_IN_OPEN, MissedClockOutStrategy),
        (DayState.PRESENT, CompletedStrategy),
        (DayState.LATE, CompletedStrategy),
        (DayState.UNSCHEDULED, UnchangedStrategy),
        (DayState.ABSENT, UnchangedStrategy),
        (DayState.MISSED_CLOCK_OUT, UnchangedStrategy),
        (DayState.OVERTIME, UnchangedStrategy),
    ],
)
def test_factory_picks_strategy_for_state(state, expected):
    assert isinstance(AttendanceStrategyFactory().for_state(state), expected)


def test_deadline_is_shift_end_plus_grace():
    shift = Shift(shift_name="Day", start_time=time(8, 0), end_time=time(17, 0))
    window = shift.window_for(date(2025, 1, 6), MNL)
    ctx = DecisionContext(
        target_date=date(2025, 1, 6),
        now=datetime(2025, 1, 6, 17, 30, tzinfo=MNL),
        window=window,
        record=None,
        config=ResolverConfig(grace_period_minutes=30),
    )

    assert ctx.deadline == datetime(2025, 1, 6, 17, 30, tzinfo=MNL)
    assert ctx.grace_elapsed is True


def test_no_window_never_elapses():
    ctx = DecisionContext(
        target_date=date(2025, 1, 6),
        now=datetime(2025, 1, 6, 23, 59, tzinfo=MNL),
        window=None,
        record=None,
        config=ResolverConfig(),
    )

    assert ctx.deadline is None
    assert ctx.grace_elapsed is False
