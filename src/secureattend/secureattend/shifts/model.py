from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from zoneinfo import ZoneInfo


@dataclass(frozen=True)
class ShiftWindow:
    """Concrete start/end of one shift occurrence, timezone-aware."""

    start: datetime
    end: datetime

    @property
    def hours(self) -> float:
        return round((self.end - self.start).total_seconds() / 3600, 2)


@dataclass(frozen=True)
class Shift:
    """Domain entity: a work shift (name + daily time range).

    A shift whose end is not after its start (22:00-06:00) is overnight: it
    belongs to the date it starts on and ends on the following date.
    """

    shift_name: str
    start_time: time
    end_time: time

    @property
    def is_overnight(self) -> bool:
        return self.end_time <= self.start_time

    def window_for(self, work_date: date, tz: ZoneInfo) -> ShiftWindow:
        start = datetime.combine(work_date, self.start_time, tzinfo=tz)
        end_date = work_date + timedelta(days=1) if self.is_overnight else work_date
        end = datetime.combine(end_date, self.end_time, tzinfo=tz)
        return ShiftWindow(start=start, end=end)

    @property
    def scheduled_hours(self) -> float:
        start = datetime.combine(date.min, self.start_time)
        end = datetime.combine(date.min, self.end_time)
        if self.is_overnight:
            end += timedelta(days=1)
        return round((end - start).total_seconds() / 3600, 2)

    def label(self) -> str:
        return f"{self.shift_name} ({self.start_time.strftime('%H:%M')}-{self.end_time.strftime('%H:%M')})"
