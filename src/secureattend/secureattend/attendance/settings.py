from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Mapping
from zoneinfo import ZoneInfo

from ..common.datetime_utils import get_zone
from ..common.validators import require_non_empty, require_non_negative_minutes
from ..core.constants import (
    DEFAULT_GRACE_PERIOD_MINUTES,
    DEFAULT_LATE_TOLERANCE_MINUTES,
    DEFAULT_TIMEZONE,
)


@dataclass(frozen=True)
class ResolverConfig:
    """Named options threaded into every status decision.

    Nothing here is read from the environment; ``config.*`` settings modules
    build one of these and the container passes it down.
    """

    grace_period_minutes: int = DEFAULT_GRACE_PERIOD_MINUTES
    timezone: str = DEFAULT_TIMEZONE
    late_tolerance_minutes: int = DEFAULT_LATE_TOLERANCE_MINUTES

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "grace_period_minutes", require_non_negative_minutes(self.grace_period_minutes, "grace_period_minutes")
        )
        object.__setattr__(
            self,
            "late_tolerance_minutes",
            require_non_negative_minutes(self.late_tolerance_minutes, "late_tolerance_minutes"),
        )
        object.__setattr__(self, "timezone", require_non_empty(self.timezone, "timezone"))
        get_zone(self.timezone)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "ResolverConfig":
        return cls(
            grace_period_minutes=values.get("grace_period_minutes", DEFAULT_GRACE_PERIOD_MINUTES),
            timezone=values.get("timezone", DEFAULT_TIMEZONE),
            late_tolerance_minutes=values.get("late_tolerance_minutes", DEFAULT_LATE_TOLERANCE_MINUTES),
        )

    @property
    def tz(self) -> ZoneInfo:
        return get_zone(self.timezone)

    @property
    def grace(self) -> timedelta:
        return timedelta(minutes=self.grace_period_minutes)

    @property
    def late_tolerance(self) -> timedelta:
        return timedelta(minutes=self.late_tolerance_minutes)
