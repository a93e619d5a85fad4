"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_GRACE_PERIOD_MINUTES = 30
DEFAULT_LATE_TOLERANCE_MINUTES = 0
DEFAULT_TIMEZONE = "Asia/Manila"
DEFAULT_SWEEP_INTERVAL_MINUTES = 5
DEFAULT_REGULAR_SHIFT_HOURS = 8.0
DOUBLE_TAP_SECONDS = 10

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)
