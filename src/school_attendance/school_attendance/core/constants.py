"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_AUTO_NOTE = "Attendance was not recorded by the teacher"
DEFAULT_GRACE_MINUTES = 0
DEFAULT_LOOKBACK_DAYS = 0
DEFAULT_MAX_WORKERS = 4
DEFAULT_TIMEOUT_SECONDS = 30.0
SCHEDULE_SEPARATOR = "-"
