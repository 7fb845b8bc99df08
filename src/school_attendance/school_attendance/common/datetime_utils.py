from __future__ import annotations

from datetime import datetime, time

from ..core.constants import SCHEDULE_SEPARATOR
from ..core.exceptions import ValidationError


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so it can be injected as the clock and replaced in tests.
    """
    return datetime.now()


def _parse_hhmm(value: str) -> time:
    parts = value.strip().split(":")
    if len(parts) < 2:
        raise ValidationError(f"Invalid time: {value!r}")
    try:
        hours = int(parts[0])
        minutes = int(parts[1])
        seconds = int(parts[2]) if len(parts) >= 3 and parts[2] else 0
        return time(hour=hours, minute=minutes, second=seconds)
    except ValueError as e:
        raise ValidationError(f"Invalid time: {value!r}") from e


def parse_schedule_window(value: str | None) -> tuple[time, time]:
    """Parse a daily class schedule such as ``"08:00-10:00"``.

    Raises ValidationError when the string is empty, has no separator,
    or ends before it starts.
    """

    if not value or SCHEDULE_SEPARATOR not in value:
        raise ValidationError(f"Invalid schedule: {value!r}")

    start_raw, end_raw = value.split(SCHEDULE_SEPARATOR, 1)
    start, end = _parse_hhmm(start_raw), _parse_hhmm(end_raw)
    if end <= start:
        raise ValidationError(f"Schedule ends before it starts: {value!r}")
    return start, end
