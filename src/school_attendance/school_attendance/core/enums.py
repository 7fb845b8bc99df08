from __future__ import annotations

from enum import Enum


class AttendanceStatus(str, Enum):
    """Attendance status stored for one student in one class session."""

    PRESENT = "present"
    ABSENT = "absent"
    EXCUSED = "excused"
    PENDING = "pending"

    @property
    def is_terminal(self) -> bool:
        return self is not AttendanceStatus.PENDING


class DecisionSource(str, Enum):
    """Who produced an attendance status."""

    MANUAL = "manual"
    AUTOMATIC = "automatic"


class AutoAttendanceMode(str, Enum):
    """Status assigned to students left without a record once a class is over."""

    ABSENT = "absent"
    PRESENT = "present"
