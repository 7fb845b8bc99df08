from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...sessions.model import ClassSession
from .base import AutoAttendanceStrategy, StatusDecision


class PresentStrategy(AutoAttendanceStrategy):
    """Assume the class took place and the teacher forgot to record it."""

    def decide(self, *, session: ClassSession, student_id: int, now: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.PRESENT, note=self._note)
