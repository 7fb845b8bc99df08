from __future__ import annotations

from datetime import datetime

from ...core.enums import AttendanceStatus
from ...sessions.model import ClassSession
from .base import AutoAttendanceStrategy, StatusDecision


class AbsentStrategy(AutoAttendanceStrategy):
    def decide(self, *, session: ClassSession, student_id: int, now: datetime) -> StatusDecision:
        return StatusDecision(status=AttendanceStatus.ABSENT, note=self._note)
