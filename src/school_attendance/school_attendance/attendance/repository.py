from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import AttendanceDecision, AttendanceRecord, UpsertOutcome


class AttendanceRepository(Protocol):
    def get_for_student(self, *, course_id: int, session_date: date, student_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def list_for_sessions(self, session_keys: Sequence[tuple[int, date]]) -> Sequence[AttendanceRecord]:
        """All records belonging to the given (course_id, session_date) pairs."""

        raise NotImplementedError

    def upsert(self, decision: AttendanceDecision) -> UpsertOutcome:
        """Insert or update the record keyed on (course, date, student).

        Must apply ``resolve_upsert`` atomically for that key.
        """

        raise NotImplementedError
