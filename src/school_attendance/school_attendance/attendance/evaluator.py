from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, Mapping

from ..core.enums import DecisionSource
from ..core.exceptions import EvaluationError, ValidationError
from ..sessions.model import ClassSession
from .model import AttendanceDecision, AttendanceRecord
from .strategies.base import AutoAttendanceStrategy


class AttendanceRuleEvaluator:
    """Pure rule: once a session is over, decide every student still unrecorded.

    No I/O happens here; ``now`` is always passed in.
    """

    def __init__(self, strategy: AutoAttendanceStrategy, *, grace_minutes: int = 0):
        if int(grace_minutes) < 0:
            raise ValidationError("grace_minutes must not be negative")
        self._strategy = strategy
        self._grace = timedelta(minutes=int(grace_minutes))

    def is_elapsed(self, session: ClassSession, now: datetime) -> bool:
        return now > session.ends_at + self._grace

    def evaluate(
        self,
        session: ClassSession,
        pending_student_ids: Iterable[int],
        existing: Mapping[int, AttendanceRecord],
        *,
        now: datetime,
    ) -> list[AttendanceDecision]:
        if not self.is_elapsed(session, now):
            return []

        try:
            decisions: list[AttendanceDecision] = []
            for student_id in pending_student_ids:
                record = existing.get(student_id)
                if record is not None and (record.source == DecisionSource.MANUAL or record.status.is_terminal):
                    continue

                decided = self._strategy.decide(session=session, student_id=student_id, now=now)
                decisions.append(
                    AttendanceDecision(
                        course_id=session.course_id,
                        session_date=session.session_date,
                        student_id=student_id,
                        status=decided.status,
                        source=DecisionSource.AUTOMATIC,
                        note=decided.note,
                        decided_at=now,
                    )
                )
            return decisions
        except Exception as e:
            raise EvaluationError(f"Could not evaluate session {session.session_id}: {e}") from e
