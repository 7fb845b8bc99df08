from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Mapping

from ..attendance.model import AttendanceRecord
from ..attendance.repository import AttendanceRepository
from ..common.datetime_utils import parse_schedule_window
from ..core.exceptions import RetrievalError, ValidationError
from .model import ClassSession
from .repository import SessionRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PendingSession:
    session: ClassSession
    records: Mapping[int, AttendanceRecord] = field(default_factory=dict)
    pending_student_ids: tuple[int, ...] = ()


class SessionCatalog:
    """Reads the sessions that are over but still have unrecorded students."""

    def __init__(
        self,
        sessions: SessionRepository,
        attendance: AttendanceRepository,
        *,
        lookback_days: int = 0,
        grace_minutes: int = 0,
    ):
        if int(lookback_days) < 0:
            raise ValidationError("lookback_days must not be negative")
        if int(grace_minutes) < 0:
            raise ValidationError("grace_minutes must not be negative")
        self._sessions = sessions
        self._attendance = attendance
        self._lookback_days = int(lookback_days)
        self._grace = timedelta(minutes=int(grace_minutes))

    def ended_sessions(self, *, now: datetime) -> list[ClassSession]:
        try:
            courses = self._sessions.list_active_courses()
        except Exception as e:
            raise RetrievalError(f"Could not read active courses: {e}") from e

        dates = [now.date() - timedelta(days=offset) for offset in range(self._lookback_days, -1, -1)]
        out: list[ClassSession] = []
        for course in courses:
            try:
                start, end = parse_schedule_window(course.schedule)
            except ValidationError as e:
                logger.info("Skipping course %s: %s", course.course_id, e)
                continue

            for day in dates:
                session = ClassSession.for_course(course, day, start=start, end=end)
                if now > session.ends_at + self._grace:
                    out.append(session)
        return out

    def eligible_sessions(self, *, now: datetime) -> list[PendingSession]:
        """Ended sessions where at least one expected student lacks a final record.

        Sessions without any enrolled student are returned too, with nothing pending.
        """

        sessions = self.ended_sessions(now=now)
        if not sessions:
            return []

        try:
            records = self._attendance.list_for_sessions([(s.course_id, s.session_date) for s in sessions])
        except Exception as e:
            raise RetrievalError(f"Could not read attendance records: {e}") from e

        by_session: dict[tuple[int, object], dict[int, AttendanceRecord]] = {}
        for r in records:
            by_session.setdefault(r.session_key, {})[r.student_id] = r

        eligible: list[PendingSession] = []
        for session in sessions:
            existing = by_session.get((session.course_id, session.session_date), {})
            pending = tuple(
                sid
                for sid in session.expected_student_ids
                if sid not in existing or not existing[sid].status.is_terminal
            )
            if pending or not session.expected_student_ids:
                eligible.append(PendingSession(session=session, records=existing, pending_student_ids=pending))
        return eligible
