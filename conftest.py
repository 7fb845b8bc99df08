from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional, Sequence

import pytest

from src.school_attendance.school_attendance.attendance.model import (
    AttendanceDecision,
    AttendanceRecord,
    UpsertOutcome,
    resolve_upsert,
)
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, DecisionSource
from src.school_attendance.school_attendance.sessions.model import Course


@dataclass
class InMemorySessions:
    courses: list[Course] = field(default_factory=list)
    fail_with: Optional[Exception] = None

    def list_active_courses(self) -> Sequence[Course]:
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.courses)


class InMemoryAttendance:
    def __init__(self):
        self._by_key: dict[tuple[int, date, int], AttendanceRecord] = {}
        self._id = 0
        self._lock = threading.Lock()
        self.upsert_calls: list[AttendanceDecision] = []
        # (course_id, student_id) pairs whose writes fail
        self.failing: set[tuple[int, int]] = set()

    def add_manual(self, course_id: int, session_date: date, student_id: int, status: AttendanceStatus) -> AttendanceRecord:
        self._id += 1
        rec = AttendanceRecord(
            attendance_id=self._id,
            course_id=course_id,
            session_date=session_date,
            student_id=student_id,
            status=status,
            source=DecisionSource.MANUAL,
            decided_at=datetime(2000, 1, 1),
        )
        self._by_key[(course_id, session_date, student_id)] = rec
        return rec

    def all(self) -> list[AttendanceRecord]:
        return sorted(self._by_key.values(), key=lambda r: (r.course_id, r.session_date, r.student_id))

    def get_for_student(self, *, course_id: int, session_date: date, student_id: int) -> Optional[AttendanceRecord]:
        return self._by_key.get((course_id, session_date, student_id))

    def list_for_sessions(self, session_keys):
        keys = set(session_keys)
        return [r for r in self.all() if r.session_key in keys]

    def upsert(self, decision: AttendanceDecision) -> UpsertOutcome:
        with self._lock:
            self.upsert_calls.append(decision)
            if (decision.course_id, decision.student_id) in self.failing:
                raise RuntimeError("Lost connection to MySQL server")

            key = (decision.course_id, decision.session_date, decision.student_id)
            existing = self._by_key.get(key)
            outcome = resolve_upsert(existing, decision)
            if outcome == UpsertOutcome.CREATED:
                self._id += 1
                self._by_key[key] = decision.to_record(attendance_id=self._id)
            elif outcome == UpsertOutcome.UPDATED:
                self._by_key[key] = decision.to_record(attendance_id=existing.attendance_id)
            return outcome


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2026, 3, 2, 10, 5, 0)


@pytest.fixture
def sessions_repo() -> InMemorySessions:
    return InMemorySessions()


@pytest.fixture
def attendance_repo() -> InMemoryAttendance:
    return InMemoryAttendance()


@pytest.fixture
def make_course():
    def _make(course_id: int, schedule: Optional[str] = "08:00-10:00", students=(1, 2), **kwargs) -> Course:
        return Course(
            course_id=course_id,
            subject_id=kwargs.pop("subject_id", 10 + course_id),
            classroom_id=kwargs.pop("classroom_id", 20 + course_id),
            teacher_id=kwargs.pop("teacher_id", 30 + course_id),
            schedule=schedule,
            student_ids=tuple(students),
            **kwargs,
        )

    return _make
