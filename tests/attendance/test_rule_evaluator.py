from __future__ import annotations

from datetime import date, datetime, time

import pytest

from src.school_attendance.school_attendance.attendance.evaluator import AttendanceRuleEvaluator
from src.school_attendance.school_attendance.attendance.model import AttendanceRecord
from src.school_attendance.school_attendance.attendance.strategies.absent_strategy import AbsentStrategy
from src.school_attendance.school_attendance.attendance.strategies.base import AutoAttendanceStrategy
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, DecisionSource
from src.school_attendance.school_attendance.core.exceptions import EvaluationError, ValidationError
from src.school_attendance.school_attendance.sessions.model import ClassSession, Course

DAY = date(2026, 3, 2)


def _session(students=(1, 2)) -> ClassSession:
    course = Course(course_id=7, subject_id=1, classroom_id=1, teacher_id=1, schedule="08:00-10:00", student_ids=tuple(students))
    return ClassSession.for_course(course, DAY, start=time(8, 0), end=time(10, 0))


def _record(student_id: int, status: AttendanceStatus, source: DecisionSource) -> AttendanceRecord:
    return AttendanceRecord(
        course_id=7,
        session_date=DAY,
        student_id=student_id,
        status=status,
        source=source,
        decided_at=datetime(2026, 3, 2, 9, 0),
    )


def test_marks_every_unrecorded_student_absent_after_end():
    now = datetime(2026, 3, 2, 10, 5)
    evaluator = AttendanceRuleEvaluator(AbsentStrategy("auto"))

    decisions = evaluator.evaluate(_session(), (1, 2), {}, now=now)

    assert [d.student_id for d in decisions] == [1, 2]
    assert all(d.status == AttendanceStatus.ABSENT for d in decisions)
    assert all(d.source == DecisionSource.AUTOMATIC for d in decisions)
    assert all(d.decided_at == now and d.note == "auto" for d in decisions)


def test_no_decisions_before_session_end_or_within_grace():
    evaluator = AttendanceRuleEvaluator(AbsentStrategy(), grace_minutes=10)

    assert evaluator.evaluate(_session(), (1, 2), {}, now=datetime(2026, 3, 2, 9, 59)) == []
    assert evaluator.evaluate(_session(), (1, 2), {}, now=datetime(2026, 3, 2, 10, 10)) == []
    assert len(evaluator.evaluate(_session(), (1, 2), {}, now=datetime(2026, 3, 2, 10, 11))) == 2


def test_manual_record_takes_precedence_even_when_pending():
    evaluator = AttendanceRuleEvaluator(AbsentStrategy())
    existing = {
        1: _record(1, AttendanceStatus.PRESENT, DecisionSource.MANUAL),
        2: _record(2, AttendanceStatus.PENDING, DecisionSource.MANUAL),
        3: _record(3, AttendanceStatus.PENDING, DecisionSource.AUTOMATIC),
    }

    decisions = evaluator.evaluate(_session((1, 2, 3)), (1, 2, 3), existing, now=datetime(2026, 3, 2, 11, 0))

    assert [d.student_id for d in decisions] == [3]


def test_session_without_students_yields_no_decisions():
    evaluator = AttendanceRuleEvaluator(AbsentStrategy())
    assert evaluator.evaluate(_session(()), (), {}, now=datetime(2026, 3, 2, 11, 0)) == []


def test_strategy_failure_becomes_evaluation_error():
    class Broken(AutoAttendanceStrategy):
        def decide(self, *, session, student_id, now):
            raise KeyError(student_id)

    evaluator = AttendanceRuleEvaluator(Broken())
    with pytest.raises(EvaluationError):
        evaluator.evaluate(_session(), (1,), {}, now=datetime(2026, 3, 2, 11, 0))


def test_negative_grace_is_rejected():
    with pytest.raises(ValidationError):
        AttendanceRuleEvaluator(AbsentStrategy(), grace_minutes=-1)
