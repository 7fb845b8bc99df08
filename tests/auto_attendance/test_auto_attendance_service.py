from __future__ import annotations

import threading
from datetime import datetime

import pytest

from src.school_attendance.school_attendance.attendance.evaluator import AttendanceRuleEvaluator
from src.school_attendance.school_attendance.attendance.strategies.base import AutoAttendanceStrategy, StatusDecision
from src.school_attendance.school_attendance.attendance.writer import AttendanceWriter
from src.school_attendance.school_attendance.auto_attendance.service import AutoAttendanceService
from src.school_attendance.school_attendance.container import AutoAttendanceOptions, build_services
from src.school_attendance.school_attendance.core.enums import AttendanceStatus, AutoAttendanceMode, DecisionSource
from src.school_attendance.school_attendance.core.exceptions import RetrievalError
from src.school_attendance.school_attendance.sessions.service import SessionCatalog


def _service(sessions_repo, attendance_repo, fixed_now, **options):
    container = build_services(
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        options=AutoAttendanceOptions(**options),
        clock=lambda: fixed_now,
    )
    return container.auto_attendance_service


def test_ended_session_marks_all_students_absent(sessions_repo, attendance_repo, make_course, fixed_now):
    sessions_repo.courses = [make_course(1, "08:00-10:00", students=(1, 2))]
    svc = _service(sessions_repo, attendance_repo, fixed_now)

    result = svc.run()

    assert result.success is True
    assert result.sessions_processed == 1
    assert result.records_written == 2
    records = attendance_repo.all()
    assert [r.student_id for r in records] == [1, 2]
    assert all(r.status == AttendanceStatus.ABSENT and r.source == DecisionSource.AUTOMATIC for r in records)


def test_manual_present_record_is_untouched(sessions_repo, attendance_repo, make_course, fixed_now):
    sessions_repo.courses = [make_course(1, students=(1, 2))]
    manual = attendance_repo.add_manual(1, fixed_now.date(), 1, AttendanceStatus.PRESENT)
    svc = _service(sessions_repo, attendance_repo, fixed_now)

    result = svc.run()

    assert result.records_written == 1
    assert attendance_repo.get_for_student(course_id=1, session_date=fixed_now.date(), student_id=1) == manual
    assert [d.student_id for d in attendance_repo.upsert_calls] == [2]


def test_second_run_writes_nothing(sessions_repo, attendance_repo, make_course, fixed_now):
    sessions_repo.courses = [make_course(1), make_course(2, "07:00-09:00", students=(3,))]
    svc = _service(sessions_repo, attendance_repo, fixed_now)

    svc.run()
    after_first = attendance_repo.all()
    second = svc.run()

    assert second.records_written == 0
    assert second.sessions_processed == 0
    assert attendance_repo.all() == after_first


def test_failure_in_one_session_does_not_block_another(sessions_repo, attendance_repo, make_course, fixed_now):
    sessions_repo.courses = [make_course(1, students=(1, 2)), make_course(2, "07:00-09:00", students=(3, 4))]
    attendance_repo.failing = {(1, 1)}
    svc = _service(sessions_repo, attendance_repo, fixed_now)

    result = svc.run()

    assert result.success is False
    assert result.sessions_processed == 2
    assert result.records_written == 3
    assert [(e.session_id, e.student_id, e.kind) for e in result.errors] == [("1@2026-03-02", 1, "persistence")]
    assert {(r.course_id, r.student_id) for r in attendance_repo.all()} == {(1, 2), (2, 3), (2, 4)}


def test_session_without_students_counts_as_processed(sessions_repo, attendance_repo, make_course, fixed_now):
    sessions_repo.courses = [make_course(1, students=())]
    svc = _service(sessions_repo, attendance_repo, fixed_now)

    result = svc.run()

    assert result.success is True
    assert result.sessions_processed == 1
    assert result.records_written == 0
    assert result.details[0]["students"] == 0


def test_retrieval_error_propagates_without_writes(sessions_repo, attendance_repo, fixed_now):
    sessions_repo.fail_with = OSError("Can't connect to MySQL server")
    svc = _service(sessions_repo, attendance_repo, fixed_now)

    with pytest.raises(RetrievalError):
        svc.run()
    assert attendance_repo.upsert_calls == []


def test_present_mode_uses_configured_note(sessions_repo, attendance_repo, make_course, fixed_now):
    sessions_repo.courses = [make_course(1, students=(5,))]
    svc = _service(sessions_repo, attendance_repo, fixed_now, mode=AutoAttendanceMode.PRESENT, note="not recorded")

    svc.run()

    (rec,) = attendance_repo.all()
    assert rec.status == AttendanceStatus.PRESENT
    assert rec.note == "not recorded"
    assert rec.decided_at == fixed_now


def test_explicit_now_overrides_clock(sessions_repo, attendance_repo, make_course, fixed_now):
    sessions_repo.courses = [make_course(1, "08:00-10:00")]
    svc = _service(sessions_repo, attendance_repo, fixed_now)

    result = svc.run(now=datetime(2026, 3, 2, 9, 0))

    assert result.sessions_processed == 0
    assert attendance_repo.all() == []


def test_timeout_returns_partial_result(sessions_repo, attendance_repo, make_course, fixed_now):
    sessions_repo.courses = [make_course(1, students=(1,)), make_course(2, "07:00-09:00", students=(2,))]
    release = threading.Event()
    original_upsert = attendance_repo.upsert

    def slow_upsert(decision):
        if decision.course_id == 1:
            release.wait(5)
        return original_upsert(decision)

    attendance_repo.upsert = slow_upsert
    svc = _service(sessions_repo, attendance_repo, fixed_now, max_workers=2)

    try:
        result = svc.run(timeout_seconds=0.5)
    finally:
        release.set()

    assert result.timed_out is True
    assert result.success is False
    assert result.sessions_processed == 1
    assert result.details[0]["courseId"] == 2
    assert result.to_dict()["timedOut"] is True


def _join_workers():
    for t in threading.enumerate():
        if t.name.startswith("auto-attendance"):
            t.join(timeout=5)


def test_running_session_stops_writing_after_timeout(sessions_repo, attendance_repo, make_course, fixed_now):
    sessions_repo.courses = [make_course(1, students=(1, 2, 3))]
    release = threading.Event()
    original_upsert = attendance_repo.upsert

    def slow_upsert(decision):
        if decision.student_id == 1:
            release.wait(5)
        return original_upsert(decision)

    attendance_repo.upsert = slow_upsert
    svc = _service(sessions_repo, attendance_repo, fixed_now, max_workers=1)

    try:
        result = svc.run(timeout_seconds=0.3)
    finally:
        release.set()
    _join_workers()

    assert result.timed_out is True
    assert result.sessions_processed == 0
    assert [d.student_id for d in attendance_repo.upsert_calls] == [1]
    assert [r.student_id for r in attendance_repo.all()] == [1]


def test_evaluation_error_is_isolated_to_its_session(sessions_repo, attendance_repo, make_course, fixed_now):
    class FailsForCourseOne(AutoAttendanceStrategy):
        def decide(self, *, session, student_id, now):
            if session.course_id == 1:
                raise KeyError(student_id)
            return StatusDecision(status=AttendanceStatus.ABSENT)

    sessions_repo.courses = [make_course(1, students=(1,)), make_course(2, "07:00-09:00", students=(2, 3))]
    svc = AutoAttendanceService(
        SessionCatalog(sessions_repo, attendance_repo),
        AttendanceRuleEvaluator(FailsForCourseOne()),
        AttendanceWriter(attendance_repo),
        clock=lambda: fixed_now,
    )

    result = svc.run()

    assert result.success is False
    assert result.sessions_processed == 2
    assert [(e.session_id, e.kind) for e in result.errors] == [("1@2026-03-02", "evaluation")]
    assert {(r.course_id, r.student_id) for r in attendance_repo.all()} == {(2, 2), (2, 3)}


def test_unexpected_session_failure_is_reported(sessions_repo, attendance_repo, make_course, fixed_now):
    sessions_repo.courses = [make_course(1, students=(1,)), make_course(2, "07:00-09:00", students=(2,))]
    svc = _service(sessions_repo, attendance_repo, fixed_now)
    original = svc.process_session

    def process_session(pending, **kwargs):
        if pending.session.course_id == 1:
            raise RuntimeError("worker crashed")
        return original(pending, **kwargs)

    svc.process_session = process_session

    result = svc.run()

    assert result.success is False
    assert result.sessions_processed == 2
    assert [(e.session_id, e.kind, e.message) for e in result.errors] == [("1@2026-03-02", "unexpected", "worker crashed")]
    assert [r.student_id for r in attendance_repo.all()] == [2]
