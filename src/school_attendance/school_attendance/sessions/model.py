from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Optional


@dataclass(frozen=True)
class Course:
    """An active course with a daily schedule and its enrolled students."""

    course_id: int
    subject_id: Optional[int]
    classroom_id: Optional[int]
    teacher_id: Optional[int]
    schedule: Optional[str]
    student_ids: tuple[int, ...] = ()
    subject_name: Optional[str] = None
    teacher_name: Optional[str] = None


@dataclass(frozen=True)
class ClassSession:
    """One occurrence of a course on a given date."""

    course_id: int
    session_date: date
    starts_at: datetime
    ends_at: datetime
    subject_id: Optional[int] = None
    classroom_id: Optional[int] = None
    expected_student_ids: tuple[int, ...] = field(default_factory=tuple)
    subject_name: Optional[str] = None
    teacher_name: Optional[str] = None

    @property
    def session_id(self) -> str:
        return f"{self.course_id}@{self.session_date.isoformat()}"

    @classmethod
    def for_course(cls, course: Course, session_date: date, *, start: time, end: time) -> "ClassSession":
        return cls(
            course_id=course.course_id,
            session_date=session_date,
            starts_at=datetime.combine(session_date, start),
            ends_at=datetime.combine(session_date, end),
            subject_id=course.subject_id,
            classroom_id=course.classroom_id,
            expected_student_ids=tuple(course.student_ids),
            subject_name=course.subject_name,
            teacher_name=course.teacher_name,
        )
