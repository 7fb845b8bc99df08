from __future__ import annotations

from typing import Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, in_clause
from .model import Course
from .repository import SessionRepository


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def list_active_courses(self) -> Sequence[Course]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT c.course_id, c.subject_id, c.classroom_id, c.teacher_id, c.schedule,
                       s.name AS subject_name,
                       CONCAT_WS(' ', t.first_name, t.last_name) AS teacher_name
                FROM courses c
                LEFT JOIN subjects s ON s.subject_id = c.subject_id
                LEFT JOIN teachers t ON t.teacher_id = c.teacher_id
                WHERE c.status = 'active'
                ORDER BY c.course_id
                """
            )
            rows = fetchall(cur)
            if not rows:
                return []

            course_ids = [int(r["course_id"]) for r in rows]
            cur.execute(
                f"""
                SELECT course_id, student_id
                FROM course_enrollments
                WHERE course_id IN ({in_clause(course_ids)})
                ORDER BY course_id, student_id
                """,
                tuple(course_ids),
            )
            students: dict[int, list[int]] = {}
            for e in fetchall(cur):
                students.setdefault(int(e["course_id"]), []).append(int(e["student_id"]))

            return [
                Course(
                    course_id=int(r["course_id"]),
                    subject_id=r.get("subject_id"),
                    classroom_id=r.get("classroom_id"),
                    teacher_id=r.get("teacher_id"),
                    schedule=r.get("schedule"),
                    student_ids=tuple(students.get(int(r["course_id"]), [])),
                    subject_name=r.get("subject_name"),
                    teacher_name=r.get("teacher_name") or None,
                )
                for r in rows
            ]
