from __future__ import annotations

from datetime import date
from typing import Any, Dict, Optional, Sequence

from mysql.connector import errorcode
from mysql.connector import errors as mysql_errors

from ..core.enums import AttendanceStatus, DecisionSource
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import AttendanceDecision, AttendanceRecord, UpsertOutcome, resolve_upsert
from .repository import AttendanceRepository

_COLUMNS = "attendance_id, course_id, session_date, student_id, status, source, note, decided_at"


def _to_record(r: Dict[str, Any]) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        course_id=int(r["course_id"]),
        session_date=r["session_date"],
        student_id=int(r["student_id"]),
        status=AttendanceStatus(r["status"]),
        source=DecisionSource(r["source"]),
        note=r.get("note"),
        decided_at=r["decided_at"],
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_student(self, *, course_id: int, session_date: date, student_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE course_id=%s AND session_date=%s AND student_id=%s
                """,
                (course_id, session_date, student_id),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def list_for_sessions(self, session_keys: Sequence[tuple[int, date]]) -> Sequence[AttendanceRecord]:
        if not session_keys:
            return []

        where = " OR ".join(["(course_id=%s AND session_date=%s)"] * len(session_keys))
        params: list[Any] = []
        for course_id, session_date in session_keys:
            params.extend((course_id, session_date))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY course_id, session_date, student_id
                """,
                tuple(params),
            )
            return [_to_record(r) for r in fetchall(cur)]

    def _select_for_decision(self, cur, decision: AttendanceDecision, *, lock: bool) -> Optional[AttendanceRecord]:
        cur.execute(
            f"""
            SELECT {_COLUMNS}
            FROM attendance_records
            WHERE course_id=%s AND session_date=%s AND student_id=%s
            {"FOR UPDATE" if lock else ""}
            """,
            (decision.course_id, decision.session_date, decision.student_id),
        )
        r = fetchone(cur)
        return _to_record(r) if r else None

    def upsert(self, decision: AttendanceDecision) -> UpsertOutcome:
        # Missing rows are never read with FOR UPDATE: a gap lock there lets two
        # concurrent inserts of the same key deadlock. The unique key decides instead.
        with db_cursor(self._conn_factory) as (_, cur):
            if self._select_for_decision(cur, decision, lock=False) is None:
                try:
                    cur.execute(
                        """
                        INSERT INTO attendance_records(course_id, session_date, student_id, status, source, note, decided_at)
                        VALUES(%s,%s,%s,%s,%s,%s,%s)
                        """,
                        (
                            decision.course_id,
                            decision.session_date,
                            decision.student_id,
                            decision.status.value,
                            decision.source.value,
                            decision.note,
                            decision.decided_at,
                        ),
                    )
                    return UpsertOutcome.CREATED
                except mysql_errors.IntegrityError as e:
                    if e.errno != errorcode.ER_DUP_ENTRY:
                        raise

            existing = self._select_for_decision(cur, decision, lock=True)
            if existing is None:
                return UpsertOutcome.UNCHANGED

            outcome = resolve_upsert(existing, decision)
            if outcome == UpsertOutcome.UPDATED:
                cur.execute(
                    """
                    UPDATE attendance_records
                    SET status=%s, source=%s, note=%s, decided_at=%s
                    WHERE attendance_id=%s
                    """,
                    (
                        decision.status.value,
                        decision.source.value,
                        decision.note,
                        decision.decided_at,
                        existing.attendance_id,
                    ),
                )
            return outcome
