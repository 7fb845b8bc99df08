from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Optional

from ..core.enums import AttendanceStatus, DecisionSource


class UpsertOutcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    PROTECTED = "protected"

    @property
    def wrote(self) -> bool:
        return self in (UpsertOutcome.CREATED, UpsertOutcome.UPDATED)


@dataclass(frozen=True)
class AttendanceRecord:
    """Stored attendance of one student in one class session.

    Unique per (course_id, session_date, student_id).
    """

    course_id: int
    session_date: date
    student_id: int
    status: AttendanceStatus
    source: DecisionSource
    decided_at: datetime
    note: Optional[str] = None
    attendance_id: Optional[int] = None

    @property
    def session_key(self) -> tuple[int, date]:
        return (self.course_id, self.session_date)


@dataclass(frozen=True)
class AttendanceDecision:
    """Status computed for one student; applied by the writer as an upsert."""

    course_id: int
    session_date: date
    student_id: int
    status: AttendanceStatus
    decided_at: datetime
    source: DecisionSource = DecisionSource.AUTOMATIC
    note: Optional[str] = None

    @property
    def session_id(self) -> str:
        return f"{self.course_id}@{self.session_date.isoformat()}"

    def matches(self, record: AttendanceRecord) -> bool:
        return record.status == self.status and record.source == self.source and record.note == self.note

    def to_record(self, *, attendance_id: Optional[int] = None) -> AttendanceRecord:
        return AttendanceRecord(
            course_id=self.course_id,
            session_date=self.session_date,
            student_id=self.student_id,
            status=self.status,
            source=self.source,
            decided_at=self.decided_at,
            note=self.note,
            attendance_id=attendance_id,
        )


def resolve_upsert(existing: Optional[AttendanceRecord], decision: AttendanceDecision) -> UpsertOutcome:
    """What an automatic upsert must do given the currently stored record.

    Manual records are never overwritten; an identical record is left as is
    so its ``decided_at`` does not move.
    """

    if existing is None:
        return UpsertOutcome.CREATED
    if existing.source == DecisionSource.MANUAL and decision.source != DecisionSource.MANUAL:
        return UpsertOutcome.PROTECTED
    if decision.matches(existing):
        return UpsertOutcome.UNCHANGED
    return UpsertOutcome.UPDATED
