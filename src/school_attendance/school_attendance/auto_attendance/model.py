from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Sequence

from ..sessions.model import ClassSession


@dataclass(frozen=True)
class CheckError:
    """A session-level or record-level failure collected during a run."""

    session_id: str
    kind: str
    message: str
    student_id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "sessionId": self.session_id,
            "studentId": self.student_id,
            "kind": self.kind,
            "message": self.message,
        }


@dataclass(frozen=True)
class SessionReport:
    session: ClassSession
    written: int = 0
    skipped: int = 0
    errors: tuple[CheckError, ...] = field(default_factory=tuple)

    def to_detail(self) -> dict:
        s = self.session
        return {
            "sessionId": s.session_id,
            "courseId": s.course_id,
            "sessionDate": s.session_date.isoformat(),
            "subject": s.subject_name or f"Course {s.course_id}",
            "teacher": s.teacher_name or "-",
            "students": len(s.expected_student_ids),
            "written": self.written,
            "errors": len(self.errors),
        }


@dataclass(frozen=True)
class CheckResult:
    """Summary of one automatic attendance run. Built per call, never stored."""

    sessions_processed: int
    records_written: int
    records_skipped: int = 0
    errors: tuple[CheckError, ...] = ()
    details: tuple[dict, ...] = ()
    timed_out: bool = False

    @property
    def success(self) -> bool:
        return not self.errors and not self.timed_out

    @property
    def message(self) -> str:
        msg = f"Checked {self.sessions_processed} sessions and wrote {self.records_written} automatic records"
        if self.errors:
            msg += f" ({len(self.errors)} errors)"
        if self.timed_out:
            msg += "; stopped early after timeout"
        return msg

    @classmethod
    def from_reports(cls, reports: Sequence[SessionReport], *, timed_out: bool = False) -> "CheckResult":
        return cls(
            sessions_processed=len(reports),
            records_written=sum(r.written for r in reports),
            records_skipped=sum(r.skipped for r in reports),
            errors=tuple(e for r in reports for e in r.errors),
            details=tuple(r.to_detail() for r in reports),
            timed_out=timed_out,
        )

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "message": self.message,
            "sessionsProcessed": self.sessions_processed,
            "recordsWritten": self.records_written,
            "recordsSkipped": self.records_skipped,
            "errors": [e.to_dict() for e in self.errors],
            "details": list(self.details),
            "timedOut": self.timed_out,
        }
