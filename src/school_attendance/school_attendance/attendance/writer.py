from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

from ..core.exceptions import PersistenceError
from .model import AttendanceDecision, UpsertOutcome
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WriteOutcome:
    written: int = 0
    skipped: int = 0
    errors: tuple[PersistenceError, ...] = field(default_factory=tuple)


class AttendanceWriter:
    """Apply decisions one record at a time; a failed record never stops the batch."""

    def __init__(self, attendance: AttendanceRepository):
        self._attendance = attendance

    def apply(
        self,
        decisions: Sequence[AttendanceDecision],
        *,
        should_stop: Optional[Callable[[], bool]] = None,
    ) -> WriteOutcome:
        """Upsert every decision; stops early once ``should_stop`` returns True."""

        written = 0
        skipped = 0
        errors: list[PersistenceError] = []

        for decision in decisions:
            if should_stop is not None and should_stop():
                logger.info("Stopped writing session %s at student %s", decision.session_id, decision.student_id)
                break
            try:
                outcome = self._attendance.upsert(decision)
            except PersistenceError as e:
                if e.session_id is None:
                    e.session_id = decision.session_id
                if e.student_id is None:
                    e.student_id = decision.student_id
                errors.append(e)
                continue
            except Exception as e:
                logger.warning(
                    "Failed to write attendance for student %s in session %s: %s",
                    decision.student_id,
                    decision.session_id,
                    e,
                )
                errors.append(
                    PersistenceError(str(e), session_id=decision.session_id, student_id=decision.student_id)
                )
                continue

            if outcome.wrote:
                written += 1
            else:
                skipped += 1
                if outcome == UpsertOutcome.PROTECTED:
                    logger.debug(
                        "Kept manual record for student %s in session %s",
                        decision.student_id,
                        decision.session_id,
                    )

        return WriteOutcome(written=written, skipped=skipped, errors=tuple(errors))
