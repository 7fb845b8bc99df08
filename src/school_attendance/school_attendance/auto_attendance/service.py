from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime
from typing import Callable, Optional

from ..attendance.evaluator import AttendanceRuleEvaluator
from ..attendance.writer import AttendanceWriter
from ..common.datetime_utils import now_local
from ..core.constants import DEFAULT_MAX_WORKERS, DEFAULT_TIMEOUT_SECONDS
from ..core.exceptions import EvaluationError, ValidationError
from ..sessions.service import PendingSession, SessionCatalog
from .model import CheckError, CheckResult, SessionReport

logger = logging.getLogger(__name__)


class AutoAttendanceService:
    """Finalizes attendance for class sessions nobody recorded.

    One call to :meth:`run` reads the eligible sessions, evaluates each one and
    writes its decisions. Sessions are independent: a failing session is
    reported in the result and the others still complete. Nothing is retried,
    the next scheduled run picks up whatever is left.
    """

    def __init__(
        self,
        catalog: SessionCatalog,
        evaluator: AttendanceRuleEvaluator,
        writer: AttendanceWriter,
        *,
        clock: Callable[[], datetime] = now_local,
        max_workers: int = DEFAULT_MAX_WORKERS,
        timeout_seconds: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
    ):
        if int(max_workers) < 1:
            raise ValidationError("max_workers must be at least 1")
        if timeout_seconds is not None and float(timeout_seconds) <= 0:
            raise ValidationError("timeout_seconds must be positive")
        self._catalog = catalog
        self._evaluator = evaluator
        self._writer = writer
        self._clock = clock
        self._max_workers = int(max_workers)
        self._timeout_seconds = timeout_seconds

    def run(self, *, now: Optional[datetime] = None, timeout_seconds: Optional[float] = None) -> CheckResult:
        """Run one pass. RetrievalError from the catalog propagates to the caller."""

        now = now or self._clock()
        timeout = self._timeout_seconds if timeout_seconds is None else timeout_seconds

        pending = self._catalog.eligible_sessions(now=now)
        if not pending:
            result = CheckResult.from_reports([])
        else:
            reports, timed_out = self._process_all(pending, now=now, timeout=timeout)
            result = CheckResult.from_reports(reports, timed_out=timed_out)

        log = logger.info if result.success else logger.warning
        log(
            "Auto attendance at %s: sessions=%d written=%d skipped=%d errors=%d timed_out=%s",
            now.isoformat(timespec="seconds"),
            result.sessions_processed,
            result.records_written,
            result.records_skipped,
            len(result.errors),
            result.timed_out,
        )
        return result

    def process_session(
        self,
        pending: PendingSession,
        *,
        now: datetime,
        stop: Optional[threading.Event] = None,
    ) -> SessionReport:
        """Evaluate and write one session; once ``stop`` is set no further record is written."""
        session = pending.session
        try:
            decisions = self._evaluator.evaluate(
                session,
                pending.pending_student_ids,
                pending.records,
                now=now,
            )
        except EvaluationError as e:
            logger.warning("Skipping session %s: %s", session.session_id, e)
            return SessionReport(
                session=session,
                errors=(CheckError(session_id=session.session_id, kind="evaluation", message=str(e)),),
            )

        outcome = self._writer.apply(decisions, should_stop=stop.is_set if stop is not None else None)
        errors = tuple(
            CheckError(
                session_id=e.session_id or session.session_id,
                student_id=e.student_id,
                kind="persistence",
                message=str(e),
            )
            for e in outcome.errors
        )
        return SessionReport(session=session, written=outcome.written, skipped=outcome.skipped, errors=errors)

    def _process_all(
        self,
        pending: list[PendingSession],
        *,
        now: datetime,
        timeout: Optional[float],
    ) -> tuple[list[SessionReport], bool]:
        executor = ThreadPoolExecutor(
            max_workers=min(self._max_workers, len(pending)),
            thread_name_prefix="auto-attendance",
        )
        stop = threading.Event()
        try:
            futures = [executor.submit(self.process_session, p, now=now, stop=stop) for p in pending]
            done, not_done = wait(futures, timeout=timeout)
        finally:
            # Queued sessions are dropped; running ones stop before their next record.
            stop.set()
            executor.shutdown(wait=False, cancel_futures=True)

        reports: list[SessionReport] = []
        for p, future in zip(pending, futures):
            if future not in done:
                continue
            try:
                reports.append(future.result())
            except Exception as e:
                logger.exception("Unexpected failure in session %s", p.session.session_id)
                reports.append(
                    SessionReport(
                        session=p.session,
                        errors=(CheckError(session_id=p.session.session_id, kind="unexpected", message=str(e)),),
                    )
                )

        if not_done:
            logger.warning("Auto attendance timed out after %ss with %d sessions unfinished", timeout, len(not_done))
        return reports, bool(not_done)
