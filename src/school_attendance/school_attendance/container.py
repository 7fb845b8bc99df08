from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Optional

from .attendance.evaluator import AttendanceRuleEvaluator
from .attendance.factory import AutoAttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.writer import AttendanceWriter
from .auto_attendance.service import AutoAttendanceService
from .common.datetime_utils import now_local
from .core import constants
from .core.enums import AutoAttendanceMode
from .core.exceptions import ValidationError
from .database.connection import DatabaseConnection, DBConfig
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionCatalog


@dataclass(frozen=True)
class AutoAttendanceOptions:
    mode: AutoAttendanceMode = AutoAttendanceMode.ABSENT
    note: Optional[str] = constants.DEFAULT_AUTO_NOTE
    grace_minutes: int = constants.DEFAULT_GRACE_MINUTES
    lookback_days: int = constants.DEFAULT_LOOKBACK_DAYS
    max_workers: int = constants.DEFAULT_MAX_WORKERS
    timeout_seconds: Optional[float] = constants.DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_settings(cls, settings: Any) -> "AutoAttendanceOptions":
        raw_mode = getattr(settings, "AUTO_ATTENDANCE_MODE", cls.mode.value)
        try:
            mode = AutoAttendanceMode(str(raw_mode).strip().lower())
        except ValueError as e:
            raise ValidationError(f"Invalid AUTO_ATTENDANCE_MODE: {raw_mode!r}") from e

        timeout = getattr(settings, "AUTO_ATTENDANCE_TIMEOUT_SECONDS", cls.timeout_seconds)
        try:
            return cls(
                mode=mode,
                note=getattr(settings, "AUTO_ATTENDANCE_NOTE", cls.note) or None,
                grace_minutes=int(getattr(settings, "AUTO_ATTENDANCE_GRACE_MINUTES", cls.grace_minutes)),
                lookback_days=int(getattr(settings, "AUTO_ATTENDANCE_LOOKBACK_DAYS", cls.lookback_days)),
                max_workers=int(getattr(settings, "AUTO_ATTENDANCE_MAX_WORKERS", cls.max_workers)),
                timeout_seconds=float(timeout) if timeout not in (None, "", 0) else None,
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid auto attendance setting: {e}") from e


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]

    sessions_repo: SessionRepository
    attendance_repo: AttendanceRepository

    session_catalog: SessionCatalog
    attendance_writer: AttendanceWriter
    auto_attendance_service: AutoAttendanceService


def build_services(
    *,
    sessions_repo: SessionRepository,
    attendance_repo: AttendanceRepository,
    options: AutoAttendanceOptions = AutoAttendanceOptions(),
    clock: Callable[[], datetime] = now_local,
    conn: Optional[DatabaseConnection] = None,
) -> Container:
    """Wire services on top of any repositories (MySQL or in-memory)."""

    strategy = AutoAttendanceStrategyFactory(note=options.note).for_mode(options.mode)
    catalog = SessionCatalog(
        sessions_repo,
        attendance_repo,
        lookback_days=options.lookback_days,
        grace_minutes=options.grace_minutes,
    )
    evaluator = AttendanceRuleEvaluator(strategy, grace_minutes=options.grace_minutes)
    writer = AttendanceWriter(attendance_repo)
    service = AutoAttendanceService(
        catalog,
        evaluator,
        writer,
        clock=clock,
        max_workers=options.max_workers,
        timeout_seconds=options.timeout_seconds,
    )

    return Container(
        conn=conn,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        session_catalog=catalog,
        attendance_writer=writer,
        auto_attendance_service=service,
    )


def build_container(*, db_config: dict, options: AutoAttendanceOptions = AutoAttendanceOptions()) -> Container:
    # Store calls must not outlive the run by more than one timeout.
    timeout = math.ceil(options.timeout_seconds) if options.timeout_seconds else None
    conn = DatabaseConnection(DBConfig.from_dict(db_config, timeout=timeout))
    return build_services(
        sessions_repo=MySQLSessionRepository(conn),
        attendance_repo=MySQLAttendanceRepository(conn),
        options=options,
        conn=conn,
    )
