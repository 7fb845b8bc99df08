from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ...core.enums import AttendanceStatus
from ...sessions.model import ClassSession


@dataclass(frozen=True)
class StatusDecision:
    status: AttendanceStatus
    note: Optional[str] = None


class AutoAttendanceStrategy(ABC):
    """Strategy Pattern: decide the status of a student nobody recorded."""

    def __init__(self, note: Optional[str] = None):
        self._note = note

    @abstractmethod
    def decide(self, *, session: ClassSession, student_id: int, now: datetime) -> StatusDecision:
        raise NotImplementedError
