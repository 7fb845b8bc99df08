from __future__ import annotations

from typing import Protocol, Sequence

from .model import Course


class SessionRepository(Protocol):
    def list_active_courses(self) -> Sequence[Course]:
        """Active courses with their enrolled student ids."""

        raise NotImplementedError
