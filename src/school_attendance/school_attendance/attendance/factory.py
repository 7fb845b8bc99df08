from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import AutoAttendanceMode
from ..core.exceptions import ValidationError
from .strategies.absent_strategy import AbsentStrategy
from .strategies.base import AutoAttendanceStrategy
from .strategies.present_strategy import PresentStrategy


@dataclass
class AutoAttendanceStrategyFactory:
    """Factory Pattern: choose the strategy for the configured mode."""

    note: Optional[str] = None

    def for_mode(self, mode: AutoAttendanceMode | str) -> AutoAttendanceStrategy:
        try:
            mode = AutoAttendanceMode(str(getattr(mode, "value", mode)).lower())
        except ValueError as e:
            raise ValidationError(f"Unknown auto attendance mode: {mode!r}") from e

        if mode == AutoAttendanceMode.PRESENT:
            return PresentStrategy(self.note)
        return AbsentStrategy(self.note)
