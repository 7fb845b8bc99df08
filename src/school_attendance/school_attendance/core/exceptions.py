class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data or configuration is invalid."""


class AutoAttendanceError(DomainError):
    """Base exception for the automatic attendance check."""


class RetrievalError(AutoAttendanceError):
    """Raised when the session store cannot be read."""


class EvaluationError(AutoAttendanceError):
    """Raised when attendance decisions cannot be computed for a session."""


class PersistenceError(AutoAttendanceError):
    """Raised when a single attendance record cannot be written."""

    def __init__(self, message: str, *, session_id: str | None = None, student_id: int | None = None):
        super().__init__(message)
        self.session_id = session_id
        self.student_id = student_id
