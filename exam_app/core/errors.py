"""Exception types raised by the exam delivery flow."""

from __future__ import annotations


class ExamError(Exception):
    """Base class for exam delivery errors."""


class IdentityValidationError(ExamError):
    """Raised when responder identity fields are missing or malformed."""

    def __init__(self, errors: dict[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("; ".join(self.errors.values()))


class ExamUnavailableError(ExamError):
    """Raised when a form is started outside its availability window."""


class SubmissionError(ExamError):
    """Raised when the submit endpoint rejects or cannot be reached."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class TimerCallbackError(ExamError):
    """Wraps an exception raised by a countdown expiry handler."""
