"""Service holding the live state of one exam attempt."""

from __future__ import annotations

from datetime import datetime

from exam_app.core.models import (
    Answer,
    ChoiceAnswer,
    FormDefinition,
    MultiChoiceAnswer,
    SessionState,
    Violation,
    answer_type_for,
)


class ExamSession:
    """Guards every mutation of a SessionState."""

    def __init__(self, form: FormDefinition) -> None:
        self._form = form
        self._state: SessionState | None = None

    def start(self, started_at: datetime, remaining_seconds: int | None = None) -> SessionState:
        if self._state is not None:
            raise RuntimeError("Session has already started.")
        self._state = SessionState(started_at=started_at, remaining_seconds=remaining_seconds)
        return self._state

    def has_started(self) -> bool:
        return self._state is not None

    @property
    def state(self) -> SessionState:
        if self._state is None:
            raise RuntimeError("Session has not started.")
        return self._state

    @property
    def started_at(self) -> datetime:
        return self.state.started_at

    def record_answer(self, field_id: str, answer: Answer) -> None:
        form_field = self._form.get_field(field_id)
        expected = answer_type_for(form_field.type)
        if not isinstance(answer, expected):
            raise ValueError(
                f"Field {field_id} expects {expected.__name__}, got {type(answer).__name__}."
            )
        if isinstance(answer, MultiChoiceAnswer):
            chosen = answer.values
        elif isinstance(answer, ChoiceAnswer) and answer.value is not None:
            chosen = (answer.value,)
        else:
            chosen = ()
        if any(value not in form_field.options for value in chosen):
            raise ValueError(f"Invalid option for: {form_field.label}")
        self.state.answers[field_id] = answer

    def get_answers(self) -> dict[str, Answer]:
        return dict(self.state.answers)

    def get_answer(self, field_id: str) -> Answer | None:
        return self.state.answers.get(field_id)

    def record_violation(self, violation: Violation) -> None:
        self.state.violations.append(violation)

    def get_violations(self) -> list[Violation]:
        return list(self.state.violations)

    def sync_remaining(self, remaining_seconds: int) -> None:
        """Mirror the timer; remaining time never goes up or below zero."""
        current = self.state.remaining_seconds
        clamped = max(0, remaining_seconds)
        if current is not None and clamped > current:
            return
        self.state.remaining_seconds = clamped

    def mark_expired(self) -> bool:
        """Set the expired flag. Returns False if it was already set."""
        if self.state.expired:
            return False
        self.state.expired = True
        self.state.remaining_seconds = 0
        return True

    def is_expired(self) -> bool:
        return self._state is not None and self._state.expired

    def try_begin_submit(self) -> bool:
        """Check-then-set on the submitting flag."""
        if self.state.submitting:
            return False
        self.state.submitting = True
        return True

    def end_submit(self) -> None:
        self.state.submitting = False

    def is_submitting(self) -> bool:
        return self._state is not None and self._state.submitting
