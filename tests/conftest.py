"""Shared fixtures: headless Qt, form builders and scripted collaborators."""

from __future__ import annotations

import os

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from exam_app.core.errors import SubmissionError
from exam_app.core.models import (
    FieldType,
    FormDefinition,
    FormField,
    FormSettings,
    FormType,
    IdentityRequirements,
    QuizKey,
    SubmitResponse,
    TimerSettings,
)

T0 = datetime(2026, 3, 2, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def _qt_application(qapp):
    """Every test runs with a QApplication so QObjects and QTimers behave."""
    return qapp


def single_choice_field(
    field_id: str = "q1",
    options: tuple[str, ...] = ("A", "B"),
    correct: tuple[int, ...] = (1,),
    points: int = 10,
    *,
    field_type: FieldType = FieldType.RADIO,
    required: bool = False,
    explanation: str = "",
) -> FormField:
    return FormField(
        id=field_id,
        label=f"Question {field_id}",
        type=field_type,
        required=required,
        options=options,
        quiz=QuizKey(points=points, correct_options=frozenset(correct), explanation=explanation),
    )


def multi_choice_field(
    field_id: str = "m1",
    options: tuple[str, ...] = ("X", "Y", "Z"),
    correct: tuple[int, ...] = (0, 2),
    points: int = 5,
) -> FormField:
    return single_choice_field(
        field_id, options, correct, points, field_type=FieldType.CHECKBOX
    )


def text_field(field_id: str = "t1", points: int | None = None, **kwargs: Any) -> FormField:
    quiz = QuizKey(points=points) if points is not None else None
    return FormField(id=field_id, label=f"Text {field_id}", type=FieldType.SHORT_TEXT, quiz=quiz, **kwargs)


def make_form(
    *fields: FormField,
    form_type: FormType = FormType.QUIZ,
    timer_minutes: int = 0,
    identity: IdentityRequirements | None = None,
    **settings_kwargs: Any,
) -> FormDefinition:
    settings = FormSettings(
        identity=identity or IdentityRequirements(),
        timer=TimerSettings(enabled=timer_minutes > 0, minutes=timer_minutes),
        **settings_kwargs,
    )
    return FormDefinition(
        id="form-1",
        title="Checkpoint",
        type=form_type,
        fields=fields or (single_choice_field(),),
        settings=settings,
    )


class FakeTransport:
    """Records sends; the test decides when and how each one resolves."""

    def __init__(self) -> None:
        self.sent: list[dict[str, Any]] = []
        self._callbacks: list[tuple[Callable, Callable]] = []

    def send(self, payload, on_success, on_failure) -> None:
        self.sent.append(payload)
        self._callbacks.append((on_success, on_failure))

    def succeed(self, score: int | None = None, max_score: int | None = None) -> None:
        on_success, _ = self._callbacks[-1]
        on_success(SubmitResponse(response_id=f"r{len(self.sent)}", score=score, max_score=max_score))

    def fail(self, message: str = "Server unavailable", status_code: int | None = 503) -> None:
        _, on_failure = self._callbacks[-1]
        on_failure(SubmissionError(message, status_code))


class ManualScheduler:
    """Stands in for QTimer.singleShot; callbacks run only when the test says so."""

    def __init__(self) -> None:
        self.pending: list[tuple[int, Callable[[], None]]] = []

    def __call__(self, delay_ms: int, callback: Callable[[], None]) -> None:
        self.pending.append((delay_ms, callback))

    def run_pending(self) -> None:
        pending, self.pending = self.pending, []
        for _delay, callback in pending:
            callback()


class ManualClock:
    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()
