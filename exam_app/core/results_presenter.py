"""View model for the results screen."""

from __future__ import annotations

from dataclasses import dataclass

from exam_app.core.models import (
    Answer,
    FieldCorrectness,
    FormDefinition,
    MultiChoiceAnswer,
    SubmissionResult,
    SubmitTrigger,
)
from exam_app.core.scoring import correct_labels, percentage

_GRADE_BANDS: tuple[tuple[int, str], ...] = (
    (90, "Excellent!"),
    (80, "Great!"),
    (70, "Good!"),
    (60, "Pass"),
)
_LOWEST_GRADE = "Needs Improvement"


@dataclass(slots=True, frozen=True)
class ReviewRow:
    """One graded question as shown when answers are revealed."""

    field_id: str
    label: str
    your_answer: str
    correct_answer: str
    explanation: str
    is_correct: bool
    points_awarded: int
    points_possible: int


@dataclass(slots=True, frozen=True)
class ResultsView:
    title: str
    score: int
    max_score: int
    percentage: int
    grade: str
    passed: bool | None
    duration_text: str
    start_time: str
    end_time: str
    auto_submitted: bool
    violation_count: int
    review: tuple[ReviewRow, ...]

    @property
    def is_graded(self) -> bool:
        return self.max_score > 0

    @property
    def score_text(self) -> str:
        return f"{self.score} / {self.max_score}"


def grade_label(percent: int) -> str:
    for threshold, label in _GRADE_BANDS:
        if percent >= threshold:
            return label
    return _LOWEST_GRADE


def format_duration(duration_ms: int) -> str:
    """``Xm Ys`` or ``Ys``; non-positive durations read ``0s``."""
    if duration_ms <= 0:
        return "0s"
    minutes, seconds = divmod(duration_ms // 1000, 60)
    if minutes:
        return f"{minutes}m {seconds}s"
    return f"{seconds}s"


def format_answer(answer: Answer | None) -> str:
    if answer is None or answer.is_empty():
        return "No answer"
    if isinstance(answer, MultiChoiceAnswer):
        return ", ".join(answer.values)
    value = answer.to_wire()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def build_results_view(form: FormDefinition, result: SubmissionResult) -> ResultsView:
    """Derive everything the results screen shows from one submission."""
    percent = percentage(result.score, result.max_score)
    passing_score = form.settings.passing_score
    passed = None if passing_score is None or result.max_score <= 0 else percent >= passing_score
    return ResultsView(
        title=form.title,
        score=result.score,
        max_score=result.max_score,
        percentage=percent,
        grade=grade_label(percent),
        passed=passed,
        duration_text=format_duration(result.duration_ms),
        start_time=result.start_time,
        end_time=result.end_time,
        auto_submitted=result.trigger is SubmitTrigger.TIMER,
        violation_count=len(result.violations),
        review=_build_review(form, result),
    )


def _build_review(form: FormDefinition, result: SubmissionResult) -> tuple[ReviewRow, ...]:
    graded: dict[str, FieldCorrectness] = {entry.field_id: entry for entry in result.per_field}
    rows = []
    for form_field in form.public_fields():
        correctness = graded.get(form_field.id)
        if correctness is None:
            continue
        labels = correct_labels(form_field)
        rows.append(
            ReviewRow(
                field_id=form_field.id,
                label=form_field.label,
                your_answer=format_answer(result.answers.get(form_field.id)),
                correct_answer=", ".join(labels) if labels else "Any answer",
                explanation=form_field.quiz.explanation if form_field.quiz else "",
                is_correct=correctness.is_correct,
                points_awarded=correctness.points_awarded,
                points_possible=correctness.points_possible,
            )
        )
    return tuple(rows)


class ResultsPresenter:
    """Holds a results view and the reveal-answers toggle."""

    def __init__(self, form: FormDefinition, result: SubmissionResult) -> None:
        self._view = build_results_view(form, result)
        self._reveal_answers = False

    @property
    def view(self) -> ResultsView:
        return self._view

    @property
    def reveal_answers(self) -> bool:
        return self._reveal_answers

    def can_reveal(self) -> bool:
        return bool(self._view.review)

    def toggle_reveal(self) -> bool:
        if not self.can_reveal():
            return False
        self._reveal_answers = not self._reveal_answers
        return self._reveal_answers

    def visible_review(self) -> tuple[ReviewRow, ...]:
        return self._view.review if self._reveal_answers else ()
