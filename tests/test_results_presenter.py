from __future__ import annotations

import pytest

from conftest import T0, make_form, multi_choice_field, single_choice_field, text_field

from exam_app.core.models import (
    ChoiceAnswer,
    MultiChoiceAnswer,
    NumberAnswer,
    SubmissionResult,
    SubmitTrigger,
    TextAnswer,
    Violation,
    ViolationType,
)
from exam_app.core.results_presenter import (
    ResultsPresenter,
    build_results_view,
    format_answer,
    format_duration,
    grade_label,
)
from exam_app.core.scoring import score_answers


def _result(form, answers, **overrides) -> SubmissionResult:
    summary = score_answers(form, answers)
    values = {
        "score": summary.score,
        "max_score": summary.max_score,
        "duration_ms": 95_000,
        "answers": answers,
        "start_time": "2026-03-02 09:00:00",
        "end_time": "2026-03-02 09:01:35",
        "per_field": summary.per_field,
    }
    values.update(overrides)
    return SubmissionResult(**values)


@pytest.mark.parametrize(
    "percent, label",
    [(100, "Excellent!"), (90, "Excellent!"), (85, "Great!"), (70, "Good!"), (60, "Pass"), (59, "Needs Improvement")],
)
def test_grade_bands(percent, label):
    assert grade_label(percent) == label


@pytest.mark.parametrize(
    "duration_ms, text",
    [(95_000, "1m 35s"), (42_999, "42s"), (0, "0s"), (-5, "0s"), (3_600_000, "60m 0s")],
)
def test_format_duration(duration_ms, text):
    assert format_duration(duration_ms) == text


def test_format_answer():
    assert format_answer(None) == "No answer"
    assert format_answer(TextAnswer("  ")) == "No answer"
    assert format_answer(MultiChoiceAnswer(("X", "Z"))) == "X, Z"
    assert format_answer(NumberAnswer(4.0)) == "4"
    assert format_answer(NumberAnswer(2.5)) == "2.5"


def test_view_summarizes_the_attempt():
    form = make_form(single_choice_field(), multi_choice_field(), passing_score=60)
    result = _result(
        form,
        {"q1": ChoiceAnswer("B")},
        trigger=SubmitTrigger.TIMER,
        violations=(Violation(ViolationType.COPY, T0, "Attempted to copy content"),),
    )

    view = build_results_view(form, result)

    assert view.score_text == "10 / 15"
    assert view.percentage == 67
    assert view.grade == "Pass"
    assert view.passed is True
    assert view.duration_text == "1m 35s"
    assert view.auto_submitted
    assert view.violation_count == 1


def test_passed_is_undetermined_without_passing_score_or_points():
    graded = make_form(single_choice_field())
    ungraded = make_form(text_field("t1"), passing_score=50)

    assert build_results_view(graded, _result(graded, {})).passed is None
    view = build_results_view(ungraded, _result(ungraded, {"t1": TextAnswer("hi")}))
    assert view.passed is None
    assert not view.is_graded


def test_review_rows_describe_each_graded_question():
    form = make_form(
        single_choice_field(explanation="B is right."),
        single_choice_field("q2", correct=(), points=3),
        text_field("notes"),
    )
    view = build_results_view(form, _result(form, {"q1": ChoiceAnswer("A")}))

    first, second = view.review
    assert (first.your_answer, first.correct_answer) == ("A", "B")
    assert first.explanation == "B is right."
    assert not first.is_correct
    assert (second.your_answer, second.correct_answer) == ("No answer", "Any answer")
    assert second.is_correct and second.points_awarded == 3


def test_reveal_toggle():
    form = make_form(single_choice_field())
    presenter = ResultsPresenter(form, _result(form, {"q1": ChoiceAnswer("B")}))

    assert presenter.visible_review() == ()
    assert presenter.toggle_reveal() is True
    assert [row.field_id for row in presenter.visible_review()] == ["q1"]
    assert presenter.toggle_reveal() is False
    assert presenter.visible_review() == ()


def test_reveal_is_unavailable_without_graded_questions():
    form = make_form(text_field("t1"))
    presenter = ResultsPresenter(form, _result(form, {}))

    assert not presenter.can_reveal()
    assert presenter.toggle_reveal() is False
    assert not presenter.reveal_answers
