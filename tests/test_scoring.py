from __future__ import annotations

from conftest import make_form, multi_choice_field, single_choice_field, text_field

from exam_app.core.models import (
    ChoiceAnswer,
    FieldType,
    FormField,
    MultiChoiceAnswer,
    QuizKey,
    TextAnswer,
)
from exam_app.core.scoring import correct_labels, is_answer_correct, percentage, score_answers


def test_single_choice_correct_answer_scores_full_points():
    form = make_form(single_choice_field(options=("A", "B"), correct=(1,), points=10))

    summary = score_answers(form, {"q1": ChoiceAnswer("B")})

    assert (summary.score, summary.max_score) == (10, 10)
    assert summary.per_field[0].is_correct


def test_single_choice_wrong_or_missing_answer_scores_zero():
    form = make_form(single_choice_field())

    assert score_answers(form, {"q1": ChoiceAnswer("A")}).score == 0
    assert score_answers(form, {}).score == 0


def test_multi_choice_requires_exact_set():
    form = make_form(multi_choice_field(options=("X", "Y", "Z"), correct=(0, 2)))

    wrong = score_answers(form, {"m1": MultiChoiceAnswer(("X", "Y"))})
    right = score_answers(form, {"m1": MultiChoiceAnswer(("Z", "X"))})

    assert wrong.score == 0
    assert right.score == 5


def test_multi_choice_subset_and_superset_are_incorrect():
    field = multi_choice_field(options=("A", "B", "C", "D"), correct=(0, 1, 2))

    assert not is_answer_correct(field, MultiChoiceAnswer(("A", "B")))
    assert not is_answer_correct(field, MultiChoiceAnswer(("A", "B", "C", "D")))
    assert is_answer_correct(field, MultiChoiceAnswer(("A", "B", "C")))


def test_empty_answer_key_awards_full_points_for_any_answer():
    field = single_choice_field(correct=(), points=4)
    form = make_form(field)

    assert score_answers(form, {}).score == 4
    assert score_answers(form, {"q1": ChoiceAnswer("A")}).score == 4


def test_keyed_free_text_is_correct_when_not_empty():
    keyed = QuizKey(points=3, correct_options=frozenset({0}))
    form = make_form(
        FormField(id="t1", label="Explain", type=FieldType.LONG_TEXT, quiz=keyed),
        FormField(id="t2", label="Explain again", type=FieldType.LONG_TEXT, quiz=keyed),
    )

    summary = score_answers(form, {"t1": TextAnswer("anything"), "t2": TextAnswer("   ")})

    assert summary.score == 3
    assert summary.max_score == 6


def test_unkeyed_free_text_counts_even_when_blank():
    form = make_form(text_field("t1", points=3))

    assert score_answers(form, {"t1": TextAnswer("")}).score == 3


def test_dropdown_scored_like_single_choice():
    field = single_choice_field(
        "d1", options=("red", "green"), correct=(0,), points=2, field_type=FieldType.DROPDOWN
    )
    form = make_form(field)

    assert score_answers(form, {"d1": ChoiceAnswer("red")}).score == 2
    assert score_answers(form, {"d1": ChoiceAnswer("green")}).score == 0


def test_fields_without_quiz_data_do_not_count():
    form = make_form(single_choice_field(), text_field("notes"))

    summary = score_answers(form, {"notes": TextAnswer("hello")})

    assert summary.max_score == 10
    assert [entry.field_id for entry in summary.per_field] == ["q1"]


def test_zero_point_field_adds_nothing():
    form = make_form(single_choice_field(points=0))

    summary = score_answers(form, {"q1": ChoiceAnswer("B")})

    assert (summary.score, summary.max_score) == (0, 0)
    assert summary.per_field == ()


def test_scoring_is_deterministic():
    form = make_form(
        single_choice_field(),
        multi_choice_field(),
        text_field("t1", points=2),
    )
    answers = {
        "q1": ChoiceAnswer("B"),
        "m1": MultiChoiceAnswer(("X", "Z")),
        "t1": TextAnswer("text"),
    }

    results = {score_answers(form, answers) for _ in range(5)}

    assert len(results) == 1


def test_correct_labels_follow_option_order():
    field = multi_choice_field(options=("X", "Y", "Z"), correct=(2, 0))
    assert correct_labels(field) == ["X", "Z"]


def test_percentage_handles_ungraded_forms():
    assert percentage(0, 0) == 0
    assert percentage(5, 0) == 0


def test_percentage_rounds_half_up():
    assert percentage(1, 8) == 13
    assert percentage(2, 3) == 67
    assert percentage(10, 10) == 100
