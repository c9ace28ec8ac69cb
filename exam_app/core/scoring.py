"""Deterministic quiz scoring.

Every field carrying quiz points is binary: full points or nothing.

* No answer key configured (empty ``correct_options``): full points for any
  response, including none.
* Radio buttons and dropdowns: correct when the selected option's index is
  in the key.
* Checkboxes: correct only when the selected labels equal the keyed labels
  exactly. Subsets and supersets both score zero.
* Everything else (text, email, number, date, time): correct when a
  non-empty value was given. Free text is not compared against a key.
"""

from __future__ import annotations

from collections.abc import Mapping
import math

from exam_app.core.models import (
    Answer,
    ChoiceAnswer,
    FieldCorrectness,
    FieldType,
    FormDefinition,
    FormField,
    MultiChoiceAnswer,
    ScoreSummary,
)


def score_answers(form: FormDefinition, answers: Mapping[str, Answer]) -> ScoreSummary:
    """Score ``answers`` against ``form`` without side effects."""
    score = 0
    max_score = 0
    per_field: list[FieldCorrectness] = []
    for form_field in form.fields:
        if form_field.quiz is None:
            continue
        points = form_field.quiz.points
        max_score += points
        if points <= 0:
            continue
        correct = is_answer_correct(form_field, answers.get(form_field.id))
        awarded = points if correct else 0
        score += awarded
        per_field.append(
            FieldCorrectness(
                field_id=form_field.id,
                points_awarded=awarded,
                points_possible=points,
                is_correct=correct,
            )
        )
    return ScoreSummary(score=score, max_score=max_score, per_field=tuple(per_field))


def is_answer_correct(form_field: FormField, answer: Answer | None) -> bool:
    key = form_field.quiz
    if key is None or not key.correct_options:
        return True

    if form_field.type is FieldType.CHECKBOX:
        if not isinstance(answer, MultiChoiceAnswer):
            return False
        return set(answer.values) == set(correct_labels(form_field))

    if form_field.type in (FieldType.RADIO, FieldType.DROPDOWN):
        if not isinstance(answer, ChoiceAnswer) or answer.value is None:
            return False
        try:
            index = form_field.options.index(answer.value)
        except ValueError:
            return False
        return index in key.correct_options

    return answer is not None and not answer.is_empty()


def correct_labels(form_field: FormField) -> list[str]:
    """Option labels named by the field's answer key, in option order."""
    if form_field.quiz is None:
        return []
    return [
        option
        for index, option in enumerate(form_field.options)
        if index in form_field.quiz.correct_options
    ]


def percentage(score: int, max_score: int) -> int:
    """Percentage rounded half up; 0 for ungraded forms."""
    if max_score <= 0:
        return 0
    return math.floor(score / max_score * 100 + 0.5)
