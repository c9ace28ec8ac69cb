"""Utilities for writing form definitions back to the JSON import format."""

from __future__ import annotations

from datetime import datetime
import json
from pathlib import Path
from typing import Any

from exam_app.core.models import FormDefinition, FormField

_DEDUPE_WIRE_KEYS = {"email": "email", "student_id": "studentId"}


def save_form_to_file(file_path: Path, form: FormDefinition) -> None:
    """Persist ``form`` to disk in the JSON import format."""

    if not form.fields:
        raise ValueError("Cannot export a form without fields.")

    file_path = file_path.resolve()
    file_path.parent.mkdir(parents=True, exist_ok=True)
    document = json.dumps(form_to_dict(form), indent=2, ensure_ascii=False)
    file_path.write_text(document + "\n", encoding="utf-8")


def form_to_dict(form: FormDefinition, *, include_answer_keys: bool = True) -> dict[str, Any]:
    settings = form.settings
    return {
        "id": form.id,
        "slug": form.slug,
        "title": form.title,
        "description": form.description,
        "type": form.type.value,
        "status": form.status.value,
        "fields": [
            _serialize_field(form_field, include_answer_keys)
            for form_field in form.fields
        ],
        "settings": {
            "identitySchema": {
                "requireName": settings.identity.require_name,
                "requireEmail": settings.identity.require_email,
                "requireStudentId": settings.identity.require_student_id,
            },
            "timer": {"enabled": settings.timer.enabled, "minutes": settings.timer.minutes},
            "startAt": _serialize_datetime(settings.start_at),
            "endAt": _serialize_datetime(settings.end_at),
            "preventCopyPaste": settings.prevent_copy_paste,
            "fullscreen": settings.fullscreen,
            "quiz": {"passingScore": settings.passing_score},
        },
        "submissionPolicy": {
            "oneAttemptPerIdentity": form.submission_policy.one_attempt_per_identity,
            "dedupeBy": [_DEDUPE_WIRE_KEYS[key] for key in form.submission_policy.dedupe_by],
        },
    }


def public_schema(form: FormDefinition) -> dict[str, Any]:
    """Responder-facing view: no internal fields, no answer keys, no policy."""
    document = form_to_dict(form, include_answer_keys=False)
    document["fields"] = [
        _serialize_field(form_field, include_answer_keys=False)
        for form_field in form.public_fields()
    ]
    document.pop("submissionPolicy")
    document.pop("status")
    return document


def _serialize_field(form_field: FormField, include_answer_keys: bool) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "id": form_field.id,
        "label": form_field.label,
        "type": form_field.type.value,
        "required": form_field.required,
    }
    if form_field.options:
        payload["options"] = list(form_field.options)
    if form_field.question_code:
        payload["questionCode"] = form_field.question_code
    if form_field.placeholder:
        payload["placeholder"] = form_field.placeholder
    if form_field.help_text:
        payload["helpText"] = form_field.help_text
    if form_field.visibility != "public":
        payload["visibility"] = form_field.visibility
    if form_field.quiz is not None:
        quiz: dict[str, Any] = {"points": form_field.quiz.points}
        if include_answer_keys:
            quiz["correctOptions"] = sorted(form_field.quiz.correct_options)
            if form_field.quiz.explanation:
                quiz["explanation"] = form_field.quiz.explanation
        payload["quiz"] = quiz
    return payload


def _serialize_datetime(value: datetime | None) -> str | None:
    return value.isoformat() if value else None
