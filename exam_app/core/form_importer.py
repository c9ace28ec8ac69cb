"""Utilities for importing form and quiz definitions from JSON files.

File format (keys follow the exam server's wire format):

    {
      "id": "algebra-1",
      "title": "Algebra checkpoint",
      "type": "quiz",
      "fields": [
        {
          "id": "q1",
          "label": "What is $2 + 2$?",
          "type": "radio",
          "required": true,
          "options": ["3", "4", "5"],
          "quiz": {"points": 10, "correctOptions": [1], "explanation": "Basic sum."}
        }
      ],
      "settings": {
        "identitySchema": {"requireName": true, "requireEmail": true},
        "timer": {"enabled": true, "minutes": 15},
        "startAt": "2026-01-01T09:00:00+00:00",
        "preventCopyPaste": true
      },
      "submissionPolicy": {"oneAttemptPerIdentity": true, "dedupeBy": ["email"]}
    }

``single_select`` is accepted as an alias of ``radio``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import json
from pathlib import Path
from typing import Any

from exam_app.core.models import (
    FieldType,
    FormDefinition,
    FormField,
    FormSettings,
    FormStatus,
    FormType,
    IdentityRequirements,
    QuizKey,
    SubmissionPolicy,
    TimerSettings,
)


class FormImportError(Exception):
    """Raised when a form definition cannot be parsed."""


@dataclass(slots=True)
class ImportedForm:
    """Container for an imported form and where it came from."""

    source_path: Path
    form: FormDefinition


_FIELD_TYPE_ALIASES = {"single_select": FieldType.RADIO.value}
_DEDUPE_KEYS = {"email": "email", "studentId": "student_id"}


def load_form_from_file(file_path: Path) -> ImportedForm:
    text = file_path.read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise FormImportError(f"Form file is not valid JSON: {exc}") from exc
    return ImportedForm(source_path=file_path, form=form_from_dict(data))


def form_from_dict(data: Any) -> FormDefinition:
    """Build a FormDefinition from decoded JSON, validating it on the way."""
    if not isinstance(data, dict):
        raise FormImportError("Form definition must be a JSON object.")

    errors = validate_form_definition(data)
    if errors:
        raise FormImportError("; ".join(errors))

    fields = tuple(_parse_field(raw) for raw in data.get("fields") or [])
    form_id = str(data.get("id") or data.get("slug") or "").strip()
    if not form_id:
        raise FormImportError("Form id is required.")

    try:
        form_type = FormType(data["type"])
        status = FormStatus(data.get("status", FormStatus.PUBLISHED.value))
    except ValueError as exc:
        raise FormImportError(str(exc)) from exc

    return FormDefinition(
        id=form_id,
        title=str(data["title"]).strip(),
        type=form_type,
        fields=fields,
        settings=_parse_settings(data.get("settings") or {}),
        description=str(data.get("description") or ""),
        slug=data.get("slug"),
        status=status,
        submission_policy=_parse_policy(data.get("submissionPolicy") or {}),
    )


def validate_form_definition(data: dict[str, Any]) -> list[str]:
    """Return a list of problems with a raw form definition (empty when valid)."""
    errors: list[str] = []
    if not str(data.get("title") or "").strip():
        errors.append("Title is required")
    if not data.get("type"):
        errors.append("Type is required")

    seen_ids: set[str] = set()
    for idx, raw in enumerate(data.get("fields") or []):
        if not isinstance(raw, dict):
            errors.append(f"Field[{idx}] must be an object")
            continue
        field_id = raw.get("id")
        if not field_id:
            errors.append(f"Field[{idx}] missing id")
        elif field_id in seen_ids:
            errors.append(f"Duplicate field id: {field_id}")
        else:
            seen_ids.add(field_id)
        if not raw.get("label"):
            errors.append(f"Field[{idx}] missing label")

        raw_type = _FIELD_TYPE_ALIASES.get(raw.get("type"), raw.get("type"))
        try:
            field_type = FieldType(raw_type)
        except ValueError:
            errors.append(f"Field[{idx}] has unsupported type: {raw.get('type')}")
            continue

        options = raw.get("options") or []
        if field_type.is_choice and not options:
            errors.append(f"Field[{idx}] options required for {field_type.value}")

        quiz = raw.get("quiz")
        if isinstance(quiz, dict):
            points = quiz.get("points", 0)
            if not isinstance(points, int) or isinstance(points, bool) or points < 0:
                errors.append(f"Field[{idx}] points must be a non-negative integer")
            for option_index in quiz.get("correctOptions") or []:
                if not isinstance(option_index, int) or not 0 <= option_index < len(options):
                    errors.append(f"Field[{idx}] correct option {option_index!r} out of range")

    settings = data.get("settings")
    timer = settings.get("timer") if isinstance(settings, dict) else None
    if isinstance(timer, dict) and timer.get("enabled"):
        minutes = timer.get("minutes")
        if not isinstance(minutes, int) or isinstance(minutes, bool) or minutes < 1:
            errors.append("Enabled timer needs at least 1 minute")
    return errors


def _parse_field(raw: dict[str, Any]) -> FormField:
    field_type = FieldType(_FIELD_TYPE_ALIASES.get(raw["type"], raw["type"]))
    quiz_raw = raw.get("quiz")
    quiz = None
    if isinstance(quiz_raw, dict):
        quiz = QuizKey(
            points=int(quiz_raw.get("points", 0)),
            correct_options=frozenset(quiz_raw.get("correctOptions") or []),
            explanation=str(quiz_raw.get("explanation") or ""),
        )
    return FormField(
        id=str(raw["id"]),
        label=str(raw["label"]).strip(),
        type=field_type,
        required=bool(raw.get("required", False)),
        options=tuple(str(option).strip() for option in raw.get("options") or []),
        question_code=raw.get("questionCode"),
        placeholder=str(raw.get("placeholder") or ""),
        help_text=str(raw.get("helpText") or ""),
        visibility=raw.get("visibility", "public"),
        quiz=quiz,
    )


def _parse_settings(raw: dict[str, Any]) -> FormSettings:
    identity_raw = raw.get("identitySchema") or {}
    timer_raw = raw.get("timer") or {}
    quiz_raw = raw.get("quiz") or {}

    minutes = timer_raw.get("minutes", 0) or 0
    if not isinstance(minutes, int) or minutes < 0:
        raise FormImportError("Timer minutes must be a non-negative integer.")

    return FormSettings(
        identity=IdentityRequirements(
            require_name=bool(identity_raw.get("requireName", False)),
            require_email=bool(identity_raw.get("requireEmail", False)),
            require_student_id=bool(identity_raw.get("requireStudentId", False)),
        ),
        timer=TimerSettings(enabled=bool(timer_raw.get("enabled", False)), minutes=minutes),
        start_at=_parse_datetime(raw.get("startAt")),
        end_at=_parse_datetime(raw.get("endAt")),
        prevent_copy_paste=bool(raw.get("preventCopyPaste", True)),
        fullscreen=bool(raw.get("fullscreen", True)),
        passing_score=quiz_raw.get("passingScore"),
    )


def _parse_policy(raw: dict[str, Any]) -> SubmissionPolicy:
    dedupe_by = tuple(_DEDUPE_KEYS[key] for key in raw.get("dedupeBy") or [] if key in _DEDUPE_KEYS)
    return SubmissionPolicy(
        one_attempt_per_identity=bool(raw.get("oneAttemptPerIdentity", False)),
        dedupe_by=dedupe_by,
    )


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError as exc:
        raise FormImportError(f"Invalid timestamp: {value}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
