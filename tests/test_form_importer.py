from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from exam_app.core.form_exporter import public_schema, save_form_to_file
from exam_app.core.form_importer import (
    FormImportError,
    form_from_dict,
    load_form_from_file,
    validate_form_definition,
)
from exam_app.core.models import FieldType, FormStatus, FormType

SAMPLE_PATH = Path(__file__).resolve().parents[1] / "exam_app" / "data" / "sample_exam.json"


def _definition(**overrides) -> dict:
    data = {
        "id": "algebra-1",
        "title": "Algebra checkpoint",
        "type": "quiz",
        "fields": [
            {
                "id": "q1",
                "label": "What is 2 + 2?",
                "type": "single_select",
                "options": ["3", "4"],
                "quiz": {"points": 2, "correctOptions": [1]},
            }
        ],
    }
    data.update(overrides)
    return data


def test_sample_exam_loads():
    imported = load_form_from_file(SAMPLE_PATH)
    form = imported.form

    assert imported.source_path == SAMPLE_PATH
    assert form.id == "python-basics"
    assert form.type is FormType.QUIZ
    assert form.is_timed and form.settings.timer.minutes == 10
    assert form.settings.identity.require_email
    assert form.settings.passing_score == 60
    assert form.submission_policy.dedupe_by == ("email",)
    assert [field.id for field in form.public_fields()] == ["q1", "q2", "q3", "q4"]


def test_single_select_is_an_alias_for_radio():
    form = form_from_dict(_definition())

    assert form.fields[0].type is FieldType.RADIO
    assert form.fields[0].quiz.correct_options == frozenset({1})


def test_defaults_for_missing_settings():
    form = form_from_dict(_definition())

    assert form.status is FormStatus.PUBLISHED
    assert not form.is_timed
    assert form.settings.prevent_copy_paste
    assert form.settings.start_at is None


@pytest.mark.parametrize(
    "fields, problem",
    [
        (
            [
                {"id": "a", "label": "A", "type": "short_text"},
                {"id": "a", "label": "B", "type": "short_text"},
            ],
            "Duplicate field id: a",
        ),
        ([{"id": "a", "label": "A", "type": "radio"}], "options required for radio"),
        (
            [
                {
                    "id": "a",
                    "label": "A",
                    "type": "radio",
                    "options": ["x"],
                    "quiz": {"points": 1, "correctOptions": [3]},
                }
            ],
            "correct option 3 out of range",
        ),
        ([{"id": "a", "label": "A", "type": "slider"}], "unsupported type: slider"),
    ],
)
def test_invalid_fields_are_reported(fields, problem):
    errors = validate_form_definition(_definition(fields=fields))

    assert any(problem in error for error in errors)
    with pytest.raises(FormImportError):
        form_from_dict(_definition(fields=fields))


@pytest.mark.parametrize("minutes", [0, None, -5])
def test_enabled_timer_without_minutes_is_rejected(minutes):
    data = _definition(settings={"timer": {"enabled": True, "minutes": minutes}})

    assert "Enabled timer needs at least 1 minute" in validate_form_definition(data)
    with pytest.raises(FormImportError, match="at least 1 minute"):
        form_from_dict(data)


def test_disabled_timer_may_have_zero_minutes():
    form = form_from_dict(_definition(settings={"timer": {"enabled": False, "minutes": 0}}))

    assert not form.is_timed


def test_missing_title_is_rejected():
    with pytest.raises(FormImportError, match="Title is required"):
        form_from_dict(_definition(title="  "))


def test_invalid_json_is_rejected(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(FormImportError):
        load_form_from_file(path)


def test_timestamps_and_dedupe_keys_are_parsed():
    form = form_from_dict(
        _definition(
            settings={"startAt": "2026-05-01T08:00:00Z", "endAt": "2026-05-01T10:00:00"},
            submissionPolicy={"oneAttemptPerIdentity": True, "dedupeBy": ["studentId", "phone"]},
        )
    )

    assert form.settings.start_at == datetime(2026, 5, 1, 8, tzinfo=timezone.utc)
    assert form.settings.end_at == datetime(2026, 5, 1, 10, tzinfo=timezone.utc)
    assert form.submission_policy.dedupe_by == ("student_id",)


def test_invalid_timestamp_is_rejected():
    with pytest.raises(FormImportError, match="Invalid timestamp"):
        form_from_dict(_definition(settings={"startAt": "next tuesday"}))


def test_public_schema_strips_keys_and_internal_fields():
    form = load_form_from_file(SAMPLE_PATH).form

    schema = public_schema(form)

    assert [field["id"] for field in schema["fields"]] == ["q1", "q2", "q3", "q4"]
    assert all("correctOptions" not in field.get("quiz", {}) for field in schema["fields"])
    assert all("explanation" not in field.get("quiz", {}) for field in schema["fields"])
    assert "submissionPolicy" not in schema
    assert "status" not in schema


def test_saved_form_loads_back_unchanged(tmp_path):
    form = load_form_from_file(SAMPLE_PATH).form
    path = tmp_path / "nested" / "exam.json"

    save_form_to_file(path, form)

    assert load_form_from_file(path).form == form
