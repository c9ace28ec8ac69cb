"""FastAPI server exposing the exam schema and submit endpoints."""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from threading import Thread
from typing import Any

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field
import uvicorn

from exam_app.constants.exam_constants import DURATION_BUFFER_MS
from exam_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from exam_app.core.form_exporter import public_schema
from exam_app.core.models import (
    Answer,
    ChoiceAnswer,
    FormDefinition,
    FormStatus,
    MultiChoiceAnswer,
    ResponderIdentity,
    answer_from_wire,
)
from exam_app.core.scoring import score_answers
from exam_app.core.services.form_repository import FormRepository, StoredResponse

logger = logging.getLogger(__name__)


class ResponderPayload(BaseModel):
    """Identity block of a submission."""

    model_config = ConfigDict(populate_by_name=True)

    name: str | None = None
    email: str | None = None
    student_id: str | None = Field(default=None, alias="studentId")


class AnswerPayload(BaseModel):
    """One answered field."""

    model_config = ConfigDict(populate_by_name=True)

    field_id: str = Field(alias="fieldId")
    question_code: str | None = Field(default=None, alias="questionCode")
    value: Any = None


class SubmitPayload(BaseModel):
    """Payload schema for a whole attempt."""

    model_config = ConfigDict(populate_by_name=True)

    responder: ResponderPayload = Field(default_factory=ResponderPayload)
    started_at: datetime | None = Field(default=None, alias="startedAt")
    duration_ms: int | None = Field(default=None, alias="durationMs")
    answers: list[AnswerPayload] = Field(default_factory=list)


def _get_repository_dependency(repository: FormRepository):
    def dependency() -> FormRepository:
        return repository

    return dependency


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


def _require_open_form(repository: FormRepository, form_id: str) -> FormDefinition:
    form = repository.get_form(form_id)
    if form is None:
        raise HTTPException(status_code=404, detail="Not found")
    if form.status is not FormStatus.PUBLISHED:
        raise HTTPException(status_code=403, detail="Form is not published")
    now = datetime.now(timezone.utc)
    if form.settings.start_at is not None and form.settings.start_at > now:
        raise HTTPException(status_code=403, detail="Form is not yet available")
    if form.settings.end_at is not None and form.settings.end_at < now:
        raise HTTPException(status_code=403, detail="Form has expired")
    return form


def _responder_from_payload(payload: ResponderPayload) -> ResponderIdentity:
    email = payload.email.strip().lower() if payload.email else None
    return ResponderIdentity(
        name=payload.name.strip() if payload.name else None,
        email=email or None,
        student_id=payload.student_id.strip() if payload.student_id else None,
    )


def _parse_answers(form: FormDefinition, payload: SubmitPayload) -> dict[str, Answer]:
    answers: dict[str, Answer] = {}
    for entry in payload.answers:
        try:
            form_field = form.get_field(entry.field_id)
        except KeyError as exc:
            raise HTTPException(status_code=400, detail=f"Unknown field: {entry.field_id}") from exc
        if form_field.is_internal:
            continue
        try:
            answer = answer_from_wire(form_field, entry.value)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        if isinstance(answer, MultiChoiceAnswer):
            chosen = answer.values
        elif isinstance(answer, ChoiceAnswer) and answer.value is not None:
            chosen = (answer.value,)
        else:
            chosen = ()
        if chosen:
            if any(value not in form_field.options for value in chosen):
                raise HTTPException(
                    status_code=400, detail=f"Invalid option for: {form_field.label}"
                )
        answers[form_field.id] = answer
    return answers


def _serialize_response(stored: StoredResponse) -> dict[str, Any]:
    return {
        "id": stored.id,
        "responder": stored.responder.to_wire(),
        "startedAt": stored.started_at.isoformat() if stored.started_at else None,
        "submittedAt": stored.submitted_at.isoformat(),
        "durationMs": stored.duration_ms,
        "answers": [
            {"fieldId": field_id, "value": answer.to_wire()}
            for field_id, answer in stored.answers.items()
        ],
        "score": stored.score,
        "maxScore": stored.max_score,
    }


def create_api_app(repository: FormRepository) -> FastAPI:
    """Create a FastAPI application wired to the provided form repository."""
    app = FastAPI(title="ExamQt API", version="0.1.0")
    repository_dep = _get_repository_dependency(repository)

    @app.exception_handler(HTTPException)
    async def handle_http_error(_request: Request, exc: HTTPException) -> JSONResponse:
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(_request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = first.get("msg", "Invalid request")
        return _error_response(400, f"{location}: {message}" if location else message)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(_request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled server error")
        return _error_response(500, str(exc) or "Failed to process request")

    @app.get("/forms/{form_id}/schema")
    def get_schema(
        form_id: str,
        repo: FormRepository = Depends(repository_dep),
    ) -> dict[str, object]:
        form = _require_open_form(repo, form_id)
        return {"success": True, "data": public_schema(form)}

    @app.post("/forms/{form_id}/submit", status_code=201)
    def submit_form(
        form_id: str,
        payload: SubmitPayload,
        repo: FormRepository = Depends(repository_dep),
    ) -> dict[str, object]:
        form = _require_open_form(repo, form_id)
        responder = _responder_from_payload(payload.responder)

        policy = form.submission_policy
        if policy.one_attempt_per_identity and repo.find_duplicate(
            form.id, responder, policy.dedupe_by
        ):
            raise HTTPException(status_code=409, detail="You have already submitted")

        if form.is_quiz and form.is_timed:
            allowed_ms = form.settings.timer.allowed_ms
            duration_ms = payload.duration_ms or 0
            if duration_ms > allowed_ms + DURATION_BUFFER_MS:
                logger.info(
                    "Rejected late submission for %s: %d ms over an allowed %d ms",
                    form.id,
                    duration_ms,
                    allowed_ms,
                )
                raise HTTPException(status_code=400, detail="Submission exceeded time limit")

        provided = {entry.field_id for entry in payload.answers}
        for form_field in form.public_fields():
            if form_field.required and form_field.id not in provided:
                raise HTTPException(
                    status_code=400, detail=f"Missing required field: {form_field.id}"
                )

        answers = _parse_answers(form, payload)
        score = max_score = None
        if form.is_quiz:
            summary = score_answers(form, answers)
            score, max_score = summary.score, summary.max_score

        stored = repo.add_response(
            form.id,
            responder,
            answers,
            started_at=payload.started_at,
            duration_ms=payload.duration_ms,
            score=score,
            max_score=max_score,
        )
        logger.info("Stored response %s for form %s", stored.id, form.id)
        return {
            "success": True,
            "data": {"id": stored.id, "score": score, "maxScore": max_score},
        }

    @app.get("/forms/{form_id}/responses")
    def list_responses(
        form_id: str,
        repo: FormRepository = Depends(repository_dep),
    ) -> dict[str, object]:
        form = repo.get_form(form_id)
        if form is None:
            raise HTTPException(status_code=404, detail="Not found")
        responses = repo.list_responses(form.id)
        return {
            "success": True,
            "data": [_serialize_response(stored) for stored in responses],
        }

    return app


def start_api_server(
    repository: FormRepository,
    host: str = DEFAULT_HOST,
    port: int = DEFAULT_PORT,
) -> Thread:
    """Start the FastAPI server in a background daemon thread."""
    app = create_api_app(repository)
    config = uvicorn.Config(app=app, host=host, port=port, log_level="info")
    server = uvicorn.Server(config)

    def run_server() -> None:
        server.run()

    thread = Thread(target=run_server, name="ExamApiServer", daemon=True)
    thread.start()
    return thread
