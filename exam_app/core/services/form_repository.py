"""In-memory store of published forms and their responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from threading import Lock
import uuid

from exam_app.core.models import Answer, FormDefinition, ResponderIdentity


@dataclass(slots=True, frozen=True)
class StoredResponse:
    """A response accepted by the server."""

    id: str
    form_id: str
    responder: ResponderIdentity
    answers: dict[str, Answer]
    started_at: datetime | None
    duration_ms: int | None
    score: int | None = None
    max_score: int | None = None
    submitted_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class FormRepository:
    """Holds forms by id (and slug) and the responses submitted to them.

    The server thread and the Qt thread both reach this object, so every
    access goes through one lock.
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._forms: dict[str, FormDefinition] = {}
        self._slugs: dict[str, str] = {}
        self._responses: dict[str, list[StoredResponse]] = {}

    def add_form(self, form: FormDefinition) -> None:
        with self._lock:
            self._forms[form.id] = form
            if form.slug:
                self._slugs[form.slug] = form.id
            self._responses.setdefault(form.id, [])

    def get_form(self, form_id_or_slug: str) -> FormDefinition | None:
        with self._lock:
            form = self._forms.get(form_id_or_slug)
            if form is None and form_id_or_slug in self._slugs:
                form = self._forms.get(self._slugs[form_id_or_slug])
            return form

    def list_forms(self) -> list[FormDefinition]:
        with self._lock:
            return list(self._forms.values())

    def add_response(
        self,
        form_id: str,
        responder: ResponderIdentity,
        answers: dict[str, Answer],
        *,
        started_at: datetime | None = None,
        duration_ms: int | None = None,
        score: int | None = None,
        max_score: int | None = None,
    ) -> StoredResponse:
        with self._lock:
            if form_id not in self._forms:
                raise KeyError(f"Unknown form id: {form_id}")
            stored = StoredResponse(
                id=uuid.uuid4().hex,
                form_id=form_id,
                responder=responder,
                answers=dict(answers),
                started_at=started_at,
                duration_ms=duration_ms,
                score=score,
                max_score=max_score,
            )
            self._responses[form_id].append(stored)
            return stored

    def find_duplicate(
        self,
        form_id: str,
        responder: ResponderIdentity,
        dedupe_by: tuple[str, ...],
    ) -> StoredResponse | None:
        """Return an earlier response sharing any of the ``dedupe_by`` identity keys."""
        keys = {
            key: getattr(responder, key)
            for key in dedupe_by
            if getattr(responder, key, None)
        }
        if not keys:
            return None
        with self._lock:
            for stored in self._responses.get(form_id, []):
                for key, value in keys.items():
                    if getattr(stored.responder, key) == value:
                        return stored
        return None

    def list_responses(self, form_id: str) -> list[StoredResponse]:
        with self._lock:
            return list(self._responses.get(form_id, []))

    def response_count(self, form_id: str) -> int:
        with self._lock:
            return len(self._responses.get(form_id, []))
