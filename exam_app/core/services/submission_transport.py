"""Delivery of attempts to the exam server's submit endpoint."""

from __future__ import annotations

from collections.abc import Callable
import itertools
import logging
from threading import Thread
from typing import Any, Protocol

import httpx
from PySide6.QtCore import QObject, Signal

from exam_app.constants.exam_constants import SUBMIT_TIMEOUT_SECONDS
from exam_app.constants.network_constants import SUBMIT_PATH_TEMPLATE
from exam_app.core.errors import SubmissionError
from exam_app.core.models import SubmitResponse

logger = logging.getLogger(__name__)

SuccessCallback = Callable[[SubmitResponse], None]
FailureCallback = Callable[[SubmissionError], None]


class SubmissionTransport(Protocol):
    """Sends a payload and reports back exactly once through a callback."""

    def send(
        self,
        payload: dict[str, Any],
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None: ...


def post_submission(client: httpx.Client, url: str, payload: dict[str, Any]) -> SubmitResponse:
    """POST ``payload`` and decode the ``{success, data, error}`` envelope.

    Raises SubmissionError for transport errors, unencodable payloads, non-2xx
    statuses, malformed bodies and ``success: false`` replies.
    """
    try:
        response = client.post(url, json=payload)
    except httpx.HTTPError as exc:
        raise SubmissionError(f"Could not reach the exam server: {exc}") from exc
    except (TypeError, ValueError) as exc:
        raise SubmissionError(f"Could not encode the submission: {exc}") from exc

    try:
        body = response.json()
    except ValueError as exc:
        raise SubmissionError(
            f"Unexpected reply from the exam server (HTTP {response.status_code})",
            response.status_code,
        ) from exc

    if not isinstance(body, dict):
        raise SubmissionError("Unexpected reply from the exam server", response.status_code)
    if response.is_error or not body.get("success"):
        message = body.get("error") or f"Submission failed (HTTP {response.status_code})"
        raise SubmissionError(str(message), response.status_code)

    data = body.get("data") or {}
    if not isinstance(data, dict):
        raise SubmissionError("Unexpected reply from the exam server", response.status_code)
    return SubmitResponse(
        response_id=data.get("id"),
        score=data.get("score"),
        max_score=data.get("maxScore"),
    )


class HttpSubmissionTransport(QObject):
    """Posts on a worker thread and calls back on the Qt thread.

    The worker only emits ``_finished``; because this object lives on the
    GUI thread, Qt queues the signal and the callbacks run on the event loop
    alongside the timer and the proctoring monitor.
    """

    _finished = Signal(int, object)

    def __init__(
        self,
        base_url: str,
        form_id: str,
        *,
        timeout: float = SUBMIT_TIMEOUT_SECONDS,
        http_transport: httpx.BaseTransport | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._url = base_url.rstrip("/") + SUBMIT_PATH_TEMPLATE.format(form_id=form_id)
        self._timeout = timeout
        self._http_transport = http_transport
        self._request_ids = itertools.count(1)
        self._pending: dict[int, tuple[SuccessCallback, FailureCallback]] = {}
        self._finished.connect(self._dispatch)

    @property
    def url(self) -> str:
        return self._url

    def send(
        self,
        payload: dict[str, Any],
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        request_id = next(self._request_ids)
        self._pending[request_id] = (on_success, on_failure)
        logger.info("Submitting attempt to %s (request %d)", self._url, request_id)
        worker = Thread(
            target=self._run,
            args=(request_id, payload),
            name=f"ExamSubmit-{request_id}",
            daemon=True,
        )
        try:
            worker.start()
        except RuntimeError:
            self._pending.pop(request_id, None)
            raise

    def _run(self, request_id: int, payload: dict[str, Any]) -> None:
        outcome: SubmitResponse | SubmissionError
        try:
            with httpx.Client(timeout=self._timeout, transport=self._http_transport) as client:
                outcome = post_submission(client, self._url, payload)
        except SubmissionError as exc:
            outcome = exc
        except Exception as exc:
            logger.exception("Submission request %d crashed", request_id)
            outcome = SubmissionError(f"Submission failed: {exc}")
        self._finished.emit(request_id, outcome)

    def _dispatch(self, request_id: int, outcome: object) -> None:
        callbacks = self._pending.pop(request_id, None)
        if callbacks is None:
            return
        on_success, on_failure = callbacks
        if isinstance(outcome, SubmissionError):
            on_failure(outcome)
        else:
            on_success(outcome)
