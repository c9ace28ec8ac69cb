"""State machine driving one attempt from identity check to results."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timezone
from enum import Enum
import logging
from typing import Any

from PySide6.QtCore import QObject, QTimer, Signal
from PySide6.QtWidgets import QWidget

from exam_app.constants.exam_constants import SUBMIT_RETRY_DELAY_MS
from exam_app.core.errors import ExamUnavailableError, SubmissionError
from exam_app.core.identity_gate import IdentityGate
from exam_app.core.models import (
    Answer,
    FormDefinition,
    ResponderIdentity,
    SubmissionResult,
    SubmitResponse,
    SubmitTrigger,
    Violation,
)
from exam_app.core.scoring import score_answers
from exam_app.core.services.countdown_timer import CountdownTimer
from exam_app.core.services.exam_session import ExamSession
from exam_app.core.services.proctoring_monitor import ProctoringMonitor
from exam_app.core.services.submission_transport import SubmissionTransport

logger = logging.getLogger(__name__)

Scheduler = Callable[[int, Callable[[], None]], None]


class SessionPhase(Enum):
    """Where an attempt stands."""

    AWAITING_IDENTITY = "awaiting_identity"
    READY_TO_START = "ready_to_start"
    ACTIVE = "active"
    EXPIRED = "expired"
    SUBMITTING = "submitting"
    ERROR = "error"
    COMPLETED = "completed"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _qt_single_shot(delay_ms: int, callback: Callable[[], None]) -> None:
    QTimer.singleShot(delay_ms, callback)


def _display_time(moment: datetime) -> str:
    return moment.astimezone().strftime("%Y-%m-%d %H:%M:%S")


class ExamController(QObject):
    """Orchestrates identity, start, the active session, submission and results.

    This is the only object that submits. Both the Submit button and the
    countdown expiry go through ``_begin_submission``, where the session's
    ``submitting`` flag is checked and set in one step on the Qt thread, so a
    double click racing the timer produces a single request.

    A failed submission is retried once automatically after
    ``SUBMIT_RETRY_DELAY_MS``. If that fails too the controller rests in
    ERROR with the payload kept, and ``retry_submission()`` resends it.
    """

    phase_changed = Signal(object)
    remaining_changed = Signal(int)
    violation_recorded = Signal(object)
    result_ready = Signal(object)
    submission_failed = Signal(str)

    def __init__(
        self,
        form: FormDefinition,
        transport: SubmissionTransport,
        *,
        scheduler: Scheduler | None = None,
        clock: Callable[[], datetime] = _utcnow,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._form = form
        self._transport = transport
        self._scheduler = scheduler or _qt_single_shot
        self._clock = clock
        self._gate = IdentityGate(form.settings.identity)
        self._session = ExamSession(form)
        self._identity = ResponderIdentity()
        self._timer: CountdownTimer | None = None
        self._monitor: ProctoringMonitor | None = None
        self._pending_payload: dict[str, Any] | None = None
        self._pending_trigger = SubmitTrigger.MANUAL
        self._ended_at: datetime | None = None
        self._auto_retry_used = False
        self._last_error: str | None = None
        self._result: SubmissionResult | None = None
        self._phase = (
            SessionPhase.AWAITING_IDENTITY
            if self._gate.is_required()
            else SessionPhase.READY_TO_START
        )

    # --- Read-only state ---

    @property
    def form(self) -> FormDefinition:
        return self._form

    @property
    def phase(self) -> SessionPhase:
        return self._phase

    @property
    def identity(self) -> ResponderIdentity:
        return self._identity

    @property
    def identity_gate(self) -> IdentityGate:
        return self._gate

    @property
    def session(self) -> ExamSession:
        return self._session

    @property
    def timer(self) -> CountdownTimer | None:
        return self._timer

    @property
    def monitor(self) -> ProctoringMonitor | None:
        return self._monitor

    @property
    def result(self) -> SubmissionResult | None:
        return self._result

    @property
    def last_error(self) -> str | None:
        return self._last_error

    def is_submitting(self) -> bool:
        return self._session.is_submitting()

    # --- Identity and start ---

    def submit_identity(
        self,
        name: str | None = None,
        email: str | None = None,
        student_id: str | None = None,
    ) -> ResponderIdentity:
        """Validate identity fields; raises IdentityValidationError on bad input."""
        if self._phase is not SessionPhase.AWAITING_IDENTITY:
            raise RuntimeError("Identity has already been captured.")
        self._identity = self._gate.validate(name=name, email=email, student_id=student_id)
        self._set_phase(SessionPhase.READY_TO_START)
        return self._identity

    def start(self, window: QWidget | None = None) -> None:
        """Begin the attempt: stamp the start, run the timer and the monitor."""
        if self._phase is not SessionPhase.READY_TO_START:
            raise RuntimeError(f"Cannot start an attempt from {self._phase.value}.")
        now = self._clock()
        if not self._form.is_available(now):
            raise ExamUnavailableError("This quiz is not available at this time.")

        remaining = self._form.settings.timer.minutes * 60 if self._form.is_timed else None
        self._session.start(started_at=now, remaining_seconds=remaining)
        logger.info("Attempt started for form %s", self._form.id)

        if self._form.is_timed:
            self._timer = CountdownTimer(
                self._form.settings.timer.minutes,
                on_time_up=self._handle_time_up,
                parent=self,
            )
            self._timer.remaining_changed.connect(self._handle_remaining_changed)

        if self._form.is_quiz and window is not None:
            self._monitor = ProctoringMonitor(
                on_violation=self._session.record_violation,
                prevent_copy_paste=self._form.settings.prevent_copy_paste,
                fullscreen_mode=self._form.settings.fullscreen,
                clock=self._clock,
                parent=self,
            )
            self._monitor.violation_recorded.connect(self.violation_recorded)
            self._monitor.attach(window)
            if self._form.settings.fullscreen:
                self._monitor.request_fullscreen(window)

        self._set_phase(SessionPhase.ACTIVE)
        if self._timer is not None:
            if self._monitor is not None:
                self._timer.lock()
            self._timer.start()

    # --- Active session ---

    def record_answer(self, field_id: str, answer: Answer) -> None:
        if self._phase is not SessionPhase.ACTIVE:
            raise RuntimeError("Answers can only be changed while the attempt is active.")
        self._session.record_answer(field_id, answer)

    def record_violation(self, violation: Violation) -> None:
        """Log a violation observed outside the monitor (e.g. by the UI)."""
        if not self._session.has_started():
            return
        self._session.record_violation(violation)
        self.violation_recorded.emit(violation)

    def unanswered_required_fields(self) -> list[str]:
        answers = self._session.get_answers() if self._session.has_started() else {}
        missing = []
        for form_field in self._form.public_fields():
            answer = answers.get(form_field.id)
            if form_field.required and (answer is None or answer.is_empty()):
                missing.append(form_field.id)
        return missing

    # --- Submission ---

    def submit(self) -> bool:
        """Manual submission. Returns False when it was ignored."""
        if self._phase is SessionPhase.ERROR:
            return self.retry_submission()
        if self._phase is not SessionPhase.ACTIVE:
            logger.debug("Submit ignored in phase %s", self._phase.value)
            return False
        return self._begin_submission(SubmitTrigger.MANUAL)

    def retry_submission(self) -> bool:
        """User-initiated resend of the kept payload after a failed submission."""
        if self._phase is not SessionPhase.ERROR or self._pending_payload is None:
            return False
        if not self._session.try_begin_submit():
            return False
        logger.info("Retrying submission on user request")
        self._set_phase(SessionPhase.SUBMITTING)
        self._send()
        return True

    def _handle_time_up(self) -> None:
        if self._phase is not SessionPhase.ACTIVE:
            return
        self._session.mark_expired()
        self._set_phase(SessionPhase.EXPIRED)
        self._begin_submission(SubmitTrigger.TIMER)

    def _begin_submission(self, trigger: SubmitTrigger) -> bool:
        if not self._session.try_begin_submit():
            logger.debug("Submission already in progress; %s trigger ignored", trigger.value)
            return False

        if self._timer is not None:
            self._timer.stop()
        self._ended_at = self._clock()
        self._pending_trigger = trigger
        self._pending_payload = self._build_payload(trigger, self._ended_at)
        self._auto_retry_used = False
        logger.info(
            "Submitting attempt (%s trigger, %d ms)",
            trigger.value,
            self._pending_payload["durationMs"],
        )
        self._set_phase(SessionPhase.SUBMITTING)
        self._send()
        return True

    def _build_payload(self, trigger: SubmitTrigger, ended_at: datetime) -> dict[str, Any]:
        started_at = self._session.started_at
        if trigger is SubmitTrigger.TIMER and self._form.is_timed:
            duration_ms = self._form.settings.timer.allowed_ms
        else:
            duration_ms = max(0, int((ended_at - started_at).total_seconds() * 1000))

        answers = self._session.get_answers()
        answer_rows = []
        for form_field in self._form.public_fields():
            answer = answers.get(form_field.id)
            row: dict[str, Any] = {
                "fieldId": form_field.id,
                "value": answer.to_wire() if answer is not None else None,
            }
            if form_field.question_code:
                row["questionCode"] = form_field.question_code
            answer_rows.append(row)

        return {
            "responder": self._identity.to_wire(),
            "startedAt": started_at.isoformat(),
            "durationMs": duration_ms,
            "answers": answer_rows,
        }

    def _send(self) -> None:
        if self._pending_payload is None:
            raise RuntimeError("No submission payload to send.")
        try:
            self._transport.send(
                self._pending_payload,
                self._handle_submit_success,
                self._handle_submit_failure,
            )
        except Exception as exc:
            logger.exception("Submission transport failed to send")
            self._handle_submit_failure(SubmissionError(f"Submission failed: {exc}"))

    def _handle_submit_success(self, response: SubmitResponse) -> None:
        if self._phase is SessionPhase.COMPLETED:
            return
        self._session.end_submit()
        self._result = self._build_result(response)
        self._last_error = None
        self._release_resources()
        logger.info(
            "Attempt completed: %d/%d", self._result.score, self._result.max_score
        )
        self._set_phase(SessionPhase.COMPLETED)
        self.result_ready.emit(self._result)

    def _handle_submit_failure(self, error: SubmissionError) -> None:
        if self._phase is SessionPhase.COMPLETED:
            return
        self._last_error = str(error)
        self._set_phase(SessionPhase.ERROR)
        if not self._auto_retry_used:
            self._auto_retry_used = True
            logger.warning(
                "Submission failed (%s); retrying in %d ms", error, SUBMIT_RETRY_DELAY_MS
            )
            self._scheduler(SUBMIT_RETRY_DELAY_MS, self._auto_retry)
            return
        self._session.end_submit()
        logger.error("Submission failed after retry: %s", error)
        self.submission_failed.emit(self._last_error)

    def _auto_retry(self) -> None:
        if self._phase is not SessionPhase.ERROR:
            return
        self._set_phase(SessionPhase.SUBMITTING)
        self._send()

    def _build_result(self, response: SubmitResponse) -> SubmissionResult:
        answers = self._session.get_answers()
        summary = score_answers(self._form, answers)
        score, max_score = summary.score, summary.max_score
        if response.score is not None and response.max_score is not None:
            if (response.score, response.max_score) != (score, max_score):
                logger.warning(
                    "Server score %s/%s differs from local score %s/%s; using server score",
                    response.score,
                    response.max_score,
                    score,
                    max_score,
                )
            score, max_score = response.score, response.max_score

        if self._pending_payload is None or self._ended_at is None:
            raise RuntimeError("No submission is pending.")
        return SubmissionResult(
            score=score,
            max_score=max_score,
            duration_ms=self._pending_payload["durationMs"],
            answers=answers,
            start_time=_display_time(self._session.started_at),
            end_time=_display_time(self._ended_at),
            per_field=summary.per_field,
            trigger=self._pending_trigger,
            violations=tuple(self._session.get_violations()),
            response_id=response.response_id,
        )

    # --- Lifecycle ---

    def teardown(self) -> None:
        """Stop the tick and the monitor. An in-flight submission still completes."""
        self._release_resources()

    def _release_resources(self) -> None:
        if self._timer is not None:
            self._timer.stop()
        if self._monitor is not None:
            self._monitor.detach()

    def _handle_remaining_changed(self, remaining: int) -> None:
        if self._session.has_started():
            self._session.sync_remaining(remaining)
        self.remaining_changed.emit(remaining)

    def _set_phase(self, phase: SessionPhase) -> None:
        if phase is self._phase:
            return
        logger.info("Attempt phase %s -> %s", self._phase.value, phase.value)
        self._phase = phase
        self.phase_changed.emit(phase)
