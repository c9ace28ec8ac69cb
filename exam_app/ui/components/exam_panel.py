"""Component for answering a quiz while the countdown runs."""

from __future__ import annotations

import logging

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFrame,
    QHBoxLayout,
    QLabel,
    QProgressBar,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from exam_app.constants.exam_constants import RECENT_VIOLATIONS_SHOWN
from exam_app.constants.ui_constants import (
    RETRY_BUTTON,
    SECURITY_FOCUS_LOST_TEXT,
    SECURITY_MONITORED_TEXT,
    SUBMIT_BUTTON,
    SUBMIT_FAILED_TEMPLATE,
    SUBMITTING_TEXT,
    TIME_UP_TEXT,
    VIOLATIONS_TEMPLATE,
)
from exam_app.core.exam_controller import ExamController, SessionPhase
from exam_app.core.models import Answer, Violation
from exam_app.core.services.countdown_timer import format_clock
from exam_app.styling.styles import Styles
from exam_app.ui.components.field_inputs import FieldInput, create_field_input
from exam_app.ui.dialog_helpers import confirm_submit_exam

logger = logging.getLogger(__name__)


class ExamPanel(QWidget):
    """Questions, countdown, security status and the submit/retry controls."""

    def __init__(
        self,
        controller: ExamController,
        parent: QWidget | None = None,
        *,
        confirm_submit: bool = True,
    ) -> None:
        super().__init__(parent)
        self.controller = controller
        self._confirm_submit = confirm_submit
        self._violation_count = 0
        self._recent_violations: list[Violation] = []
        self.field_inputs: dict[str, FieldInput] = {}

        self._build_ui()
        self._connect_controller()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)
        form = self.controller.form

        header_row = QHBoxLayout()
        self.title_label = QLabel(form.title, self)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        self.title_label.setWordWrap(True)
        header_row.addWidget(self.title_label, stretch=1)

        self.time_label = QLabel("", self)
        self.time_label.setVisible(form.is_timed)
        header_row.addWidget(self.time_label)
        layout.addLayout(header_row)

        self.time_progress = QProgressBar(self)
        self.time_progress.setRange(0, 1000)
        self.time_progress.setValue(0)
        self.time_progress.setTextVisible(False)
        self.time_progress.setVisible(form.is_timed)
        layout.addWidget(self.time_progress)

        security_row = QHBoxLayout()
        self.security_label = QLabel(SECURITY_MONITORED_TEXT, self)
        self.security_label.setVisible(form.is_quiz)
        security_row.addWidget(self.security_label)
        security_row.addStretch()
        self.violations_label = QLabel("", self)
        self.violations_label.setVisible(False)
        security_row.addWidget(self.violations_label)
        layout.addLayout(security_row)

        self.recent_violations_label = QLabel("", self)
        self.recent_violations_label.setWordWrap(True)
        self.recent_violations_label.setStyleSheet(Styles.get_field_error_style())
        self.recent_violations_label.setVisible(False)
        layout.addWidget(self.recent_violations_label)

        questions = QWidget(self)
        questions_layout = QVBoxLayout()
        questions.setLayout(questions_layout)
        for form_field in form.public_fields():
            field_input = create_field_input(form_field, questions)
            field_input.answer_changed.connect(self._handle_answer_changed)
            questions_layout.addWidget(field_input)
            self.field_inputs[form_field.id] = field_input
        questions_layout.addStretch(1)

        scroll = QScrollArea(self)
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QFrame.NoFrame)
        scroll.setWidget(questions)
        layout.addWidget(scroll, stretch=1)

        self.status_banner = QLabel("", self)
        self.status_banner.setWordWrap(True)
        self.status_banner.setVisible(False)
        layout.addWidget(self.status_banner)

        button_row = QHBoxLayout()
        button_row.addStretch()
        self.retry_button = QPushButton(RETRY_BUTTON, self)
        self.retry_button.setVisible(False)
        self.retry_button.clicked.connect(self._handle_retry_click)
        button_row.addWidget(self.retry_button)

        self.submit_button = QPushButton(SUBMIT_BUTTON, self)
        self.submit_button.setProperty("primary", True)
        self.submit_button.clicked.connect(self._handle_submit_click)
        button_row.addWidget(self.submit_button)
        layout.addLayout(button_row)

        if form.is_timed:
            self._update_time_display(form.settings.timer.minutes * 60)

    def _connect_controller(self) -> None:
        self.controller.phase_changed.connect(self._handle_phase_changed)
        self.controller.remaining_changed.connect(self._update_time_display)
        self.controller.violation_recorded.connect(self._handle_violation)
        self.controller.submission_failed.connect(self._handle_submission_failed)

    def attach_monitor_signals(self) -> None:
        """Follow focus changes once the controller has created its monitor."""
        monitor = self.controller.monitor
        if monitor is not None:
            monitor.focus_changed.connect(self._handle_focus_changed)

    def _handle_answer_changed(self, field_id: str, answer: Answer) -> None:
        if self.controller.phase is not SessionPhase.ACTIVE:
            return
        try:
            self.controller.record_answer(field_id, answer)
        except ValueError as exc:
            logger.warning("Answer for %s rejected: %s", field_id, exc)

    def _handle_submit_click(self) -> None:
        if self.controller.phase is SessionPhase.ERROR:
            self._handle_retry_click()
            return
        # A modal dialog would deactivate the window and count as a violation.
        if self._confirm_submit and self.controller.monitor is None:
            missing = len(self.controller.unanswered_required_fields())
            if not confirm_submit_exam(self, missing):
                return
        self.controller.submit()

    def _handle_retry_click(self) -> None:
        self.controller.retry_submission()

    def _handle_phase_changed(self, phase: SessionPhase) -> None:
        locked = phase in (SessionPhase.EXPIRED, SessionPhase.SUBMITTING, SessionPhase.ERROR)
        for field_input in self.field_inputs.values():
            field_input.set_read_only(locked or phase is SessionPhase.COMPLETED)

        if phase is SessionPhase.EXPIRED:
            self._show_banner(TIME_UP_TEXT, "warning")
        elif phase is SessionPhase.SUBMITTING:
            self.submit_button.setText(SUBMITTING_TEXT)
            self.submit_button.setEnabled(False)
            self.retry_button.setVisible(False)
            if not self.controller.session.is_expired():
                self.status_banner.setVisible(False)
        elif phase is SessionPhase.ERROR:
            self.submit_button.setText(SUBMITTING_TEXT)
            self.submit_button.setEnabled(False)
        elif phase is SessionPhase.ACTIVE:
            self.submit_button.setText(SUBMIT_BUTTON)
            self.submit_button.setEnabled(True)

    def _handle_submission_failed(self, message: str) -> None:
        self._show_banner(SUBMIT_FAILED_TEMPLATE.format(error=message), "error")
        self.retry_button.setVisible(True)
        self.submit_button.setText(SUBMIT_BUTTON)
        self.submit_button.setEnabled(False)

    def _update_time_display(self, remaining: int) -> None:
        timer = self.controller.timer
        total = timer.total_seconds if timer is not None else self.controller.form.settings.timer.minutes * 60
        self.time_label.setText(format_clock(remaining))
        if timer is not None:
            level = timer.warning_level()
        else:
            level = "normal"
        self.time_label.setStyleSheet(Styles.get_timer_style(level))
        if total > 0:
            self.time_progress.setValue(int((total - remaining) / total * 1000))

    def _handle_violation(self, violation: Violation) -> None:
        self._violation_count += 1
        self._recent_violations.append(violation)
        self._recent_violations = self._recent_violations[-RECENT_VIOLATIONS_SHOWN:]
        self.violations_label.setText(VIOLATIONS_TEMPLATE.format(count=self._violation_count))
        self.violations_label.setStyleSheet(Styles.get_field_error_style())
        self.violations_label.setVisible(True)
        lines = [
            f"{item.timestamp.astimezone().strftime('%H:%M:%S')} {item.detail}"
            for item in self._recent_violations
        ]
        self.recent_violations_label.setText("\n".join(lines))
        self.recent_violations_label.setVisible(True)

    def _handle_focus_changed(self, focused: bool) -> None:
        self.security_label.setText(SECURITY_MONITORED_TEXT if focused else SECURITY_FOCUS_LOST_TEXT)

    def _show_banner(self, text: str, kind: str) -> None:
        self.status_banner.setText(text)
        self.status_banner.setStyleSheet(Styles.get_banner_style(kind))
        self.status_banner.setVisible(True)
