"""Qt main window walking a responder through one exam attempt."""

from __future__ import annotations

from enum import Enum, auto
import logging

from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import QMainWindow, QStackedWidget, QVBoxLayout, QWidget

from exam_app.constants.about import APP_NAME
from exam_app.constants.ui_constants import UNAVAILABLE_TITLE, WINDOW_TITLE
from exam_app.core.errors import ExamUnavailableError, IdentityValidationError
from exam_app.core.exam_controller import ExamController, SessionPhase
from exam_app.core.models import FormDefinition, SubmissionResult
from exam_app.core.services.submission_transport import SubmissionTransport
from exam_app.ui.components.exam_panel import ExamPanel
from exam_app.ui.components.identity_panel import IdentityPanel
from exam_app.ui.components.results_panel import ResultsPanel
from exam_app.ui.components.start_panel import StartPanel
from exam_app.ui.dialog_helpers import show_warning

logger = logging.getLogger(__name__)


class ExamMode(Enum):
    """Screen currently shown to the responder."""

    IDENTITY = auto()
    START = auto()
    EXAM = auto()
    RESULTS = auto()


_PHASE_MODES = {
    SessionPhase.AWAITING_IDENTITY: ExamMode.IDENTITY,
    SessionPhase.READY_TO_START: ExamMode.START,
    SessionPhase.ACTIVE: ExamMode.EXAM,
    SessionPhase.EXPIRED: ExamMode.EXAM,
    SessionPhase.SUBMITTING: ExamMode.EXAM,
    SessionPhase.ERROR: ExamMode.EXAM,
    SessionPhase.COMPLETED: ExamMode.RESULTS,
}


class ExamMainWindow(QMainWindow):
    """Main Qt window switching between identity, start, exam and results."""

    def __init__(
        self,
        form: FormDefinition,
        transport: SubmissionTransport,
        controller: ExamController | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle(f"{form.title} - {WINDOW_TITLE}")

        self.form = form
        self.controller = controller or ExamController(form, transport, parent=self)
        self._mode = ExamMode.IDENTITY

        self._build_ui()
        self.controller.phase_changed.connect(self._handle_phase_changed)
        self.controller.result_ready.connect(self._handle_result_ready)
        self._set_mode(_PHASE_MODES[self.controller.phase])

    @property
    def mode(self) -> ExamMode:
        return self._mode

    def _build_ui(self) -> None:
        central_widget = QWidget(self)
        self.setCentralWidget(central_widget)

        root_layout = QVBoxLayout()
        central_widget.setLayout(root_layout)

        self.mode_stack = QStackedWidget(self)

        self.identity_panel = IdentityPanel(
            self.controller.identity_gate,
            on_submit=self._handle_identity_submit,
            parent=self,
        )
        self.start_panel = StartPanel(self.form, on_start=self._handle_start, parent=self)
        self.exam_panel = ExamPanel(self.controller, parent=self)
        self.results_panel = ResultsPanel(parent=self)

        self.mode_stack.addWidget(self.identity_panel)
        self.mode_stack.addWidget(self.start_panel)
        self.mode_stack.addWidget(self.exam_panel)
        self.mode_stack.addWidget(self.results_panel)

        root_layout.addWidget(self.mode_stack)

    def _set_mode(self, mode: ExamMode) -> None:
        self._mode = mode
        index_map = {
            ExamMode.IDENTITY: 0,
            ExamMode.START: 1,
            ExamMode.EXAM: 2,
            ExamMode.RESULTS: 3,
        }
        self.mode_stack.setCurrentIndex(index_map[mode])

    def _handle_phase_changed(self, phase: SessionPhase) -> None:
        self._set_mode(_PHASE_MODES[phase])
        if phase is SessionPhase.COMPLETED and self.isFullScreen():
            self.showNormal()

    def _handle_identity_submit(
        self,
        name: str | None,
        email: str | None,
        student_id: str | None,
    ) -> None:
        try:
            identity = self.controller.submit_identity(name, email, student_id)
        except IdentityValidationError as exc:
            self.identity_panel.set_errors(exc.errors)
            return
        self.start_panel.set_identity(identity)

    def _handle_start(self) -> None:
        try:
            self.controller.start(window=self)
        except ExamUnavailableError as exc:
            show_warning(self, UNAVAILABLE_TITLE, str(exc))
            return
        self.exam_panel.attach_monitor_signals()

    def _handle_result_ready(self, result: SubmissionResult) -> None:
        self.results_panel.show_result(self.form, result)

    def closeEvent(self, event: QCloseEvent) -> None:
        logger.info("Closing %s window", APP_NAME)
        self.controller.teardown()
        super().closeEvent(event)
