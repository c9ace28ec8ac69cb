"""Component shown between identity verification and the first question."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtCore import Qt
from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget

from exam_app.constants.about import (
    APP_ABOUT_TEXT,
    APP_LICENSE,
    APP_NAME,
    APP_VERSION,
    INSTRUCTIONS_TEXT,
)
from exam_app.constants.ui_constants import (
    START_BUTTON,
    START_HEADING,
    START_TIMED_TEMPLATE,
    START_UNTIMED_TEXT,
)
from exam_app.core.markdown_math_renderer import renderer
from exam_app.core.models import FormDefinition, ResponderIdentity
from exam_app.styling.styles import Styles
from exam_app.ui.dialog_helpers import show_info


class StartPanel(QWidget):
    """Explains the rules and waits for an explicit start."""

    def __init__(
        self,
        form: FormDefinition,
        on_start: Callable[[], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.form = form
        self.on_start = on_start
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.title_label = QLabel(self.form.title, self)
        self.title_label.setStyleSheet(Styles.get_large_label_style())
        self.title_label.setWordWrap(True)
        layout.addWidget(self.title_label)

        if self.form.description:
            description = QLabel(renderer.render_fragment(self.form.description), self)
            description.setTextFormat(Qt.RichText)
            description.setWordWrap(True)
            layout.addWidget(description)

        self.heading_label = QLabel(START_HEADING, self)
        layout.addWidget(self.heading_label)

        self.welcome_label = QLabel("", self)
        self.welcome_label.setVisible(False)
        layout.addWidget(self.welcome_label)

        if self.form.is_timed:
            timing = START_TIMED_TEMPLATE.format(minutes=self.form.settings.timer.minutes)
        else:
            timing = START_UNTIMED_TEXT
        self.timing_label = QLabel(timing, self)
        layout.addWidget(self.timing_label)

        if self.form.is_quiz:
            self.instructions_label = QLabel(INSTRUCTIONS_TEXT, self)
            self.instructions_label.setWordWrap(True)
            self.instructions_label.setStyleSheet(Styles.get_banner_style("warning"))
            layout.addWidget(self.instructions_label)

        self.start_button = QPushButton(START_BUTTON, self)
        self.start_button.setProperty("primary", True)
        self.start_button.clicked.connect(self._handle_start_click)

        button_row = QHBoxLayout()
        self.about_button = QPushButton(f"About {APP_NAME}", self)
        self.about_button.clicked.connect(self._handle_about)
        button_row.addWidget(self.about_button)
        button_row.addStretch()
        button_row.addWidget(self.start_button)
        layout.addLayout(button_row)
        layout.addStretch(1)

    def _handle_start_click(self) -> None:
        self.on_start()

    def _handle_about(self) -> None:
        details = (
            f"{APP_NAME} v{APP_VERSION}\n"
            f"License: {APP_LICENSE}\n\n"
            f"{APP_ABOUT_TEXT}"
        )
        show_info(self, f"About {APP_NAME}", details)

    def set_identity(self, identity: ResponderIdentity) -> None:
        if identity.name:
            self.welcome_label.setText(f"Welcome, {identity.name}.")
            self.welcome_label.setVisible(True)
