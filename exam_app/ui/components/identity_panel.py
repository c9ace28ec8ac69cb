"""Component collecting the responder's identity before a quiz."""

from __future__ import annotations

from collections.abc import Callable

from PySide6.QtWidgets import (
    QFormLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from exam_app.constants.ui_constants import (
    EMAIL_PLACEHOLDER,
    IDENTITY_CONTINUE_BUTTON,
    IDENTITY_DESCRIPTION,
    IDENTITY_HEADING,
    NAME_PLACEHOLDER,
    STUDENT_ID_PLACEHOLDER,
)
from exam_app.core.identity_gate import IdentityGate
from exam_app.styling.styles import Styles

_FIELD_SPECS = (
    ("name", "Full Name", NAME_PLACEHOLDER),
    ("email", "Email Address", EMAIL_PLACEHOLDER),
    ("student_id", "Student ID", STUDENT_ID_PLACEHOLDER),
)


class IdentityPanel(QWidget):
    """Shows one input per required identity field with inline errors."""

    def __init__(
        self,
        gate: IdentityGate,
        on_submit: Callable[[str | None, str | None, str | None], None],
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self.gate = gate
        self.on_submit = on_submit
        self.inputs: dict[str, QLineEdit] = {}
        self.error_labels: dict[str, QLabel] = {}

        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        heading = QLabel(IDENTITY_HEADING, self)
        heading.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(heading)

        description = QLabel(IDENTITY_DESCRIPTION, self)
        description.setWordWrap(True)
        layout.addWidget(description)

        form_layout = QFormLayout()
        required = set(self.gate.required_field_names())
        for key, label, placeholder in _FIELD_SPECS:
            if key not in required:
                continue
            line_edit = QLineEdit(self)
            line_edit.setPlaceholderText(placeholder)
            line_edit.returnPressed.connect(self._handle_continue)
            error_label = QLabel("", self)
            error_label.setStyleSheet(Styles.get_field_error_style())
            error_label.setVisible(False)

            column = QVBoxLayout()
            column.addWidget(line_edit)
            column.addWidget(error_label)
            form_layout.addRow(f"{label} *", column)

            self.inputs[key] = line_edit
            self.error_labels[key] = error_label
        layout.addLayout(form_layout)

        self.continue_button = QPushButton(IDENTITY_CONTINUE_BUTTON, self)
        self.continue_button.setProperty("primary", True)
        self.continue_button.clicked.connect(self._handle_continue)
        layout.addWidget(self.continue_button)
        layout.addStretch(1)

    def _value(self, key: str) -> str | None:
        line_edit = self.inputs.get(key)
        return line_edit.text() if line_edit is not None else None

    def _handle_continue(self) -> None:
        self.clear_errors()
        self.on_submit(self._value("name"), self._value("email"), self._value("student_id"))

    def set_errors(self, errors: dict[str, str]) -> None:
        for key, message in errors.items():
            label = self.error_labels.get(key)
            if label is None:
                continue
            label.setText(message)
            label.setVisible(True)

    def clear_errors(self) -> None:
        for label in self.error_labels.values():
            label.clear()
            label.setVisible(False)
