"""Input widgets for each field type, each producing a typed answer."""

from __future__ import annotations

from datetime import time
import math

from PySide6.QtCore import QDate, QRegularExpression, Qt, Signal
from PySide6.QtGui import QDoubleValidator, QRegularExpressionValidator
from PySide6.QtWidgets import (
    QButtonGroup,
    QCheckBox,
    QComboBox,
    QDateEdit,
    QLabel,
    QLineEdit,
    QPlainTextEdit,
    QRadioButton,
    QVBoxLayout,
    QWidget,
)

from exam_app.constants.ui_constants import FIELD_INPUT_MIN_WIDTH
from exam_app.core.markdown_math_renderer import renderer
from exam_app.core.models import (
    Answer,
    ChoiceAnswer,
    DateAnswer,
    FieldType,
    FormField,
    MultiChoiceAnswer,
    NumberAnswer,
    TextAnswer,
    TimeAnswer,
)

_UNSET_DATE = QDate(1900, 1, 1)
_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class FieldInput(QWidget):
    """Label, help text and editor for one form field."""

    answer_changed = Signal(str, object)

    def __init__(self, form_field: FormField, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.form_field = form_field
        self._layout = QVBoxLayout()
        self._layout.setContentsMargins(0, 6, 0, 6)
        self.setLayout(self._layout)

        label_html = renderer.render_inline(form_field.label)
        if form_field.required:
            label_html += ' <span style="color:#DC2626">*</span>'
        if form_field.points:
            label_html += f' <span style="color:#6B7280">({form_field.points} pts)</span>'
        self.label = QLabel(label_html, self)
        self.label.setTextFormat(Qt.RichText)
        self.label.setWordWrap(True)
        self._layout.addWidget(self.label)

        if form_field.help_text:
            help_label = QLabel(renderer.render_inline(form_field.help_text), self)
            help_label.setTextFormat(Qt.RichText)
            help_label.setWordWrap(True)
            self._layout.addWidget(help_label)

        self._build_editor()

    def _build_editor(self) -> None:
        raise NotImplementedError

    def answer(self) -> Answer:
        raise NotImplementedError

    def set_read_only(self, read_only: bool) -> None:
        self.setEnabled(not read_only)

    def _emit_changed(self, *_args: object) -> None:
        self.answer_changed.emit(self.form_field.id, self.answer())


class TextFieldInput(FieldInput):
    """Short text and email fields."""

    def _build_editor(self) -> None:
        self.editor = QLineEdit(self)
        self.editor.setMinimumWidth(FIELD_INPUT_MIN_WIDTH)
        self.editor.setPlaceholderText(self.form_field.placeholder)
        self.editor.textChanged.connect(self._emit_changed)
        self._layout.addWidget(self.editor)

    def answer(self) -> Answer:
        return TextAnswer(self.editor.text())


class LongTextFieldInput(FieldInput):
    def _build_editor(self) -> None:
        self.editor = QPlainTextEdit(self)
        self.editor.setPlaceholderText(self.form_field.placeholder)
        self.editor.setMinimumHeight(90)
        self.editor.textChanged.connect(self._emit_changed)
        self._layout.addWidget(self.editor)

    def answer(self) -> Answer:
        return TextAnswer(self.editor.toPlainText())


class NumberFieldInput(FieldInput):
    def _build_editor(self) -> None:
        self.editor = QLineEdit(self)
        self.editor.setPlaceholderText(self.form_field.placeholder or "0")
        self.editor.setValidator(QDoubleValidator(self.editor))
        self.editor.textChanged.connect(self._emit_changed)
        self._layout.addWidget(self.editor)

    def answer(self) -> Answer:
        text = self.editor.text().strip()
        if not text:
            return NumberAnswer()
        try:
            number = float(text)
        except ValueError:
            return NumberAnswer()
        # Overflowing input such as 9e999 has no JSON form.
        if not math.isfinite(number):
            return NumberAnswer()
        return NumberAnswer(number)


class DateFieldInput(FieldInput):
    """Date picker whose minimum date stands for "not answered"."""

    def _build_editor(self) -> None:
        self.editor = QDateEdit(self)
        self.editor.setCalendarPopup(True)
        self.editor.setMinimumDate(_UNSET_DATE)
        self.editor.setSpecialValueText("Not set")
        self.editor.setDate(_UNSET_DATE)
        self.editor.setDisplayFormat("yyyy-MM-dd")
        self.editor.dateChanged.connect(self._emit_changed)
        self._layout.addWidget(self.editor)

    def answer(self) -> Answer:
        selected = self.editor.date()
        if selected == _UNSET_DATE:
            return DateAnswer()
        return DateAnswer(selected.toPython())


class TimeFieldInput(FieldInput):
    def _build_editor(self) -> None:
        self.editor = QLineEdit(self)
        self.editor.setPlaceholderText("HH:MM")
        self.editor.setValidator(
            QRegularExpressionValidator(QRegularExpression(_TIME_PATTERN), self.editor)
        )
        self.editor.textChanged.connect(self._emit_changed)
        self._layout.addWidget(self.editor)

    def answer(self) -> Answer:
        text = self.editor.text().strip()
        if not self.editor.hasAcceptableInput():
            return TimeAnswer()
        return TimeAnswer(time.fromisoformat(text))


class RadioFieldInput(FieldInput):
    def _build_editor(self) -> None:
        self.button_group = QButtonGroup(self)
        self.button_group.setExclusive(True)
        for index, option in enumerate(self.form_field.options):
            button = QRadioButton(option, self)
            self.button_group.addButton(button, index)
            self._layout.addWidget(button)
        self.button_group.idClicked.connect(self._emit_changed)

    def answer(self) -> Answer:
        index = self.button_group.checkedId()
        if index < 0:
            return ChoiceAnswer()
        return ChoiceAnswer(self.form_field.options[index])


class DropdownFieldInput(FieldInput):
    def _build_editor(self) -> None:
        self.editor = QComboBox(self)
        self.editor.addItem(self.form_field.placeholder or "Select an option")
        self.editor.addItems(list(self.form_field.options))
        self.editor.currentIndexChanged.connect(self._emit_changed)
        self._layout.addWidget(self.editor)

    def answer(self) -> Answer:
        index = self.editor.currentIndex()
        if index <= 0:
            return ChoiceAnswer()
        return ChoiceAnswer(self.form_field.options[index - 1])


class CheckboxFieldInput(FieldInput):
    def _build_editor(self) -> None:
        self.checkboxes: list[QCheckBox] = []
        for option in self.form_field.options:
            checkbox = QCheckBox(option, self)
            checkbox.toggled.connect(self._emit_changed)
            self.checkboxes.append(checkbox)
            self._layout.addWidget(checkbox)

    def answer(self) -> Answer:
        return MultiChoiceAnswer(
            tuple(
                option
                for option, box in zip(self.form_field.options, self.checkboxes)
                if box.isChecked()
            )
        )


_INPUT_CLASSES: dict[FieldType, type[FieldInput]] = {
    FieldType.SHORT_TEXT: TextFieldInput,
    FieldType.EMAIL: TextFieldInput,
    FieldType.LONG_TEXT: LongTextFieldInput,
    FieldType.NUMBER: NumberFieldInput,
    FieldType.DATE: DateFieldInput,
    FieldType.TIME: TimeFieldInput,
    FieldType.RADIO: RadioFieldInput,
    FieldType.DROPDOWN: DropdownFieldInput,
    FieldType.CHECKBOX: CheckboxFieldInput,
}


def create_field_input(form_field: FormField, parent: QWidget | None = None) -> FieldInput:
    return _INPUT_CLASSES[form_field.type](form_field, parent)
