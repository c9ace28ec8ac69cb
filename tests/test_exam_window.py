from __future__ import annotations

from datetime import date, time

import pytest
from PySide6.QtCore import QDate

from conftest import make_form, multi_choice_field, single_choice_field

from exam_app.core.exam_controller import ExamController, SessionPhase
from exam_app.core.models import (
    ChoiceAnswer,
    DateAnswer,
    FieldType,
    FormField,
    IdentityRequirements,
    MultiChoiceAnswer,
    NumberAnswer,
    TimeAnswer,
)
from exam_app.ui.components.field_inputs import create_field_input
from exam_app.ui.exam_main_window import ExamMainWindow, ExamMode


@pytest.fixture
def window(qtbot, transport, scheduler, clock):
    form = make_form(
        single_choice_field(required=True),
        multi_choice_field(),
        timer_minutes=5,
        identity=IdentityRequirements(require_name=True),
        fullscreen=False,
    )
    controller = ExamController(form, transport, scheduler=scheduler, clock=clock)
    main_window = ExamMainWindow(form, transport, controller=controller)
    qtbot.addWidget(main_window)
    return main_window


def test_walkthrough_from_identity_to_results(window, transport):
    assert window.mode is ExamMode.IDENTITY

    window.identity_panel.continue_button.click()
    error_label = window.identity_panel.error_labels["name"]
    assert not error_label.isHidden()
    assert error_label.text() == "Name is required"

    window.identity_panel.inputs["name"].setText("Ana")
    window.identity_panel.continue_button.click()
    assert window.mode is ExamMode.START
    assert window.start_panel.welcome_label.text() == "Welcome, Ana."

    window.start_panel.start_button.click()
    assert window.mode is ExamMode.EXAM
    assert window.controller.monitor is not None
    assert window.exam_panel.time_label.text() == "5:00"

    window.exam_panel.field_inputs["q1"].button_group.button(1).click()
    window.exam_panel.field_inputs["m1"].checkboxes[0].setChecked(True)
    assert window.controller.session.get_answer("q1") == ChoiceAnswer("B")
    assert window.controller.session.get_answer("m1") == MultiChoiceAnswer(("X",))

    window.exam_panel.submit_button.click()
    assert window.controller.phase is SessionPhase.SUBMITTING
    assert not window.exam_panel.submit_button.isEnabled()

    transport.succeed()
    assert window.mode is ExamMode.RESULTS
    assert window.results_panel.score_label.text() == "67%"
    assert not window.controller.monitor.is_attached()


def test_failed_submission_shows_retry(window, transport, scheduler):
    window.identity_panel.inputs["name"].setText("Ana")
    window.identity_panel.continue_button.click()
    window.start_panel.start_button.click()

    window.exam_panel.submit_button.click()
    transport.fail()
    scheduler.run_pending()
    transport.fail("Server unavailable")

    assert window.mode is ExamMode.EXAM
    assert not window.exam_panel.retry_button.isHidden()
    assert "Server unavailable" in window.exam_panel.status_banner.text()

    window.exam_panel.retry_button.click()
    transport.succeed()
    assert window.mode is ExamMode.RESULTS


def _field(field_type: FieldType, **kwargs) -> FormField:
    return FormField(id="f", label="Field", type=field_type, **kwargs)


def test_number_input(qtbot):
    field_input = create_field_input(_field(FieldType.NUMBER))
    qtbot.addWidget(field_input)

    assert field_input.answer() == NumberAnswer()
    field_input.editor.setText("4.5")
    assert field_input.answer() == NumberAnswer(4.5)
    field_input.editor.setText("9e999")
    assert field_input.answer() == NumberAnswer()


def test_time_input_accepts_only_complete_times(qtbot):
    field_input = create_field_input(_field(FieldType.TIME))
    qtbot.addWidget(field_input)

    field_input.editor.setText("09:30")
    assert field_input.answer() == TimeAnswer(time(9, 30))
    field_input.editor.setText("9")
    assert field_input.answer() == TimeAnswer()


def test_date_input_starts_unset(qtbot):
    field_input = create_field_input(_field(FieldType.DATE))
    qtbot.addWidget(field_input)

    assert field_input.answer() == DateAnswer()
    field_input.editor.setDate(QDate(2026, 3, 2))
    assert field_input.answer() == DateAnswer(date(2026, 3, 2))


def test_dropdown_placeholder_means_no_answer(qtbot):
    field_input = create_field_input(_field(FieldType.DROPDOWN, options=("red", "green")))
    qtbot.addWidget(field_input)
    changes = []
    field_input.answer_changed.connect(lambda field_id, answer: changes.append(answer))

    assert field_input.answer() == ChoiceAnswer()
    field_input.editor.setCurrentIndex(2)

    assert changes == [ChoiceAnswer("green")]
