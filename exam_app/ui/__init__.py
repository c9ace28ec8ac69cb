"""Qt UI components for the exam application."""

from .dialog_helpers import (
    confirm_submit_exam,
    show_error,
    show_info,
    show_warning,
)
from .exam_main_window import ExamMainWindow, ExamMode

__all__ = [
    "ExamMainWindow",
    "ExamMode",
    "confirm_submit_exam",
    "show_error",
    "show_info",
    "show_warning",
]
