"""Message boxes used by the exam screens.

None of these may be opened while a proctoring monitor is attached: a modal
dialog deactivates the exam window and is recorded as a focus violation.
"""

from __future__ import annotations

from PySide6.QtWidgets import QMessageBox, QWidget

from exam_app.constants.ui_constants import (
    SUBMIT_CONFIRM_TEXT,
    SUBMIT_CONFIRM_TITLE,
    UNANSWERED_TEMPLATE,
)


def confirm_submit_exam(parent: QWidget, unanswered_required: int = 0) -> bool:
    """Ask before a manual submission.

    Args:
        parent: Parent widget for the dialog
        unanswered_required: Number of required questions still empty

    Returns:
        True if user confirmed, False otherwise
    """
    lines = [SUBMIT_CONFIRM_TEXT]
    if unanswered_required:
        lines.insert(0, UNANSWERED_TEMPLATE.format(count=unanswered_required))
    reply = QMessageBox.question(
        parent,
        SUBMIT_CONFIRM_TITLE,
        "\n\n".join(lines),
        QMessageBox.Yes | QMessageBox.No,
        QMessageBox.No,
    )
    return reply == QMessageBox.Yes


def show_error(parent: QWidget | None, title: str, message: str) -> None:
    QMessageBox.critical(parent, title, message)


def show_info(parent: QWidget | None, title: str, message: str) -> None:
    QMessageBox.information(parent, title, message)


def show_warning(parent: QWidget | None, title: str, message: str) -> None:
    QMessageBox.warning(parent, title, message)
