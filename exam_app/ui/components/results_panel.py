"""Component presenting the outcome of a submitted attempt."""

from __future__ import annotations

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QFrame,
    QGroupBox,
    QLabel,
    QPushButton,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)

from exam_app.constants.ui_constants import (
    AUTO_SUBMITTED_TEXT,
    RESULTS_HEADING,
    REVEAL_BUTTON_HIDE,
    REVEAL_BUTTON_SHOW,
    UNGRADED_TEXT,
)
from exam_app.core.markdown_math_renderer import renderer
from exam_app.core.models import FormDefinition, SubmissionResult
from exam_app.core.results_presenter import ResultsPresenter, ReviewRow
from exam_app.styling.styles import Styles


class ResultsPanel(QWidget):
    """Score summary plus the reveal-answers review list."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.presenter: ResultsPresenter | None = None
        self._review_widgets: list[QWidget] = []
        self._build_ui()

    def _build_ui(self) -> None:
        layout = QVBoxLayout()
        self.setLayout(layout)

        self.heading_label = QLabel(RESULTS_HEADING, self)
        self.heading_label.setStyleSheet(Styles.get_large_label_style())
        layout.addWidget(self.heading_label)

        self.score_label = QLabel("", self)
        self.score_label.setStyleSheet("font-size: 28pt; font-weight: bold;")
        self.score_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.score_label)

        self.grade_label = QLabel("", self)
        self.grade_label.setAlignment(Qt.AlignCenter)
        layout.addWidget(self.grade_label)

        self.details_label = QLabel("", self)
        self.details_label.setWordWrap(True)
        layout.addWidget(self.details_label)

        self.notice_label = QLabel("", self)
        self.notice_label.setWordWrap(True)
        self.notice_label.setVisible(False)
        layout.addWidget(self.notice_label)

        self.reveal_button = QPushButton(REVEAL_BUTTON_SHOW, self)
        self.reveal_button.clicked.connect(self._handle_reveal_toggle)
        layout.addWidget(self.reveal_button)

        review_container = QWidget(self)
        self.review_layout = QVBoxLayout()
        review_container.setLayout(self.review_layout)
        self.review_scroll = QScrollArea(self)
        self.review_scroll.setWidgetResizable(True)
        self.review_scroll.setFrameShape(QFrame.NoFrame)
        self.review_scroll.setWidget(review_container)
        self.review_scroll.setVisible(False)
        layout.addWidget(self.review_scroll, stretch=1)
        layout.addStretch()

    def show_result(self, form: FormDefinition, result: SubmissionResult) -> None:
        self.presenter = ResultsPresenter(form, result)
        view = self.presenter.view

        if view.is_graded:
            self.score_label.setText(f"{view.percentage}%")
            grade_text = f"{view.grade}  ({view.score_text} points)"
            if view.passed is not None:
                grade_text += "  Passed" if view.passed else "  Not passed"
            self.grade_label.setText(grade_text)
        else:
            self.score_label.setText("")
            self.grade_label.setText(UNGRADED_TEXT)

        self.details_label.setText(
            f"Time taken: {view.duration_text}\n"
            f"Started: {view.start_time}\n"
            f"Finished: {view.end_time}"
        )

        notices = []
        if view.auto_submitted:
            notices.append(AUTO_SUBMITTED_TEXT)
        if view.violation_count:
            notices.append(f"{view.violation_count} integrity event(s) were recorded.")
        self.notice_label.setText("\n".join(notices))
        self.notice_label.setVisible(bool(notices))

        self.reveal_button.setText(REVEAL_BUTTON_SHOW)
        self.reveal_button.setVisible(self.presenter.can_reveal())
        self._render_review()

    def _handle_reveal_toggle(self) -> None:
        if self.presenter is None:
            return
        revealed = self.presenter.toggle_reveal()
        self.reveal_button.setText(REVEAL_BUTTON_HIDE if revealed else REVEAL_BUTTON_SHOW)
        self._render_review()

    def _render_review(self) -> None:
        for widget in self._review_widgets:
            self.review_layout.removeWidget(widget)
            widget.deleteLater()
        self._review_widgets = []

        rows = self.presenter.visible_review() if self.presenter is not None else ()
        for row in rows:
            box = self._build_review_box(row)
            self.review_layout.addWidget(box)
            self._review_widgets.append(box)
        self.review_scroll.setVisible(bool(rows))

    def _build_review_box(self, row: ReviewRow) -> QGroupBox:
        box = QGroupBox(self)
        box_layout = QVBoxLayout()
        box.setLayout(box_layout)

        title = QLabel(renderer.render_inline(row.label), box)
        title.setTextFormat(Qt.RichText)
        title.setWordWrap(True)
        box_layout.addWidget(title)

        verdict = QLabel(
            f"{'Correct' if row.is_correct else 'Incorrect'} "
            f"({row.points_awarded}/{row.points_possible})",
            box,
        )
        verdict.setStyleSheet(Styles.get_result_style(row.is_correct))
        box_layout.addWidget(verdict)

        box_layout.addWidget(QLabel(f"Your answer: {row.your_answer}", box))
        box_layout.addWidget(QLabel(f"Correct answer: {row.correct_answer}", box))
        if row.explanation:
            explanation = QLabel(renderer.render_inline(row.explanation), box)
            explanation.setTextFormat(Qt.RichText)
            explanation.setWordWrap(True)
            box_layout.addWidget(explanation)
        return box
