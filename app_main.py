"""Application entry point for ExamQt."""

from __future__ import annotations

from pathlib import Path
import sys

from PySide6.QtWidgets import QApplication

from exam_app.constants.about import APP_NAME, APP_VERSION
from exam_app.constants.network_constants import DEFAULT_HOST, DEFAULT_PORT
from exam_app.core.form_importer import FormImportError, load_form_from_file
from exam_app.core.services.form_repository import FormRepository
from exam_app.core.services.submission_transport import HttpSubmissionTransport
from exam_app.server.api_server import start_api_server
from exam_app.styling.styles import apply_application_styles
from exam_app.ui.dialog_helpers import show_error
from exam_app.ui.exam_main_window import ExamMainWindow
from exam_app.utils.logging_config import configure_logging

DEFAULT_FORM_FILE = Path("exam_form.json")
SAMPLE_FORM_FILE = Path(__file__).resolve().parent / "exam_app" / "data" / "sample_exam.json"


def _resolve_form_path(argv: list[str]) -> Path:
    """Command-line path first, then ``exam_form.json``, then the bundled sample."""
    if len(argv) > 1:
        return Path(argv[1])
    if DEFAULT_FORM_FILE.exists():
        return DEFAULT_FORM_FILE
    return SAMPLE_FORM_FILE


def main() -> None:
    """Initialize logging, start the exam server, and launch the Qt UI."""
    logger = configure_logging()
    logger.info("Starting %s %s", APP_NAME, APP_VERSION)

    app = QApplication(sys.argv)
    apply_application_styles(app)

    form_path = _resolve_form_path(sys.argv)
    try:
        imported = load_form_from_file(form_path)
    except (OSError, FormImportError) as exc:
        logger.error("Could not load form %s: %s", form_path, exc)
        show_error(None, "Form could not be loaded", str(exc))
        sys.exit(1)
    form = imported.form
    logger.info("Loaded form %s (%d fields) from %s", form.id, len(form.fields), form_path)

    repository = FormRepository()
    repository.add_form(form)
    start_api_server(repository, host=DEFAULT_HOST, port=DEFAULT_PORT)
    base_url = f"http://{DEFAULT_HOST}:{DEFAULT_PORT}"
    logger.info("Exam server available at %s", base_url)

    transport = HttpSubmissionTransport(base_url, form.id)
    window = ExamMainWindow(form=form, transport=transport)
    window.show()
    sys.exit(app.exec())


if __name__ == "__main__":
    main()
