"""Network configuration constants for the exam application."""

DEFAULT_HOST: str = "127.0.0.1"
DEFAULT_PORT: int = 8000
SUBMIT_PATH_TEMPLATE: str = "/forms/{form_id}/submit"
