"""Exam delivery constants shared across UI and core layers."""

TIMER_TICK_INTERVAL_MS: int = 1000
TIMER_WARNING_THRESHOLD_MINUTES: int = 5

SUBMIT_RETRY_DELAY_MS: int = 1000
SUBMIT_TIMEOUT_SECONDS: float = 15.0
# Grace period the server grants auto-submitted attempts for network and scheduling delay.
DURATION_BUFFER_MS: int = 10_000

STUDENT_ID_PATTERN: str = r"^[A-Za-z0-9]{5,20}$"
EMAIL_PATTERN: str = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

RECENT_VIOLATIONS_SHOWN: int = 3
