"""Qt UI constants used across widgets."""

WINDOW_TITLE: str = "ExamQt"

IDENTITY_HEADING: str = "Verify your identity"
IDENTITY_DESCRIPTION: str = "Please provide the following information to start the quiz."
IDENTITY_CONTINUE_BUTTON: str = "Continue"
NAME_PLACEHOLDER: str = "Enter your full name"
EMAIL_PLACEHOLDER: str = "Enter your email address"
STUDENT_ID_PLACEHOLDER: str = "Enter your student ID"

START_HEADING: str = "Ready to start"
START_BUTTON: str = "Start Quiz"
START_TIMED_TEMPLATE: str = "You will have {minutes} minute(s) to complete this quiz."
START_UNTIMED_TEXT: str = "This quiz has no time limit."
UNAVAILABLE_TITLE: str = "Quiz unavailable"

SUBMIT_BUTTON: str = "Submit"
SUBMITTING_TEXT: str = "Submitting..."
RETRY_BUTTON: str = "Retry submission"
SUBMIT_CONFIRM_TITLE: str = "Submit quiz"
SUBMIT_CONFIRM_TEXT: str = "Submit your answers now? You cannot change them afterwards."
UNANSWERED_TEMPLATE: str = "{count} required question(s) are unanswered."
TIME_UP_TEXT: str = "Time is up. Submitting your answers..."
SUBMIT_FAILED_TEMPLATE: str = "Submission failed: {error}. Your answers are kept; retry when ready."

SECURITY_MONITORED_TEXT: str = "Session monitored"
SECURITY_FOCUS_LOST_TEXT: str = "Window focus lost"
VIOLATIONS_TEMPLATE: str = "Violations: {count}"

RESULTS_HEADING: str = "Quiz submitted"
REVEAL_BUTTON_SHOW: str = "Show correct answers"
REVEAL_BUTTON_HIDE: str = "Hide correct answers"
AUTO_SUBMITTED_TEXT: str = "Submitted automatically when time ran out."
UNGRADED_TEXT: str = "Thank you! Your response has been recorded."

FIELD_INPUT_MIN_WIDTH: int = 320
