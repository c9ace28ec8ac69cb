"""Static metadata describing ExamQt."""

APP_NAME = "ExamQt"
APP_VERSION = "0.1"
APP_LICENSE = "MIT License"
APP_ABOUT_TEXT = (
    "ExamQt delivers timed quizzes on the desktop. It verifies the responder, "
    "runs a fullscreen countdown with integrity monitoring, and submits the "
    "attempt to the exam server for scoring."
)

INSTRUCTIONS_TEXT = (
    "1. Your time begins immediately after you click Start Quiz.\n"
    "2. Do not close the window during the quiz.\n"
    "3. Avoid switching windows or using copy/paste or external help.\n"
    "4. Your answers are submitted when the timer ends or you click Submit."
)
