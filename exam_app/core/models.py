"""Domain models for the exam application."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
import math


class FieldType(str, Enum):
    """Input kinds a form field can take."""

    SHORT_TEXT = "short_text"
    LONG_TEXT = "long_text"
    EMAIL = "email"
    NUMBER = "number"
    DATE = "date"
    TIME = "time"
    RADIO = "radio"
    CHECKBOX = "checkbox"
    DROPDOWN = "dropdown"

    @property
    def is_choice(self) -> bool:
        return self in (FieldType.RADIO, FieldType.CHECKBOX, FieldType.DROPDOWN)


class FormType(str, Enum):
    QUIZ = "quiz"
    SURVEY = "survey"
    GENERAL = "general"
    ATTENDANCE = "attendance"


class FormStatus(str, Enum):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"


@dataclass(frozen=True, slots=True)
class QuizKey:
    """Answer key and weight attached to a quiz question."""

    points: int = 0
    correct_options: frozenset[int] = frozenset()
    explanation: str = ""


@dataclass(frozen=True, slots=True)
class FormField:
    """One question or input of a form."""

    id: str
    label: str
    type: FieldType
    required: bool = False
    options: tuple[str, ...] = ()
    question_code: str | None = None
    placeholder: str = ""
    help_text: str = ""
    visibility: str = "public"
    quiz: QuizKey | None = None

    @property
    def is_internal(self) -> bool:
        return self.visibility == "internal"

    @property
    def points(self) -> int:
        return self.quiz.points if self.quiz else 0


@dataclass(frozen=True, slots=True)
class IdentityRequirements:
    require_name: bool = False
    require_email: bool = False
    require_student_id: bool = False

    @property
    def any_required(self) -> bool:
        return self.require_name or self.require_email or self.require_student_id


@dataclass(frozen=True, slots=True)
class TimerSettings:
    enabled: bool = False
    minutes: int = 0

    @property
    def allowed_ms(self) -> int:
        return self.minutes * 60 * 1000


@dataclass(frozen=True, slots=True)
class FormSettings:
    """Delivery settings for a form: identity, timer, availability and security."""

    identity: IdentityRequirements = field(default_factory=IdentityRequirements)
    timer: TimerSettings = field(default_factory=TimerSettings)
    start_at: datetime | None = None
    end_at: datetime | None = None
    prevent_copy_paste: bool = True
    fullscreen: bool = True
    passing_score: int | None = None


@dataclass(frozen=True, slots=True)
class SubmissionPolicy:
    one_attempt_per_identity: bool = False
    dedupe_by: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class FormDefinition:
    """A form or quiz. Never mutated once a session has started."""

    id: str
    title: str
    type: FormType
    fields: tuple[FormField, ...]
    settings: FormSettings = field(default_factory=FormSettings)
    description: str = ""
    slug: str | None = None
    status: FormStatus = FormStatus.PUBLISHED
    submission_policy: SubmissionPolicy = field(default_factory=SubmissionPolicy)

    @property
    def is_quiz(self) -> bool:
        return self.type is FormType.QUIZ

    @property
    def is_timed(self) -> bool:
        return self.settings.timer.enabled and self.settings.timer.minutes > 0

    def public_fields(self) -> tuple[FormField, ...]:
        return tuple(f for f in self.fields if not f.is_internal)

    def get_field(self, field_id: str) -> FormField:
        for form_field in self.fields:
            if form_field.id == field_id:
                return form_field
        raise KeyError(f"Unknown field id: {field_id}")

    def is_available(self, now: datetime) -> bool:
        if self.settings.start_at is not None and self.settings.start_at > now:
            return False
        if self.settings.end_at is not None and self.settings.end_at < now:
            return False
        return True


@dataclass(frozen=True, slots=True)
class ResponderIdentity:
    """Identity captured by the identity gate; fixed for the whole attempt."""

    name: str | None = None
    email: str | None = None
    student_id: str | None = None

    def to_wire(self) -> dict[str, str]:
        payload = {"name": self.name, "email": self.email, "studentId": self.student_id}
        return {key: value for key, value in payload.items() if value}


# --- Answers: one class per field family -------------------------------------


@dataclass(frozen=True, slots=True)
class TextAnswer:
    value: str = ""

    def is_empty(self) -> bool:
        return not self.value.strip()

    def to_wire(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class NumberAnswer:
    value: float | None = None

    def is_empty(self) -> bool:
        return self.value is None

    def to_wire(self) -> float | None:
        return self.value


@dataclass(frozen=True, slots=True)
class DateAnswer:
    value: date | None = None

    def is_empty(self) -> bool:
        return self.value is None

    def to_wire(self) -> str | None:
        return self.value.isoformat() if self.value else None


@dataclass(frozen=True, slots=True)
class TimeAnswer:
    value: time | None = None

    def is_empty(self) -> bool:
        return self.value is None

    def to_wire(self) -> str | None:
        return self.value.strftime("%H:%M") if self.value else None


@dataclass(frozen=True, slots=True)
class ChoiceAnswer:
    """Single selected option label (radio buttons and dropdowns)."""

    value: str | None = None

    def is_empty(self) -> bool:
        return not self.value

    def to_wire(self) -> str | None:
        return self.value


@dataclass(frozen=True, slots=True)
class MultiChoiceAnswer:
    """Selected option labels in selection order (checkboxes)."""

    values: tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not self.values

    def to_wire(self) -> list[str]:
        return list(self.values)


Answer = TextAnswer | NumberAnswer | DateAnswer | TimeAnswer | ChoiceAnswer | MultiChoiceAnswer

_ANSWER_TYPES: dict[FieldType, type] = {
    FieldType.SHORT_TEXT: TextAnswer,
    FieldType.LONG_TEXT: TextAnswer,
    FieldType.EMAIL: TextAnswer,
    FieldType.NUMBER: NumberAnswer,
    FieldType.DATE: DateAnswer,
    FieldType.TIME: TimeAnswer,
    FieldType.RADIO: ChoiceAnswer,
    FieldType.DROPDOWN: ChoiceAnswer,
    FieldType.CHECKBOX: MultiChoiceAnswer,
}


def answer_type_for(field_type: FieldType) -> type:
    """Return the answer class accepted by fields of ``field_type``."""
    return _ANSWER_TYPES[field_type]


def answer_from_wire(form_field: FormField, value: object) -> Answer:
    """Parse a JSON answer value for ``form_field``.

    Raises ValueError when the value does not fit the field's answer shape.
    """
    answer_cls = answer_type_for(form_field.type)
    if answer_cls is MultiChoiceAnswer:
        if value is None:
            return MultiChoiceAnswer()
        if not isinstance(value, (list, tuple)):
            raise ValueError(f"Checkbox must be multi-select array: {form_field.label}")
        return MultiChoiceAnswer(tuple(str(item) for item in value))
    if isinstance(value, (list, tuple)):
        raise ValueError(f"{form_field.label} expects a single value")
    if answer_cls is TextAnswer:
        return TextAnswer("" if value is None else str(value))
    if answer_cls is ChoiceAnswer:
        return ChoiceAnswer(None if value in (None, "") else str(value))
    if value in (None, ""):
        return answer_cls()
    if answer_cls is NumberAnswer:
        try:
            number = float(value)  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise ValueError(f"Invalid number for: {form_field.label}") from exc
        if not math.isfinite(number):
            raise ValueError(f"Invalid number for: {form_field.label}")
        return NumberAnswer(number)
    if answer_cls is DateAnswer:
        try:
            return DateAnswer(date.fromisoformat(str(value)))
        except ValueError as exc:
            raise ValueError(f"Invalid date for: {form_field.label}") from exc
    try:
        return TimeAnswer(time.fromisoformat(str(value)))
    except ValueError as exc:
        raise ValueError(f"Invalid time for: {form_field.label}") from exc


# --- Session ------------------------------------------------------------------


class ViolationType(str, Enum):
    COPY = "copy"
    PASTE = "paste"
    CONTEXT_MENU = "contextmenu"
    FULLSCREEN_EXIT = "fullscreen_exit"
    WINDOW_BLUR = "window_blur"
    KEYBOARD_SHORTCUT = "keyboard_shortcut"


@dataclass(frozen=True, slots=True)
class Violation:
    """A proctoring event observed during an active session."""

    type: ViolationType
    timestamp: datetime
    detail: str


class SubmitTrigger(str, Enum):
    MANUAL = "manual"
    TIMER = "timer"


@dataclass(slots=True)
class SessionState:
    """Live state of one attempt. Mutated only through ExamSession."""

    started_at: datetime
    remaining_seconds: int | None = None
    answers: dict[str, Answer] = field(default_factory=dict)
    violations: list[Violation] = field(default_factory=list)
    expired: bool = False
    submitting: bool = False


@dataclass(frozen=True, slots=True)
class FieldCorrectness:
    field_id: str
    points_awarded: int
    points_possible: int
    is_correct: bool


@dataclass(frozen=True, slots=True)
class ScoreSummary:
    score: int
    max_score: int
    per_field: tuple[FieldCorrectness, ...]


@dataclass(frozen=True, slots=True)
class SubmitResponse:
    """Successful reply from the submit endpoint."""

    response_id: str | None = None
    score: int | None = None
    max_score: int | None = None


@dataclass(frozen=True, slots=True)
class SubmissionResult:
    """Outcome of a completed attempt, replacing its SessionState."""

    score: int
    max_score: int
    duration_ms: int
    answers: dict[str, Answer]
    start_time: str
    end_time: str
    per_field: tuple[FieldCorrectness, ...] = ()
    trigger: SubmitTrigger = SubmitTrigger.MANUAL
    violations: tuple[Violation, ...] = ()
    response_id: str | None = None
