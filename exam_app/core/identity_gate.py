"""Validation of responder identity before an attempt may begin."""

from __future__ import annotations

import re

from exam_app.constants.exam_constants import EMAIL_PATTERN, STUDENT_ID_PATTERN
from exam_app.core.errors import IdentityValidationError
from exam_app.core.models import IdentityRequirements, ResponderIdentity

_EMAIL_RE = re.compile(EMAIL_PATTERN)
_STUDENT_ID_RE = re.compile(STUDENT_ID_PATTERN)


class IdentityGate:
    """Checks identity fields against a form's identity requirements."""

    def __init__(self, requirements: IdentityRequirements) -> None:
        self._requirements = requirements

    @property
    def requirements(self) -> IdentityRequirements:
        return self._requirements

    def is_required(self) -> bool:
        return self._requirements.any_required

    def required_field_names(self) -> list[str]:
        """Keys of the required inputs, matching the keys used for errors."""
        names = []
        if self._requirements.require_name:
            names.append("name")
        if self._requirements.require_email:
            names.append("email")
        if self._requirements.require_student_id:
            names.append("student_id")
        return names

    def validate(
        self,
        name: str | None = None,
        email: str | None = None,
        student_id: str | None = None,
    ) -> ResponderIdentity:
        """Return the normalized identity or raise IdentityValidationError.

        Errors are keyed by ``name``, ``email`` and ``student_id`` so the UI can
        show each message next to its input.
        """
        name = (name or "").strip()
        email = (email or "").strip().lower()
        student_id = (student_id or "").strip()
        errors: dict[str, str] = {}

        if self._requirements.require_name and not name:
            errors["name"] = "Name is required"

        if self._requirements.require_email:
            if not email:
                errors["email"] = "Email is required"
            elif not _EMAIL_RE.match(email):
                errors["email"] = "Please enter a valid email address"

        if self._requirements.require_student_id:
            if not student_id:
                errors["student_id"] = "Student ID is required"
            elif not _STUDENT_ID_RE.match(student_id):
                errors["student_id"] = "Please enter a valid Student ID (5-20 alphanumeric characters)"

        if errors:
            raise IdentityValidationError(errors)

        return ResponderIdentity(
            name=name or None,
            email=email or None,
            student_id=student_id or None,
        )
