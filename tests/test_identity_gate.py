from __future__ import annotations

import pytest

from exam_app.core.errors import IdentityValidationError
from exam_app.core.identity_gate import IdentityGate
from exam_app.core.models import IdentityRequirements

ALL_REQUIRED = IdentityRequirements(require_name=True, require_email=True, require_student_id=True)


def test_no_requirements_accepts_empty_identity():
    gate = IdentityGate(IdentityRequirements())

    identity = gate.validate()

    assert not gate.is_required()
    assert identity.to_wire() == {}


def test_valid_identity_is_normalized():
    gate = IdentityGate(ALL_REQUIRED)

    identity = gate.validate(name="  Ada Lovelace ", email=" Ada@Example.COM ", student_id="AB12345")

    assert identity.name == "Ada Lovelace"
    assert identity.email == "ada@example.com"
    assert identity.to_wire() == {
        "name": "Ada Lovelace",
        "email": "ada@example.com",
        "studentId": "AB12345",
    }


def test_missing_fields_report_each_error():
    gate = IdentityGate(ALL_REQUIRED)

    with pytest.raises(IdentityValidationError) as excinfo:
        gate.validate(name=" ", email="", student_id=None)

    assert excinfo.value.errors == {
        "name": "Name is required",
        "email": "Email is required",
        "student_id": "Student ID is required",
    }


@pytest.mark.parametrize("email", ["plainaddress", "a@b", "a b@c.d", "@example.com"])
def test_malformed_email_rejected(email):
    gate = IdentityGate(IdentityRequirements(require_email=True))

    with pytest.raises(IdentityValidationError) as excinfo:
        gate.validate(email=email)

    assert excinfo.value.errors["email"] == "Please enter a valid email address"


@pytest.mark.parametrize("student_id", ["abc1", "A" * 21, "AB-12345", "12 345"])
def test_malformed_student_id_rejected(student_id):
    gate = IdentityGate(IdentityRequirements(require_student_id=True))

    with pytest.raises(IdentityValidationError) as excinfo:
        gate.validate(student_id=student_id)

    assert "5-20 alphanumeric" in excinfo.value.errors["student_id"]


def test_fields_that_are_not_required_are_not_validated():
    gate = IdentityGate(IdentityRequirements(require_name=True))

    identity = gate.validate(name="Grace", email="not-an-email")

    assert identity.name == "Grace"
    assert gate.required_field_names() == ["name"]
