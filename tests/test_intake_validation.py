"""Tests for intake form validation (no database access)."""

from decimal import Decimal

import pytest

from casework.db.enums import ClientStatus, HousingStatus
from casework.services.intake_service import (
    IntakeValidationError,
    coerce_enum,
    validate_intake,
)
from casework.utils.normalization import parse_currency, split_full_name, validate_phone

from conftest import intake_payload


def test_valid_camel_case_payload_is_normalized():
    form = validate_intake(intake_payload())

    assert form.participant_details.first_name == "Jordan"
    assert form.demographics.monthly_income == Decimal("1200.00")
    assert form.case_management.has_health_insurance is True
    assert len(form.emergency_contacts) == 2
    assert form.emergency_contacts[1].email is None
    assert form.household.members[0].name == "Riley Ann Rivera"


def test_snake_case_payload_is_accepted():
    form = validate_intake(
        {"participant_details": {"first_name": "A", "last_name": "B", "email": "a@b.com"}}
    )
    assert form.participant_details.email == "a@b.com"
    assert form.emergency_contacts == []
    assert form.household.members == []


def test_missing_names_fail_validation():
    payload = intake_payload(firstName="", lastName="")

    with pytest.raises(IntakeValidationError) as exc_info:
        validate_intake(payload)

    message = str(exc_info.value)
    assert "firstName" in message
    assert "lastName" in message


def test_email_or_primary_phone_required():
    payload = intake_payload(email="", primaryPhone="")

    with pytest.raises(IntakeValidationError, match="email address or primary phone"):
        validate_intake(payload)


def test_phone_alone_is_enough_contact_info():
    form = validate_intake(intake_payload(email=""))
    assert form.participant_details.email is None
    assert form.participant_details.primary_phone == "(555) 123-4567"


@pytest.mark.parametrize(
    "overrides",
    [
        {"email": "not-an-email"},
        {"primaryPhone": "555-1234"},
        {"zipCode": "9021"},
    ],
)
def test_invalid_optional_fields_are_rejected(overrides):
    with pytest.raises(IntakeValidationError):
        validate_intake(intake_payload(**overrides))


def test_blank_optional_fields_become_none():
    form = validate_intake(intake_payload(zipCode="", secondaryPhone="", dateOfBirth=""))

    assert form.participant_details.zip_code is None
    assert form.participant_details.secondary_phone is None
    assert form.participant_details.date_of_birth is None


def test_emergency_contact_requires_valid_phone():
    payload = intake_payload()
    payload["emergencyContacts"] = [{"name": "X", "relationship": "Friend", "phone": "123"}]

    with pytest.raises(IntakeValidationError, match="emergencyContacts"):
        validate_intake(payload)


def test_vi_spdat_score_is_bounded():
    payload = intake_payload()
    payload["caseManagement"]["viSpdatScore"] = 101

    with pytest.raises(IntakeValidationError):
        validate_intake(payload)


def test_ssn_last_four_must_be_four_digits():
    payload = intake_payload()
    payload["caseManagement"]["ssnLastFour"] = "12a4"

    with pytest.raises(IntakeValidationError):
        validate_intake(payload)


def test_non_numeric_income_is_rejected():
    payload = intake_payload()
    payload["demographics"]["monthlyIncome"] = "lots"

    with pytest.raises(IntakeValidationError):
        validate_intake(payload)


def test_empty_income_is_none():
    payload = intake_payload()
    payload["demographics"]["monthlyIncome"] = ""

    assert validate_intake(payload).demographics.monthly_income is None


def test_unknown_enum_values_fall_back_to_defaults():
    assert coerce_enum(HousingStatus, "bogus", HousingStatus.UNKNOWN) == HousingStatus.UNKNOWN
    assert coerce_enum(ClientStatus, "bogus", ClientStatus.PENDING) == ClientStatus.PENDING
    assert coerce_enum(ClientStatus, None, ClientStatus.PENDING) == ClientStatus.PENDING
    assert coerce_enum(HousingStatus, "At_Risk", HousingStatus.UNKNOWN) == HousingStatus.AT_RISK


def test_normalization_helpers():
    assert split_full_name("Riley Ann Rivera") == ("Riley", "Ann Rivera")
    assert split_full_name("Cher") == ("Cher", "")
    assert parse_currency("$1,250.5") == Decimal("1250.50")
    assert parse_currency("  ") is None
    assert validate_phone(" 555.123.4567 ") == "555.123.4567"
    with pytest.raises(ValueError):
        validate_phone("12345")
