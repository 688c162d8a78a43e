"""Pydantic schemas for the client intake form.

The form arrives from the browser with camelCase keys
(``participantDetails.firstName``); snake_case names are accepted too so
the payload returned by the full-data endpoint can be posted back as is.
"""

from datetime import date
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from casework.utils.normalization import (
    SSN_LAST_FOUR_PATTERN,
    ZIP_CODE_PATTERN,
    parse_currency,
    validate_phone,
)


def _blank_to_none(value):
    if isinstance(value, str) and value.strip() == "":
        return None
    return value


class IntakeModel(BaseModel):
    """Shared config for every intake section."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


class ParticipantDetails(IntakeModel):
    first_name: str = Field(..., min_length=1, max_length=50)
    middle_name: str | None = Field(None, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    date_of_birth: date | None = None
    ssn: str | None = None
    email: EmailStr | None = None
    primary_phone: str | None = None
    secondary_phone: str | None = None
    street_address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=50)
    state: str | None = Field(None, max_length=50)
    county: str | None = Field(None, max_length=50)
    zip_code: str | None = None

    @field_validator(
        "middle_name",
        "date_of_birth",
        "ssn",
        "email",
        "primary_phone",
        "secondary_phone",
        "street_address",
        "city",
        "state",
        "county",
        "zip_code",
        mode="before",
    )
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator("primary_phone", "secondary_phone")
    @classmethod
    def check_phone(cls, v: str | None) -> str | None:
        return validate_phone(v)

    @field_validator("zip_code")
    @classmethod
    def check_zip(cls, v: str | None) -> str | None:
        if v is not None and not ZIP_CODE_PATTERN.match(v):
            raise ValueError("Please enter a valid ZIP code")
        return v

    @model_validator(mode="after")
    def require_contact(self) -> "ParticipantDetails":
        if not self.email and not self.primary_phone:
            raise ValueError("An email address or primary phone number is required")
        return self


class EmergencyContactInput(IntakeModel):
    name: str = Field(..., min_length=1, max_length=100)
    relationship: str = Field(..., min_length=1, max_length=50)
    phone: str
    email: EmailStr | None = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email(cls, v):
        return _blank_to_none(v)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str) -> str:
        phone = validate_phone(v)
        if phone is None:
            raise ValueError("Please enter a valid phone number")
        return phone


class CaseManagementInput(IntakeModel):
    client_manager: UUID | None = None
    client_status: str | None = None  # Coerced to ClientStatus on write
    engagement_letter_signed: bool | None = None
    hmis_unique_id: str | None = Field(None, max_length=100)
    ssn_last_four: str | None = None
    housing_status: str | None = None  # Coerced to HousingStatus on write
    primary_language: str | None = Field(None, max_length=50)
    secondary_language: str | None = Field(None, max_length=50)
    additional_address_info: str | None = Field(None, max_length=500)
    vi_spdat_score: int | None = Field(None, ge=0, le=100)
    preferred_id: str | None = None
    cal_fresh_medi_cal_id: str | None = None
    cal_fresh_medi_cal_partner_month: str | None = None
    race: list[str] = Field(default_factory=list)
    health_insurance: bool | str | None = None  # Form sends "yes"/"no"
    health_insurance_type: str | None = Field(None, max_length=100)
    non_cash_benefits: list[str] = Field(default_factory=list)
    health_status: str | None = Field(None, max_length=100)

    @field_validator(
        "client_manager",
        "client_status",
        "hmis_unique_id",
        "ssn_last_four",
        "housing_status",
        "primary_language",
        "secondary_language",
        "additional_address_info",
        "vi_spdat_score",
        "health_insurance",
        "health_insurance_type",
        "health_status",
        mode="before",
    )
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator("ssn_last_four")
    @classmethod
    def check_ssn_last_four(cls, v: str | None) -> str | None:
        if v is not None and not SSN_LAST_FOUR_PATTERN.match(v):
            raise ValueError("Must be exactly 4 digits")
        return v

    @property
    def has_health_insurance(self) -> bool:
        if isinstance(self.health_insurance, bool):
            return self.health_insurance
        return (self.health_insurance or "").lower() == "yes"


class DemographicsInput(IntakeModel):
    race: list[str] = Field(default_factory=list)
    gender_identity: str | None = Field(None, max_length=50)
    ethnicity: str | None = Field(None, max_length=100)
    marital_status: str | None = Field(None, max_length=50)
    language: str | None = Field(None, max_length=50)
    employment_status: str | None = Field(None, max_length=50)
    monthly_income: Decimal | None = None  # Free text on the form ("$1,200")
    income_source: str | None = Field(None, max_length=100)
    veteran_status: bool = False
    disability_status: bool = False

    @field_validator(
        "gender_identity",
        "ethnicity",
        "marital_status",
        "language",
        "employment_status",
        "income_source",
        mode="before",
    )
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)

    @field_validator("monthly_income", mode="before")
    @classmethod
    def parse_income(cls, v):
        if v is None or isinstance(v, Decimal):
            return v
        return parse_currency(str(v))


class HouseholdMemberInput(IntakeModel):
    id: str | None = None  # Ignored on save; list rows are replaced
    name: str = Field(..., min_length=1, max_length=200)
    relationship: str = Field(..., min_length=1, max_length=50)
    date_of_birth: date | None = None
    gender: str | None = None
    race: list[str] = Field(default_factory=list)

    @field_validator("date_of_birth", "gender", mode="before")
    @classmethod
    def blank_optional(cls, v):
        return _blank_to_none(v)


class HouseholdInput(IntakeModel):
    members: list[HouseholdMemberInput] = Field(default_factory=list)

    @field_validator("members", mode="before")
    @classmethod
    def none_to_empty(cls, v):
        return v or []


class ClientIntakeForm(IntakeModel):
    """Complete client intake payload."""

    participant_details: ParticipantDetails
    emergency_contacts: list[EmergencyContactInput] = Field(default_factory=list)
    case_management: CaseManagementInput = Field(default_factory=CaseManagementInput)
    demographics: DemographicsInput = Field(default_factory=DemographicsInput)
    household: HouseholdInput = Field(default_factory=HouseholdInput)
