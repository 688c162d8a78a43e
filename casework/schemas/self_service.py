"""Pydantic schemas for portal self-service registration."""

from datetime import date
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from casework.utils.normalization import blank_to_none, validate_phone


class SelfServiceApplication(BaseModel):
    """
    Registration submitted from the public self-service page.

    The password is handled by the external auth provider and never
    reaches this API.
    """
    first_name: str = Field(..., min_length=1, max_length=50)
    last_name: str = Field(..., min_length=1, max_length=50)
    email: EmailStr
    phone: str | None = None
    date_of_birth: date | None = None
    street: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=50)
    state: str | None = Field(None, max_length=50)
    zip_code: str | None = Field(None, max_length=10)
    preferred_language: str | None = Field(None, max_length=50)

    @field_validator("phone")
    @classmethod
    def check_phone(cls, v: str | None) -> str | None:
        return validate_phone(v)

    @field_validator("street", "city", "state", "zip_code", "preferred_language")
    @classmethod
    def blank_optional(cls, v: str | None) -> str | None:
        return blank_to_none(v)


class SelfServiceResult(BaseModel):
    client_id: UUID
    user_id: UUID
