"""Pydantic schemas for client reads and intake save results."""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, Field

from casework.db.enums import ClientStatus


class SatelliteError(BaseModel):
    """A dependent-table write that failed during an otherwise successful save."""
    table: str
    error: str


class IntakeSaveResult(BaseModel):
    """Outcome of save_client_intake."""
    success: bool
    client_id: UUID | None = None
    error: str | None = None
    error_kind: str | None = None  # validation|unauthenticated|forbidden|conflict|not_found|write_failed|unexpected
    satellite_errors: list[SatelliteError] = Field(default_factory=list)


class ClientRead(BaseModel):
    """Client detail (SSN never included)."""
    id: UUID
    first_name: str
    middle_name: str | None
    last_name: str
    preferred_name: str | None
    date_of_birth: date | None
    ssn_last_four: str | None
    email: str | None
    phone: str | None
    alternate_phone: str | None
    street_address: str | None
    city: str | None
    state: str | None
    zip_code: str | None
    status: ClientStatus
    has_portal_access: bool
    portal_user_id: UUID | None
    assigned_case_manager: UUID | None
    intake_completed_at: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class ClientSummary(BaseModel):
    """Compact client for list views."""
    id: UUID
    name: str
    email: str
    phone: str
    status: str
    created_at: datetime
    updated_at: datetime


class ClientPageResponse(BaseModel):
    """Cursor-paginated client list."""
    items: list[ClientSummary]
    has_more: bool
    next_cursor: str | None


class PortalClientResponse(BaseModel):
    id: UUID
