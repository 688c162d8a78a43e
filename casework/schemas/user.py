"""Pydantic schemas for profile administration."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class UserRead(BaseModel):
    """Profile as listed to staff. token_version is never exposed."""
    id: UUID
    email: str
    first_name: str
    last_name: str
    role: str
    phone: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
