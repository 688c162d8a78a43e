"""Authentication-related Pydantic schemas."""

from uuid import UUID

from pydantic import BaseModel

from casework.db.enums import STAFF_ROLES, Role


class TokenPayload(BaseModel):
    """Decoded JWT payload structure."""
    sub: UUID  # profile id
    role: str
    token_version: int


class UserSession(BaseModel):
    """
    Session context for authenticated requests.

    Returned by the get_current_session dependency; carries the acting
    identity and role that every service authorization check uses.
    """
    user_id: UUID
    role: Role  # Validated enum
    email: str
    display_name: str

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES
