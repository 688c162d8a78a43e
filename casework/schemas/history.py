"""Pydantic schemas for the client interaction history."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from casework.db.enums import InteractionType


class InteractionCreate(BaseModel):
    """Staff request to log an interaction with a client."""
    interaction_type: InteractionType
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    metadata: dict[str, Any] = Field(default_factory=dict)


class ClientHistoryEntry(BaseModel):
    """
    One line of a client's history.

    Logged interactions carry interaction_type/title/description; record
    changes carry the changed fields in changes.
    """
    id: UUID
    action: str
    actor_id: UUID | None
    actor_name: str | None
    interaction_type: str | None = None
    title: str | None = None
    description: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    changes: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime
