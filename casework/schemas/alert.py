"""Pydantic schemas for in-app alerts."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class AlertRead(BaseModel):
    id: UUID
    client_id: UUID | None
    task_id: UUID | None
    title: str
    message: str | None
    alert_type: str
    is_read: bool
    is_dismissed: bool
    trigger_at: datetime
    created_at: datetime

    model_config = {"from_attributes": True}
