"""Pydantic schemas for tasks."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from casework.db.enums import TaskPriority, TaskStatus


class TaskCreate(BaseModel):
    """Request to create a task."""
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=2000)
    client_id: UUID | None = None
    assigned_to: UUID | None = None
    priority: TaskPriority = TaskPriority.MEDIUM
    due_date: datetime | None = None
    category: str | None = Field(None, max_length=50)


class TaskStatusUpdate(BaseModel):
    status: TaskStatus


class TaskAssign(BaseModel):
    assigned_to: UUID


class TaskRead(BaseModel):
    """Full task response."""
    id: UUID
    title: str
    description: str | None
    client_id: UUID | None
    assigned_to: UUID | None
    assigned_by: UUID | None
    status: TaskStatus
    priority: TaskPriority
    due_date: datetime | None
    completed_at: datetime | None
    completed_by: UUID | None
    category: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
