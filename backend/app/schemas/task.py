import uuid
from datetime import datetime
from pydantic import BaseModel, Field

from app.models import Priority, TaskStatus


class TaskCreate(BaseModel):
    """Schema for creating a new task."""
    project_id: uuid.UUID
    title: str
    description: str | None = None
    status: TaskStatus = TaskStatus.todo
    priority: Priority = Priority.medium
    assigned_to: uuid.UUID | None = None
    due_date: datetime | None = None
    created_by: uuid.UUID | None = None  # Defaults to the caller

    model_config = {"use_enum_values": True, "validate_default": True}


class TaskUpdate(BaseModel):
    """Schema for updating a task. Send ``assigned_to: null`` to unassign."""
    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None
    priority: Priority | None = None
    assigned_to: uuid.UUID | None = None
    due_date: datetime | None = None

    model_config = {"use_enum_values": True, "validate_default": True}


class TaskRead(BaseModel):
    """Schema for reading a task."""
    id: uuid.UUID
    project_id: uuid.UUID
    title: str
    description: str | None
    status: TaskStatus
    priority: Priority
    assigned_to: uuid.UUID | None
    created_by: uuid.UUID
    due_date: datetime | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class CommentCreate(BaseModel):
    content: str = Field(min_length=1)
    user_id: uuid.UUID | None = None  # Defaults to the caller


class CommentRead(BaseModel):
    id: uuid.UUID
    task_id: uuid.UUID
    user_id: uuid.UUID
    content: str
    created_at: datetime

    model_config = {"from_attributes": True}
