import uuid
from datetime import date, datetime
from pydantic import BaseModel

from app.models import MemberRole, Priority, ProjectStatus


class ProjectCreate(BaseModel):
    """Schema for creating a new project."""
    name: str
    description: str | None = None
    status: ProjectStatus = ProjectStatus.active
    priority: Priority = Priority.medium
    start_date: date | None = None
    end_date: date | None = None
    owner_id: uuid.UUID | None = None  # Defaults to the caller

    model_config = {"use_enum_values": True, "validate_default": True}


class ProjectUpdate(BaseModel):
    """Schema for updating a project. The owner cannot be changed."""
    name: str | None = None
    description: str | None = None
    status: ProjectStatus | None = None
    priority: Priority | None = None
    start_date: date | None = None
    end_date: date | None = None

    model_config = {"use_enum_values": True, "validate_default": True}


class ProjectRead(BaseModel):
    """Schema for reading a project."""
    id: uuid.UUID
    name: str
    description: str | None
    status: ProjectStatus
    priority: Priority
    start_date: date | None
    end_date: date | None
    owner_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class MemberCreate(BaseModel):
    """Schema for inviting an account to a project."""
    user_id: uuid.UUID
    role: MemberRole = MemberRole.member

    model_config = {"use_enum_values": True, "validate_default": True}


class MemberUpdate(BaseModel):
    role: MemberRole

    model_config = {"use_enum_values": True, "validate_default": True}


class MemberRead(BaseModel):
    id: uuid.UUID
    project_id: uuid.UUID
    user_id: uuid.UUID
    role: MemberRole
    joined_at: datetime

    model_config = {"from_attributes": True}
