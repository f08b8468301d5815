import uuid
from datetime import date, datetime
from typing import TYPE_CHECKING
from sqlalchemy import UniqueConstraint
from sqlmodel import SQLModel, Field, Relationship

from app.models.columns import timestamp_column, utcnow
from app.models.enums import MemberRole, Priority, ProjectStatus, enum_check

if TYPE_CHECKING:
    from app.models.task import Task


class Project(SQLModel, table=True):
    """
    Project model - groups tasks together.

    ``owner_id`` is fixed at creation. The owner is not a membership row;
    ownership alone grants full rights over the project.
    """

    __tablename__ = "projects"
    __table_args__ = (
        enum_check("status", ProjectStatus, "ck_projects_status"),
        enum_check("priority", Priority, "ck_projects_priority"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    name: str = Field(index=True)
    description: str | None = Field(default=None)
    status: str = Field(default=ProjectStatus.active.value)
    priority: str = Field(default=Priority.medium.value)
    start_date: date | None = Field(default=None)
    end_date: date | None = Field(default=None)
    owner_id: uuid.UUID = Field(foreign_key="accounts.id", ondelete="CASCADE", index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    # Relationships
    members: list["ProjectMember"] = Relationship(
        back_populates="project",
        cascade_delete=True,
        passive_deletes=True,
    )
    tasks: list["Task"] = Relationship(
        back_populates="project",
        cascade_delete=True,
        passive_deletes=True,
    )


class ProjectMember(SQLModel, table=True):
    """Grants an account access to a project short of ownership."""

    __tablename__ = "project_members"
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="uq_project_members_project_user"),
        enum_check("role", MemberRole, "ck_project_members_role"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    project_id: uuid.UUID = Field(foreign_key="projects.id", ondelete="CASCADE", index=True)
    user_id: uuid.UUID = Field(foreign_key="accounts.id", ondelete="CASCADE", index=True)
    role: str = Field(default=MemberRole.member.value)
    joined_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    project: Project = Relationship(back_populates="members")
