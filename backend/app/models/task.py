import uuid
from datetime import datetime
from typing import TYPE_CHECKING
from sqlmodel import SQLModel, Field, Relationship

from app.models.columns import timestamp_column, utcnow
from app.models.enums import Priority, TaskStatus, enum_check

if TYPE_CHECKING:
    from app.models.project import Project


class Task(SQLModel, table=True):
    """
    Task model - a unit of work inside a project.

    Key fields:
    - created_by: the account that created the task, always the caller at insert
    - assigned_to: optional assignee; cleared when the assignee's account goes away
    """

    __tablename__ = "tasks"
    __table_args__ = (
        enum_check("status", TaskStatus, "ck_tasks_status"),
        enum_check("priority", Priority, "ck_tasks_priority"),
    )

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    title: str = Field(index=True)
    description: str | None = Field(default=None)
    status: str = Field(default=TaskStatus.todo.value)
    priority: str = Field(default=Priority.medium.value)
    due_date: datetime | None = Field(default=None, sa_column=timestamp_column(nullable=True))

    # Foreign keys
    project_id: uuid.UUID = Field(foreign_key="projects.id", ondelete="CASCADE", index=True)
    assigned_to: uuid.UUID | None = Field(
        default=None,
        foreign_key="accounts.id",
        ondelete="SET NULL",
        index=True,
    )
    created_by: uuid.UUID = Field(foreign_key="accounts.id", ondelete="CASCADE", index=True)

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())
    updated_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    # Relationships
    project: "Project" = Relationship(back_populates="tasks")
    comments: list["Comment"] = Relationship(
        back_populates="task",
        cascade_delete=True,
        passive_deletes=True,
    )


class Comment(SQLModel, table=True):
    """Discussion entry on a task."""

    __tablename__ = "comments"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    task_id: uuid.UUID = Field(foreign_key="tasks.id", ondelete="CASCADE", index=True)
    user_id: uuid.UUID = Field(foreign_key="accounts.id", ondelete="CASCADE", index=True)
    content: str
    created_at: datetime = Field(default_factory=utcnow, sa_column=timestamp_column())

    task: Task = Relationship(back_populates="comments")
