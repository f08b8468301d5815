import uuid
from datetime import datetime
from pydantic import BaseModel

from app.models import Priority, ProjectStatus, TaskStatus


class ProjectSummary(BaseModel):
    """A project card: the project plus its task counts."""
    id: uuid.UUID
    name: str
    description: str | None
    status: ProjectStatus
    priority: Priority
    created_at: datetime
    task_count: int
    completed_tasks: int
    completion_percentage: float


class RecentTask(BaseModel):
    id: uuid.UUID
    title: str
    status: TaskStatus
    project_name: str
    due_date: datetime | None


class DashboardStats(BaseModel):
    total_projects: int
    active_projects: int
    total_tasks: int
    completed_tasks: int
    completion_rate: int


class DashboardRead(BaseModel):
    stats: DashboardStats
    projects: list[ProjectSummary]
    recent_tasks: list[RecentTask]
