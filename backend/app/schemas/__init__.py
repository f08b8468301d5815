from app.schemas.project import (
    ProjectCreate,
    ProjectUpdate,
    ProjectRead,
    MemberCreate,
    MemberUpdate,
    MemberRead,
)
from app.schemas.task import TaskCreate, TaskUpdate, TaskRead, CommentCreate, CommentRead
from app.schemas.profile import ProfileCreate, ProfileUpdate, ProfileRead, AccountRead
from app.schemas.dashboard import DashboardRead, DashboardStats, ProjectSummary, RecentTask

__all__ = [
    "ProjectCreate",
    "ProjectUpdate",
    "ProjectRead",
    "MemberCreate",
    "MemberUpdate",
    "MemberRead",
    "TaskCreate",
    "TaskUpdate",
    "TaskRead",
    "CommentCreate",
    "CommentRead",
    "ProfileCreate",
    "ProfileUpdate",
    "ProfileRead",
    "AccountRead",
    "DashboardRead",
    "DashboardStats",
    "ProjectSummary",
    "RecentTask",
]
