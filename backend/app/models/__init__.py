from app.models.account import Account
from app.models.enums import MemberRole, Priority, ProjectStatus, TaskStatus
from app.models.profile import Profile
from app.models.project import Project, ProjectMember
from app.models.task import Task, Comment
from app.models.timestamps import register_timestamp_hooks

register_timestamp_hooks()

__all__ = [
    "Account",
    "Profile",
    "Project",
    "ProjectMember",
    "Task",
    "Comment",
    "MemberRole",
    "Priority",
    "ProjectStatus",
    "TaskStatus",
]
