from enum import Enum

from sqlalchemy import CheckConstraint


class ProjectStatus(str, Enum):
    active = "active"
    completed = "completed"
    archived = "archived"


class Priority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"


class MemberRole(str, Enum):
    owner = "owner"
    admin = "admin"
    member = "member"


class TaskStatus(str, Enum):
    todo = "todo"
    in_progress = "in_progress"
    done = "done"


def enum_check(column: str, enum_cls: type[Enum], name: str) -> CheckConstraint:
    """CHECK constraint restricting a text column to the values of ``enum_cls``."""
    allowed = ", ".join(f"'{member.value}'" for member in enum_cls)
    return CheckConstraint(f"{column} IN ({allowed})", name=name)
