"""
Row-level security for every table.

Each table carries a set of named, permissive policies. A policy applies to
one command (``select``, ``insert``, ``update``, ``delete``) or to ``all`` of
them and holds up to two predicates:

- ``using``: which existing rows the command can see or target
- ``check``: which new row versions the command may write

Predicates are plain functions ``(caller_id, row) -> predicate``. ``row`` is
either the model class, giving a SQL expression over the table's columns that
can be composed into a statement, or a model instance, giving an expression
bound to that row's values that is evaluated in the database before a write.
Membership is always looked up with ``EXISTS`` sub-queries at statement time.

A command with no applicable policy is denied. Policies without an explicit
check re-use ``using`` for the new row version.
"""

import uuid
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy import ColumnElement, Select, exists, false, or_, select, true
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased
from sqlmodel import SQLModel

from app.exceptions import PolicyViolationError
from app.logging_config import get_logger
from app.models import Comment, Profile, Project, ProjectMember, Task

logger = get_logger(__name__)

SELECT = "select"
INSERT = "insert"
UPDATE = "update"
DELETE = "delete"
ALL = "all"

Predicate = Callable[[uuid.UUID, Any], Any]


@dataclass(frozen=True)
class Policy:
    name: str
    command: str
    using: Predicate | None = None
    check: Predicate | None = None

    def applies_to(self, operation: str) -> bool:
        return self.command in (operation, ALL)


def _sql(value: Any) -> ColumnElement[bool]:
    """Comparisons against a loaded row come back as Python booleans."""
    if isinstance(value, bool):
        return true() if value else false()
    return value


# =============================================================================
# Shared predicates
# =============================================================================

def owns_project(project_id: Any, caller_id: uuid.UUID) -> ColumnElement[bool]:
    return exists().where(Project.id == project_id, Project.owner_id == caller_id)


def can_access_project(project_id: Any, caller_id: uuid.UUID) -> ColumnElement[bool]:
    """Caller owns the project or holds a membership row on it."""
    member = aliased(ProjectMember)
    return exists().where(
        Project.id == project_id,
        or_(
            Project.owner_id == caller_id,
            exists().where(member.project_id == Project.id, member.user_id == caller_id),
        ),
    )


def can_access_task(task_id: Any, caller_id: uuid.UUID) -> ColumnElement[bool]:
    return exists().where(Task.id == task_id, can_access_project(Task.project_id, caller_id))


def _project_visible(caller_id, row):
    return or_(
        _sql(row.owner_id == caller_id),
        exists().where(ProjectMember.project_id == row.id, ProjectMember.user_id == caller_id),
    )


def _member_visible(caller_id, row):
    # Direct lookup on a second alias of project_members, never a recursive
    # evaluation of this same policy.
    return can_access_project(row.project_id, caller_id)


def _task_editable(caller_id, row):
    return or_(
        _sql(row.created_by == caller_id),
        _sql(row.assigned_to == caller_id),
        owns_project(row.project_id, caller_id),
    )


# =============================================================================
# Policies per table
# =============================================================================

POLICIES: dict[type[SQLModel], tuple[Policy, ...]] = {
    Profile: (
        Policy("Users can view all profiles", SELECT, using=lambda caller_id, row: true()),
        Policy(
            "Users can update their own profile",
            UPDATE,
            using=lambda caller_id, row: _sql(row.user_id == caller_id),
        ),
        Policy(
            "Users can insert their own profile",
            INSERT,
            check=lambda caller_id, row: _sql(row.user_id == caller_id),
        ),
    ),
    Project: (
        Policy("Users can view projects they're members of", SELECT, using=_project_visible),
        Policy(
            "Users can create projects",
            INSERT,
            check=lambda caller_id, row: _sql(row.owner_id == caller_id),
        ),
        Policy(
            "Project owners can update their projects",
            UPDATE,
            using=lambda caller_id, row: _sql(row.owner_id == caller_id),
        ),
        Policy(
            "Project owners can delete their projects",
            DELETE,
            using=lambda caller_id, row: _sql(row.owner_id == caller_id),
        ),
    ),
    ProjectMember: (
        Policy("Users can view project members", SELECT, using=_member_visible),
        Policy(
            "Project owners can manage members",
            ALL,
            using=lambda caller_id, row: owns_project(row.project_id, caller_id),
            check=lambda caller_id, row: owns_project(row.project_id, caller_id),
        ),
    ),
    Task: (
        Policy(
            "Users can view tasks in their projects",
            SELECT,
            using=lambda caller_id, row: can_access_project(row.project_id, caller_id),
        ),
        Policy(
            "Project members can create tasks",
            INSERT,
            check=lambda caller_id, row: _sql(row.created_by == caller_id)
            & can_access_project(row.project_id, caller_id),
        ),
        Policy("Task creators and assignees can update tasks", UPDATE, using=_task_editable),
    ),
    Comment: (
        Policy(
            "Users can view comments on accessible tasks",
            SELECT,
            using=lambda caller_id, row: can_access_task(row.task_id, caller_id),
        ),
        Policy(
            "Users can create comments",
            INSERT,
            check=lambda caller_id, row: _sql(row.user_id == caller_id)
            & can_access_task(row.task_id, caller_id),
        ),
    ),
}


def policies_for(model: type[SQLModel]) -> tuple[Policy, ...]:
    return POLICIES.get(model, ())


def using_clause(model: type[SQLModel], operation: str, caller_id: uuid.UUID) -> ColumnElement[bool]:
    """Rows of ``model`` the caller may see (select) or target (update/delete)."""
    predicates = [
        _sql(policy.using(caller_id, model))
        for policy in policies_for(model)
        if policy.applies_to(operation) and policy.using is not None
    ]
    if not predicates:
        return false()
    return or_(*predicates)


def check_clause(
    model: type[SQLModel],
    operation: str,
    caller_id: uuid.UUID,
    row: SQLModel,
) -> ColumnElement[bool]:
    """Whether ``row`` is an acceptable new row version for ``operation``."""
    predicates = []
    for policy in policies_for(model):
        if not policy.applies_to(operation):
            continue
        predicate = policy.check or policy.using
        if predicate is not None:
            predicates.append(_sql(predicate(caller_id, row)))
    if not predicates:
        return false()
    return or_(*predicates)


def visible(
    stmt: Select,
    model: type[SQLModel],
    caller_id: uuid.UUID,
    operation: str = SELECT,
) -> Select:
    """Restrict ``stmt`` to the rows of ``model`` the policies expose."""
    return stmt.where(using_clause(model, operation, caller_id))


async def ensure_check(
    session: AsyncSession,
    operation: str,
    caller_id: uuid.UUID,
    row: SQLModel,
) -> None:
    """
    Evaluate the write check for ``row`` in the database.

    Raises:
        PolicyViolationError: If no policy admits the row.
    """
    model = type(row)
    allowed = await session.scalar(select(check_clause(model, operation, caller_id, row)))
    if not allowed:
        logger.warning(
            f"Policy denied {operation} on {model.__tablename__} for caller={caller_id}"
        )
        raise PolicyViolationError(model.__tablename__, operation)
