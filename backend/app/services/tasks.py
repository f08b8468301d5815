"""
Task queries scoped to the calling account.

Tasks are visible to the owner and members of their project. Members and the
owner may create them; the creator, the assignee and the project owner may
edit them. There is no delete: tasks leave with their project.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.context import AuthenticatedUser
from app.exceptions import NotFoundError
from app.logging_config import get_logger
from app.models import Task, TaskStatus
from app.policies import INSERT, SELECT, UPDATE, ensure_check, visible
from app.schemas import TaskCreate, TaskUpdate

logger = get_logger(__name__)


async def _get_for(
    session: AsyncSession,
    caller: AuthenticatedUser,
    task_id: uuid.UUID,
    operation: str,
) -> Task:
    query = visible(select(Task).where(Task.id == task_id), Task, caller.id, operation)
    task = (await session.execute(query)).scalar_one_or_none()
    if task is None:
        raise NotFoundError("Task", str(task_id))
    return task


async def create_task(
    session: AsyncSession,
    caller: AuthenticatedUser,
    task_in: TaskCreate,
) -> Task:
    """
    Create a task in a project the caller owns or belongs to.

    Raises:
        PolicyViolationError: The caller cannot see the project, or claims
            another account as creator.
    """
    data = task_in.model_dump()
    data["created_by"] = data["created_by"] or caller.id
    task = Task(**data)

    await ensure_check(session, INSERT, caller.id, task)

    session.add(task)
    await session.flush()
    await session.refresh(task)

    logger.info(f"Created task: id={task.id} title='{task.title}' project={task.project_id}")
    return task


async def list_tasks(
    session: AsyncSession,
    caller: AuthenticatedUser,
    project_id: uuid.UUID | None = None,
    created_by: uuid.UUID | None = None,
    assigned_to: uuid.UUID | None = None,
    status: TaskStatus | None = None,
) -> list[Task]:
    """List visible tasks, newest first, optionally filtered."""
    query = visible(select(Task), Task, caller.id)
    if project_id:
        query = query.where(Task.project_id == project_id)
    if created_by:
        query = query.where(Task.created_by == created_by)
    if assigned_to:
        query = query.where(Task.assigned_to == assigned_to)
    if status is not None:
        query = query.where(Task.status == TaskStatus(status).value)
    query = query.order_by(Task.created_at.desc())

    result = await session.execute(query)
    tasks = list(result.scalars().all())

    logger.debug(f"Listed {len(tasks)} tasks" + (f" for project={project_id}" if project_id else ""))
    return tasks


async def get_task(
    session: AsyncSession,
    caller: AuthenticatedUser,
    task_id: uuid.UUID,
) -> Task:
    return await _get_for(session, caller, task_id, SELECT)


async def update_task(
    session: AsyncSession,
    caller: AuthenticatedUser,
    task_id: uuid.UUID,
    task_in: TaskUpdate,
) -> Task:
    """
    Update a task.

    The edited row must still pass the update policy: an assignee who hands
    the task to someone else, without being its creator or the project owner,
    is rejected.
    """
    task = await _get_for(session, caller, task_id, UPDATE)

    update_data = task_in.model_dump(exclude_unset=True)

    logger.info(f"Updating task {task_id}: {update_data}")

    for field, value in update_data.items():
        setattr(task, field, value)

    await ensure_check(session, UPDATE, caller.id, task)
    await session.flush()
    await session.refresh(task)
    return task
