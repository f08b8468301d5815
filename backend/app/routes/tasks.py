"""
Task routes for the Taskhive API.
"""

import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_user
from app.context import AuthenticatedUser
from app.database import get_session
from app.models import Task, TaskStatus
from app.schemas import TaskCreate, TaskUpdate, TaskRead
from app.services import tasks as task_service

router = APIRouter()


@router.post("/", response_model=TaskRead, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_in: TaskCreate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Task:
    """Create a task in a project the caller owns or belongs to."""
    return await task_service.create_task(session, user, task_in)


@router.get("/", response_model=list[TaskRead])
async def list_tasks(
    project_id: uuid.UUID | None = None,
    created_by: uuid.UUID | None = None,
    assigned_to: uuid.UUID | None = None,
    status: TaskStatus | None = None,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> list[Task]:
    """
    List tasks visible to the caller.

    Optionally filter by project, creator, assignee or status.
    """
    return await task_service.list_tasks(
        session,
        user,
        project_id=project_id,
        created_by=created_by,
        assigned_to=assigned_to,
        status=status,
    )


@router.get("/{task_id}", response_model=TaskRead)
async def get_task(
    task_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Task:
    """Get a task by ID."""
    return await task_service.get_task(session, user, task_id)


@router.patch("/{task_id}", response_model=TaskRead)
async def update_task(
    task_id: uuid.UUID,
    task_in: TaskUpdate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Task:
    """Update a task. Allowed for its creator, its assignee and the project owner."""
    return await task_service.update_task(session, user, task_id, task_in)
