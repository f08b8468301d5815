"""
Project routes for the Taskhive API.
"""

import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_user
from app.context import AuthenticatedUser
from app.database import get_session
from app.models import Project, ProjectStatus
from app.schemas import ProjectCreate, ProjectUpdate, ProjectRead
from app.services import projects as project_service

router = APIRouter()


@router.post("/", response_model=ProjectRead, status_code=status.HTTP_201_CREATED)
async def create_project(
    project_in: ProjectCreate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Project:
    """Create a new project owned by the caller."""
    return await project_service.create_project(session, user, project_in)


@router.get("/", response_model=list[ProjectRead])
async def list_projects(
    owned: bool = False,
    status: ProjectStatus | None = None,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> list[Project]:
    """
    List the projects the caller owns or is a member of.

    Pass ``owned=true`` to restrict to the caller's own projects.
    """
    return await project_service.list_projects(session, user, owned_only=owned, status=status)


@router.get("/{project_id}", response_model=ProjectRead)
async def get_project(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Project:
    """Get a project by ID."""
    return await project_service.get_project(session, user, project_id)


@router.patch("/{project_id}", response_model=ProjectRead)
async def update_project(
    project_id: uuid.UUID,
    project_in: ProjectUpdate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Project:
    """Update a project. Owner only."""
    return await project_service.update_project(session, user, project_id, project_in)


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> None:
    """Delete a project with its members, tasks and comments. Owner only."""
    await project_service.delete_project(session, user, project_id)
