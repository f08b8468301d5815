"""
Project queries scoped to the calling account.

Reads see the projects the caller owns or is a member of. Updates and
deletes only ever target the caller's own projects; anything else reports
as not found.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.context import AuthenticatedUser
from app.exceptions import NotFoundError
from app.logging_config import get_logger
from app.models import Project, ProjectStatus
from app.policies import DELETE, INSERT, SELECT, UPDATE, ensure_check, visible
from app.schemas import ProjectCreate, ProjectUpdate

logger = get_logger(__name__)


async def _get_for(
    session: AsyncSession,
    caller: AuthenticatedUser,
    project_id: uuid.UUID,
    operation: str,
) -> Project:
    query = visible(select(Project).where(Project.id == project_id), Project, caller.id, operation)
    project = (await session.execute(query)).scalar_one_or_none()
    if project is None:
        raise NotFoundError("Project", str(project_id))
    return project


async def create_project(
    session: AsyncSession,
    caller: AuthenticatedUser,
    project_in: ProjectCreate,
) -> Project:
    data = project_in.model_dump()
    data["owner_id"] = data["owner_id"] or caller.id
    project = Project(**data)

    await ensure_check(session, INSERT, caller.id, project)

    session.add(project)
    await session.flush()
    await session.refresh(project)

    logger.info(f"Created project: id={project.id} name='{project.name}' owner={project.owner_id}")
    return project


async def list_projects(
    session: AsyncSession,
    caller: AuthenticatedUser,
    owned_only: bool = False,
    status: ProjectStatus | None = None,
) -> list[Project]:
    """List visible projects, newest first."""
    query = visible(select(Project), Project, caller.id)
    if owned_only:
        query = query.where(Project.owner_id == caller.id)
    if status is not None:
        query = query.where(Project.status == ProjectStatus(status).value)
    query = query.order_by(Project.created_at.desc())

    result = await session.execute(query)
    projects = list(result.scalars().all())

    logger.debug(f"Listed {len(projects)} projects for caller={caller.id}")
    return projects


async def get_project(
    session: AsyncSession,
    caller: AuthenticatedUser,
    project_id: uuid.UUID,
) -> Project:
    return await _get_for(session, caller, project_id, SELECT)


async def update_project(
    session: AsyncSession,
    caller: AuthenticatedUser,
    project_id: uuid.UUID,
    project_in: ProjectUpdate,
) -> Project:
    project = await _get_for(session, caller, project_id, UPDATE)

    update_data = project_in.model_dump(exclude_unset=True)

    logger.info(f"Updating project {project_id}: {update_data}")

    for field, value in update_data.items():
        setattr(project, field, value)

    await ensure_check(session, UPDATE, caller.id, project)
    await session.flush()
    await session.refresh(project)
    return project


async def delete_project(
    session: AsyncSession,
    caller: AuthenticatedUser,
    project_id: uuid.UUID,
) -> None:
    """Delete a project; members, tasks and their comments go with it."""
    project = await _get_for(session, caller, project_id, DELETE)

    logger.info(f"Deleting project {project_id}: '{project.name}'")

    await session.delete(project)
    await session.flush()
