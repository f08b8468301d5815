"""
Project membership.

Owners manage the member list; anyone who can see the project can read it.
The owner is never a membership row: ownership lives on ``projects.owner_id``.
"""

import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.context import AuthenticatedUser
from app.exceptions import NotFoundError, ValidationError
from app.logging_config import get_logger
from app.models import Project, ProjectMember
from app.policies import DELETE, INSERT, UPDATE, ensure_check, visible
from app.schemas import MemberCreate, MemberUpdate
from app.services.projects import get_project

logger = get_logger(__name__)


async def _get_for(
    session: AsyncSession,
    caller: AuthenticatedUser,
    project_id: uuid.UUID,
    member_id: uuid.UUID,
    operation: str,
) -> ProjectMember:
    query = visible(
        select(ProjectMember).where(
            ProjectMember.id == member_id,
            ProjectMember.project_id == project_id,
        ),
        ProjectMember,
        caller.id,
        operation,
    )
    member = (await session.execute(query)).scalar_one_or_none()
    if member is None:
        raise NotFoundError("Project member", str(member_id))
    return member


async def list_members(
    session: AsyncSession,
    caller: AuthenticatedUser,
    project_id: uuid.UUID,
) -> list[ProjectMember]:
    await get_project(session, caller, project_id)

    query = visible(
        select(ProjectMember).where(ProjectMember.project_id == project_id),
        ProjectMember,
        caller.id,
    ).order_by(ProjectMember.joined_at)
    result = await session.execute(query)
    return list(result.scalars().all())


async def add_member(
    session: AsyncSession,
    caller: AuthenticatedUser,
    project_id: uuid.UUID,
    member_in: MemberCreate,
) -> ProjectMember:
    """
    Grant an account access to a project.

    Raises:
        PolicyViolationError: The caller does not own the project.
        ValidationError: The account is the project's owner.
        ConstraintViolationError: Already a member, or no such account.
    """
    member = ProjectMember(project_id=project_id, **member_in.model_dump())

    await ensure_check(session, INSERT, caller.id, member)

    owner_id = await session.scalar(select(Project.owner_id).where(Project.id == project_id))
    if owner_id == member.user_id:
        raise ValidationError(
            "The project owner cannot be added as a member",
            details=[{"loc": ["body", "user_id"], "msg": "already owns the project", "type": "value_error"}],
        )

    session.add(member)
    await session.flush()
    await session.refresh(member)

    logger.info(f"Added member {member.user_id} to project {project_id} as {member.role}")
    return member


async def update_member_role(
    session: AsyncSession,
    caller: AuthenticatedUser,
    project_id: uuid.UUID,
    member_id: uuid.UUID,
    member_in: MemberUpdate,
) -> ProjectMember:
    member = await _get_for(session, caller, project_id, member_id, UPDATE)

    logger.info(f"Changing role of member {member_id} on project {project_id} to {member_in.role}")

    member.role = member_in.role
    await ensure_check(session, UPDATE, caller.id, member)
    await session.flush()
    await session.refresh(member)
    return member


async def remove_member(
    session: AsyncSession,
    caller: AuthenticatedUser,
    project_id: uuid.UUID,
    member_id: uuid.UUID,
) -> None:
    member = await _get_for(session, caller, project_id, member_id, DELETE)

    logger.info(f"Removing member {member.user_id} from project {project_id}")

    await session.delete(member)
    await session.flush()
