"""
Project membership routes for the Taskhive API.
"""

import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_user
from app.context import AuthenticatedUser
from app.database import get_session
from app.models import ProjectMember
from app.schemas import MemberCreate, MemberUpdate, MemberRead
from app.services import members as member_service

router = APIRouter()


@router.get("/", response_model=list[MemberRead])
async def list_members(
    project_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> list[ProjectMember]:
    return await member_service.list_members(session, user, project_id)


@router.post("/", response_model=MemberRead, status_code=status.HTTP_201_CREATED)
async def add_member(
    project_id: uuid.UUID,
    member_in: MemberCreate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> ProjectMember:
    """Invite an account to the project. Owner only."""
    return await member_service.add_member(session, user, project_id, member_in)


@router.patch("/{member_id}", response_model=MemberRead)
async def update_member(
    project_id: uuid.UUID,
    member_id: uuid.UUID,
    member_in: MemberUpdate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> ProjectMember:
    return await member_service.update_member_role(session, user, project_id, member_id, member_in)


@router.delete("/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_member(
    project_id: uuid.UUID,
    member_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> None:
    """Revoke a membership. Owner only."""
    await member_service.remove_member(session, user, project_id, member_id)
