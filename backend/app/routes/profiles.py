"""
Profile and account routes for the Taskhive API.
"""

import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_user
from app.context import AuthenticatedUser
from app.database import get_session
from app.models import Account, Profile
from app.schemas import AccountRead, ProfileCreate, ProfileRead, ProfileUpdate
from app.services import accounts as account_service
from app.services import profiles as profile_service

router = APIRouter()
account_router = APIRouter()


@router.get("/", response_model=list[ProfileRead])
async def list_profiles(
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> list[Profile]:
    return await profile_service.list_profiles(session, user)


@router.post("/", response_model=ProfileRead, status_code=status.HTTP_201_CREATED)
async def create_profile(
    profile_in: ProfileCreate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Profile:
    return await profile_service.create_profile(session, user, profile_in)


@router.get("/me", response_model=ProfileRead)
async def get_own_profile(
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Profile:
    return await profile_service.get_own_profile(session, user)


@router.patch("/me", response_model=ProfileRead)
async def update_own_profile(
    profile_in: ProfileUpdate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Profile:
    profile = await profile_service.get_own_profile(session, user)
    return await profile_service.update_profile(session, user, profile.id, profile_in)


@router.get("/{profile_id}", response_model=ProfileRead)
async def get_profile(
    profile_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Profile:
    return await profile_service.get_profile(session, user, profile_id)


@router.patch("/{profile_id}", response_model=ProfileRead)
async def update_profile(
    profile_id: uuid.UUID,
    profile_in: ProfileUpdate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Profile:
    """Update a profile. Only its own account may do so."""
    return await profile_service.update_profile(session, user, profile_id, profile_in)


@account_router.get("/", response_model=AccountRead)
async def get_account(
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Account:
    return await account_service.get_account(session, user)


@account_router.delete("/", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> None:
    """Delete the caller's account and everything that depends on it."""
    await account_service.delete_account(session, user)
