import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.context import AuthenticatedUser
from app.exceptions import NotFoundError
from app.logging_config import get_logger
from app.models import Profile
from app.policies import INSERT, UPDATE, ensure_check, visible
from app.schemas import ProfileCreate, ProfileUpdate

logger = get_logger(__name__)


async def list_profiles(session: AsyncSession, caller: AuthenticatedUser) -> list[Profile]:
    query = visible(select(Profile), Profile, caller.id).order_by(Profile.full_name)
    result = await session.execute(query)
    return list(result.scalars().all())


async def get_profile(
    session: AsyncSession,
    caller: AuthenticatedUser,
    profile_id: uuid.UUID,
) -> Profile:
    query = visible(select(Profile).where(Profile.id == profile_id), Profile, caller.id)
    profile = (await session.execute(query)).scalar_one_or_none()
    if profile is None:
        raise NotFoundError("Profile", str(profile_id))
    return profile


async def get_own_profile(session: AsyncSession, caller: AuthenticatedUser) -> Profile:
    query = visible(select(Profile).where(Profile.user_id == caller.id), Profile, caller.id)
    profile = (await session.execute(query)).scalar_one_or_none()
    if profile is None:
        raise NotFoundError("Profile for account", str(caller.id))
    return profile


async def create_profile(
    session: AsyncSession,
    caller: AuthenticatedUser,
    profile_in: ProfileCreate,
) -> Profile:
    """
    Insert a profile explicitly.

    Signup already provisions one, so this only succeeds for accounts whose
    profile was removed; a second profile for the same account violates the
    unique ``user_id`` constraint.
    """
    data = profile_in.model_dump()
    data["user_id"] = data["user_id"] or caller.id
    profile = Profile(**data)

    await ensure_check(session, INSERT, caller.id, profile)

    session.add(profile)
    await session.flush()
    await session.refresh(profile)

    logger.info(f"Created profile: id={profile.id} user={profile.user_id}")
    return profile


async def update_profile(
    session: AsyncSession,
    caller: AuthenticatedUser,
    profile_id: uuid.UUID,
    profile_in: ProfileUpdate,
) -> Profile:
    """Update a profile. Only the owning account can target its row."""
    query = visible(
        select(Profile).where(Profile.id == profile_id), Profile, caller.id, UPDATE
    )
    profile = (await session.execute(query)).scalar_one_or_none()
    if profile is None:
        raise NotFoundError("Profile", str(profile_id))

    update_data = profile_in.model_dump(exclude_unset=True)
    logger.info(f"Updating profile {profile_id}: {update_data}")

    for field, value in update_data.items():
        setattr(profile, field, value)

    await ensure_check(session, UPDATE, caller.id, profile)
    await session.flush()
    await session.refresh(profile)
    return profile
