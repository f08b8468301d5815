"""
Account lifecycle: signup with profile provisioning, lookup, deletion.

Accounts belong to the identity provider and are not subject to row-level
policies. Provisioning runs with elevated privilege: the profile is written
without the profiles insert check, since the new account has no standing yet.
The account and its profile are created in the caller's transaction; if the
profile cannot be written, ``ProvisioningError`` propagates and the session
rollback leaves no account behind.
"""

from typing import Any

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.context import AuthenticatedUser
from app.exceptions import NotFoundError, ProvisioningError
from app.logging_config import get_logger
from app.models import Account, Profile

logger = get_logger(__name__)


def profile_full_name(email: str | None, user_metadata: dict[str, Any]) -> str | None:
    """Name from the signup metadata, falling back to the email."""
    full_name = user_metadata.get("full_name")
    return full_name if full_name is not None else email


def build_profile(account: Account) -> Profile:
    return Profile(
        user_id=account.id,
        full_name=profile_full_name(account.email, account.user_metadata),
    )


async def provision_profile(session: AsyncSession, account: Account) -> Profile:
    """Create the profile row for a freshly inserted account."""
    try:
        profile = build_profile(account)
        session.add(profile)
        await session.flush()
    except SQLAlchemyError as e:
        logger.error(f"Profile provisioning failed for account {account.id}: {e}")
        raise ProvisioningError(account.provider_uid, str(e)) from e
    return profile


async def create_account(
    session: AsyncSession,
    *,
    provider_uid: str,
    email: str | None = None,
    user_metadata: dict[str, Any] | None = None,
) -> Account:
    """
    Insert an account and provision its profile.

    Raises:
        ProvisioningError: If the profile could not be created. The caller
            must roll back; the account insert is part of the same transaction.
    """
    account = Account(
        provider_uid=provider_uid,
        email=email,
        user_metadata=user_metadata or {},
    )
    session.add(account)
    await session.flush()

    profile = await provision_profile(session, account)

    logger.info(
        f"Created account: id={account.id} uid={provider_uid} profile={profile.id}"
    )
    return account


async def get_account_by_uid(session: AsyncSession, provider_uid: str) -> Account | None:
    result = await session.execute(select(Account).where(Account.provider_uid == provider_uid))
    return result.scalar_one_or_none()


async def get_or_create_account(
    session: AsyncSession,
    *,
    provider_uid: str,
    email: str | None = None,
    name: str | None = None,
) -> Account:
    """
    Resolve a verified identity to its account, signing it up on first sight.

    Concurrent first requests from the same identity race on the unique
    ``provider_uid``. The insert runs in a savepoint; the loser rolls it back
    and picks up the winner's account.
    """
    account = await get_account_by_uid(session, provider_uid)
    if account is not None:
        return account

    user_metadata = {"full_name": name} if name is not None else {}
    try:
        async with session.begin_nested():
            return await create_account(
                session,
                provider_uid=provider_uid,
                email=email,
                user_metadata=user_metadata,
            )
    except IntegrityError:
        account = await get_account_by_uid(session, provider_uid)
        if account is None:
            raise
        logger.info(f"Account for {provider_uid} was created concurrently, reusing id={account.id}")
        return account


async def get_account(session: AsyncSession, caller: AuthenticatedUser) -> Account:
    account = await session.get(Account, caller.id)
    if account is None:
        raise NotFoundError("Account", str(caller.id))
    return account


async def delete_account(session: AsyncSession, caller: AuthenticatedUser) -> None:
    """
    Delete the caller's account.

    Foreign keys remove the profile, owned projects, memberships, created
    tasks and comments, and clear ``assigned_to`` on tasks assigned to it.
    """
    account = await get_account(session, caller)

    logger.info(f"Deleting account {account.id} ({account.email})")

    await session.delete(account)
    await session.flush()

