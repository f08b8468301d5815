"""
Dashboard route for the Taskhive API.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_user
from app.context import AuthenticatedUser
from app.database import get_session
from app.schemas import DashboardRead
from app.services.dashboard import build_dashboard

router = APIRouter()


@router.get("/", response_model=DashboardRead)
async def get_dashboard(
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> DashboardRead:
    """Counts and recent activity for the caller's own projects."""
    return await build_dashboard(session, user)
