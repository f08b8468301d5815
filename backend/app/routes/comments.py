"""
Comment routes for the Taskhive API.
"""

import uuid
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import get_current_user
from app.context import AuthenticatedUser
from app.database import get_session
from app.models import Comment
from app.schemas import CommentCreate, CommentRead
from app.services import comments as comment_service

router = APIRouter()


@router.get("/", response_model=list[CommentRead])
async def list_comments(
    task_id: uuid.UUID,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> list[Comment]:
    return await comment_service.list_comments(session, user, task_id)


@router.post("/", response_model=CommentRead, status_code=status.HTTP_201_CREATED)
async def create_comment(
    task_id: uuid.UUID,
    comment_in: CommentCreate,
    session: AsyncSession = Depends(get_session),
    user: AuthenticatedUser = Depends(get_current_user),
) -> Comment:
    return await comment_service.create_comment(session, user, task_id, comment_in)
