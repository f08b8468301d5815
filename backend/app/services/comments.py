import uuid

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.context import AuthenticatedUser
from app.logging_config import get_logger
from app.models import Comment
from app.policies import INSERT, ensure_check, visible
from app.schemas import CommentCreate
from app.services.tasks import get_task

logger = get_logger(__name__)


async def list_comments(
    session: AsyncSession,
    caller: AuthenticatedUser,
    task_id: uuid.UUID,
) -> list[Comment]:
    """Comments on a task, oldest first. Unknown or hidden tasks are not found."""
    await get_task(session, caller, task_id)

    query = visible(
        select(Comment).where(Comment.task_id == task_id), Comment, caller.id
    ).order_by(Comment.created_at)
    result = await session.execute(query)
    return list(result.scalars().all())


async def create_comment(
    session: AsyncSession,
    caller: AuthenticatedUser,
    task_id: uuid.UUID,
    comment_in: CommentCreate,
) -> Comment:
    """
    Comment on a task.

    Raises:
        PolicyViolationError: The caller cannot read the task, or claims
            another account as author.
    """
    comment = Comment(
        task_id=task_id,
        user_id=comment_in.user_id or caller.id,
        content=comment_in.content,
    )

    await ensure_check(session, INSERT, caller.id, comment)

    session.add(comment)
    await session.flush()
    await session.refresh(comment)

    logger.info(f"Created comment: id={comment.id} task={task_id} author={comment.user_id}")
    return comment
