import logging

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.errors import NotFoundError
from app.models.comment import Comment
from app.schemas.comment import CommentCreate
from app.services.access import Action, authorize
from app.services.tasks import get_task_row

logger = logging.getLogger(__name__)


async def get_comment_row(db: AsyncSession, comment_id: int) -> Comment:
    result = await db.execute(select(Comment).filter(Comment.id == comment_id))
    comment = result.scalars().first()
    if not comment:
        raise NotFoundError("Comment not found")
    return comment


async def load_comment(db: AsyncSession, comment_id: int) -> Comment:
    result = await db.execute(
        select(Comment)
        .options(selectinload(Comment.author), selectinload(Comment.task))
        .filter(Comment.id == comment_id)
        .execution_options(populate_existing=True)
    )
    comment = result.scalars().first()
    if not comment:
        raise NotFoundError("Comment not found")
    return comment


async def create_comment(db: AsyncSession, actor_id: int, task_id: int, data: CommentCreate) -> Comment:
    task = await get_task_row(db, task_id)
    await authorize(db, actor_id, Action.CREATE_COMMENT, task=task)

    comment = Comment(content=data.content, task_id=task_id, user_id=actor_id)
    db.add(comment)
    await db.flush()
    logger.info("User %s commented on task %s (comment %s)", actor_id, task_id, comment.id)
    return comment


async def list_comments(db: AsyncSession, actor_id: int, task_id: int) -> list[Comment]:
    task = await get_task_row(db, task_id)
    await authorize(db, actor_id, Action.LIST_COMMENTS, task=task)

    result = await db.execute(
        select(Comment)
        .options(selectinload(Comment.author))
        .filter(Comment.task_id == task_id)
        .order_by(Comment.created_at.asc(), Comment.id.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def get_comment(db: AsyncSession, actor_id: int, comment_id: int) -> Comment:
    comment = await get_comment_row(db, comment_id)
    await authorize(db, actor_id, Action.VIEW_COMMENT, comment=comment)
    return await load_comment(db, comment_id)


async def delete_comment(db: AsyncSession, actor_id: int, comment_id: int) -> None:
    comment = await get_comment_row(db, comment_id)
    await authorize(db, actor_id, Action.DELETE_COMMENT, comment=comment)

    await db.execute(delete(Comment).where(Comment.id == comment_id))
    await db.flush()
    logger.info("User %s deleted comment %s on task %s", actor_id, comment_id, comment.task_id)
