import logging

from sqlalchemy import delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.errors import DomainError, NotFoundError
from app.models.comment import Comment
from app.models.membership import Membership
from app.models.task import Task
from app.models.user import User
from app.schemas.task import TaskCreate, TaskUpdate
from app.services.access import Action, authorize
from app.utils.pagination import PageParams
from app.utils.sanitization import like_pattern

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "createdAt": Task.created_at,
    "updatedAt": Task.updated_at,
    "title": Task.title,
    "status": Task.status,
    "priority": Task.priority,
}

REQUIRED_FIELDS = ("title", "status", "priority")


def _task_query():
    return select(Task).options(selectinload(Task.assignee), selectinload(Task.project))


async def get_task_row(db: AsyncSession, task_id: int) -> Task:
    result = await db.execute(select(Task).filter(Task.id == task_id))
    task = result.scalars().first()
    if not task:
        raise NotFoundError("Task not found")
    return task


async def load_task(db: AsyncSession, task_id: int) -> Task:
    """Task with assignee and project loaded."""
    result = await db.execute(
        _task_query().filter(Task.id == task_id).execution_options(populate_existing=True)
    )
    task = result.scalars().first()
    if not task:
        raise NotFoundError("Task not found")
    return task


async def check_assignee(db: AsyncSession, project_id: int, user_id: int) -> None:
    result = await db.execute(select(User.id).filter(User.id == user_id))
    if result.scalar() is None:
        raise DomainError("Assigned user does not exist")

    result = await db.execute(
        select(Membership.id).filter(Membership.project_id == project_id, Membership.user_id == user_id)
    )
    if result.scalar() is None:
        raise DomainError("Cannot assign task to user who is not a project member.")


async def create_task(db: AsyncSession, actor_id: int, project_id: int, task_data: TaskCreate) -> Task:
    await authorize(db, actor_id, Action.CREATE_TASK, project_id=project_id)

    if task_data.assigned_to is not None:
        await check_assignee(db, project_id, task_data.assigned_to)

    new_task = Task(
        title=task_data.title,
        description=task_data.description,
        status=task_data.status or "todo",
        priority=task_data.priority or "medium",
        project_id=project_id,
        assigned_to=task_data.assigned_to,
        created_by_id=actor_id,
    )
    db.add(new_task)
    await db.flush()
    logger.info("User %s created task %s in project %s", actor_id, new_task.id, project_id)
    return new_task


async def list_tasks(
    db: AsyncSession, actor_id: int, project_id: int, params: PageParams
) -> tuple[list[Task], int]:
    await authorize(db, actor_id, Action.LIST_TASKS, project_id=project_id)

    filters = [Task.project_id == project_id]
    if params.search:
        pattern = like_pattern(params.search)
        filters.append(or_(Task.title.ilike(pattern, escape="\\"), Task.status.ilike(pattern, escape="\\")))

    total = await db.scalar(select(func.count(Task.id)).filter(*filters))

    result = await db.execute(
        _task_query()
        .filter(*filters)
        .order_by(*params.order_by(SORT_COLUMNS, Task.id))
        .offset(params.offset)
        .limit(params.limit)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all()), total or 0


async def get_task(db: AsyncSession, actor_id: int, task_id: int) -> Task:
    task = await get_task_row(db, task_id)
    await authorize(db, actor_id, Action.VIEW_TASK, task=task)
    return await load_task(db, task_id)


async def update_task(db: AsyncSession, actor_id: int, task_id: int, update_data: TaskUpdate) -> Task:
    task = await get_task_row(db, task_id)
    await authorize(db, actor_id, Action.UPDATE_TASK, task=task)

    changes = update_data.model_dump(exclude_unset=True)
    if changes.get("assigned_to") is not None:
        await check_assignee(db, task.project_id, changes["assigned_to"])

    for key, value in changes.items():
        if value is None and key in REQUIRED_FIELDS:
            continue
        setattr(task, key, value)

    await db.flush()
    logger.info("User %s updated task %s: %s", actor_id, task_id, sorted(changes))
    return task


async def delete_task(db: AsyncSession, actor_id: int, task_id: int) -> None:
    task = await get_task_row(db, task_id)
    await authorize(db, actor_id, Action.DELETE_TASK, task=task)

    comments = await db.execute(delete(Comment).where(Comment.task_id == task_id))
    await db.execute(delete(Task).where(Task.id == task_id))
    await db.flush()
    logger.info("User %s deleted task %s (%s comments)", actor_id, task_id, comments.rowcount)
