import logging

from sqlalchemy import delete, func, or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.errors import NotFoundError
from app.models.comment import Comment
from app.models.membership import Membership
from app.models.project import Project
from app.models.task import Task
from app.schemas.project import ProjectCreate, ProjectUpdate
from app.services.access import Action, Role, authorize
from app.utils.pagination import PageParams
from app.utils.sanitization import like_pattern

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "createdAt": Project.created_at,
    "updatedAt": Project.updated_at,
    "name": Project.name,
    "status": Project.status,
}


async def load_project(db: AsyncSession, project_id: int) -> Project:
    """Project with owner, tasks (with assignee) and team (with user) loaded."""
    result = await db.execute(
        select(Project)
        .options(
            selectinload(Project.owner),
            selectinload(Project.tasks).selectinload(Task.assignee),
            selectinload(Project.team_members).selectinload(Membership.user),
        )
        .filter(Project.id == project_id)
        .execution_options(populate_existing=True)
    )
    project = result.scalars().first()
    if not project:
        raise NotFoundError("Project not found")
    return project


async def create_project(db: AsyncSession, actor_id: int, data: ProjectCreate) -> Project:
    project = Project(
        name=data.name,
        description=data.description,
        status=data.status or "active",
        owner_id=actor_id,
    )
    db.add(project)
    await db.flush()

    # The creator's owner membership lands in the same transaction as the project
    db.add(Membership(project_id=project.id, user_id=actor_id, role=Role.OWNER.value))
    await db.flush()
    logger.info("User %s created project %s", actor_id, project.id)
    return project


async def list_projects(db: AsyncSession, actor_id: int, params: PageParams) -> tuple[list[Project], int]:
    member_of = select(Membership.project_id).filter(Membership.user_id == actor_id)
    filters = [or_(Project.owner_id == actor_id, Project.id.in_(member_of))]
    if params.search:
        filters.append(Project.name.ilike(like_pattern(params.search), escape="\\"))

    total = await db.scalar(select(func.count(Project.id)).filter(*filters))

    result = await db.execute(
        select(Project)
        .options(selectinload(Project.owner), selectinload(Project.tasks))
        .filter(*filters)
        .order_by(*params.order_by(SORT_COLUMNS, Project.id))
        .offset(params.offset)
        .limit(params.limit)
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all()), total or 0


async def get_project(db: AsyncSession, actor_id: int, project_id: int) -> Project:
    await authorize(db, actor_id, Action.VIEW_PROJECT, project_id=project_id)
    return await load_project(db, project_id)


async def update_project(db: AsyncSession, actor_id: int, project_id: int, data: ProjectUpdate) -> Project:
    ctx = await authorize(db, actor_id, Action.UPDATE_PROJECT, project_id=project_id)
    project = ctx.project

    update_data = data.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        # name and status are required; description may be cleared
        if value is None and key != "description":
            continue
        setattr(project, key, value)

    await db.flush()
    logger.info("User %s updated project %s: %s", actor_id, project_id, sorted(update_data))
    return project


async def delete_project(db: AsyncSession, actor_id: int, project_id: int) -> None:
    """Remove the project with its tasks, their comments and its memberships.

    All statements run in the caller's transaction; nothing is visible until it commits.
    """
    await authorize(db, actor_id, Action.DELETE_PROJECT, project_id=project_id)

    task_ids = select(Task.id).filter(Task.project_id == project_id)
    comments = await db.execute(delete(Comment).where(Comment.task_id.in_(task_ids)))
    tasks = await db.execute(delete(Task).where(Task.project_id == project_id))
    members = await db.execute(delete(Membership).where(Membership.project_id == project_id))
    await db.execute(delete(Project).where(Project.id == project_id))
    await db.flush()

    logger.info(
        "User %s deleted project %s (%s tasks, %s comments, %s memberships)",
        actor_id, project_id, tasks.rowcount, comments.rowcount, members.rowcount,
    )
