import logging

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import selectinload

from app.errors import ConflictError, ForbiddenError, NotFoundError
from app.models.membership import Membership
from app.models.user import User
from app.schemas.team import MemberAdd
from app.services.access import OWNER_ROLE_RESERVED, Action, Role, authorize, get_membership, may_grant

logger = logging.getLogger(__name__)


async def load_membership(db: AsyncSession, membership_id: int) -> Membership:
    result = await db.execute(
        select(Membership)
        .options(selectinload(Membership.user), selectinload(Membership.project))
        .filter(Membership.id == membership_id)
        .execution_options(populate_existing=True)
    )
    membership = result.scalars().first()
    if not membership:
        raise NotFoundError("Team member not found")
    return membership


async def add_member(db: AsyncSession, requester_id: int, project_id: int, data: MemberAdd) -> Membership:
    ctx = await authorize(db, requester_id, Action.ADD_MEMBER, project_id=project_id)
    role = data.role or Role.MEMBER.value
    if not may_grant(requester_id, ctx.project, role):
        logger.warning("Denied owner grant by user %s on project %s", requester_id, project_id)
        raise ForbiddenError(OWNER_ROLE_RESERVED)

    result = await db.execute(select(User.id).filter(User.id == data.user_id))
    if result.scalar() is None:
        raise NotFoundError("User not found")

    if await get_membership(db, project_id, data.user_id) is not None:
        raise ConflictError("User is already a team member")

    membership = Membership(project_id=project_id, user_id=data.user_id, role=role)
    db.add(membership)
    await db.flush()
    logger.info(
        "User %s added user %s to project %s as %s", requester_id, data.user_id, project_id, membership.role
    )
    return membership


async def list_members(db: AsyncSession, requester_id: int, project_id: int) -> list[Membership]:
    await authorize(db, requester_id, Action.LIST_MEMBERS, project_id=project_id)

    result = await db.execute(
        select(Membership)
        .options(selectinload(Membership.user))
        .filter(Membership.project_id == project_id)
        .order_by(Membership.joined_at.asc(), Membership.id.asc())
        .execution_options(populate_existing=True)
    )
    return list(result.scalars().all())


async def remove_member(db: AsyncSession, requester_id: int, membership_id: int) -> None:
    """Delete a membership. The member's tasks and comments stay in the project."""
    result = await db.execute(select(Membership).filter(Membership.id == membership_id))
    membership = result.scalars().first()
    if not membership:
        raise NotFoundError("Team member not found")

    await authorize(db, requester_id, Action.REMOVE_MEMBER, membership=membership)

    await db.execute(delete(Membership).where(Membership.id == membership_id))
    await db.flush()
    logger.info(
        "User %s removed user %s from project %s", requester_id, membership.user_id, membership.project_id
    )
