"""
Project access control.

Every resource (task, comment, membership) is governed by exactly one project.
Access is decided from the actor's role on that project:

    owner > admin > member > none

``decide`` is a pure function over already-loaded rows; ``authorize`` resolves
the governing project and the actor's membership from the database, calls
``decide`` and raises the matching domain error on denial.

Ownership has two representations: ``Project.owner_id`` and a membership row
with role ``owner``. Both are written in the same transaction when a project is
created and the owner's membership can never be removed, so they agree.
An ``owner`` membership ranks as owner for day-to-day work, but deleting the
project and granting or revoking the owner role are reserved to the user
``owner_id`` points at.
"""
import enum
import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.errors import ForbiddenError, NotFoundError
from app.models.comment import Comment
from app.models.membership import Membership
from app.models.project import Project
from app.models.task import Task

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


ROLE_RANK = {
    None: 0,
    Role.MEMBER: 1,
    Role.ADMIN: 2,
    Role.OWNER: 3,
}


def rank(role) -> int:
    if role is None:
        return 0
    return ROLE_RANK[Role(role)]


class Action(str, enum.Enum):
    VIEW_PROJECT = "view_project"
    UPDATE_PROJECT = "update_project"
    DELETE_PROJECT = "delete_project"
    LIST_TASKS = "list_tasks"
    VIEW_TASK = "view_task"
    CREATE_TASK = "create_task"
    UPDATE_TASK = "update_task"
    DELETE_TASK = "delete_task"
    LIST_COMMENTS = "list_comments"
    VIEW_COMMENT = "view_comment"
    CREATE_COMMENT = "create_comment"
    DELETE_COMMENT = "delete_comment"
    LIST_MEMBERS = "list_members"
    ADD_MEMBER = "add_member"
    REMOVE_MEMBER = "remove_member"


MINIMUM_ROLE = {
    Action.VIEW_PROJECT: Role.MEMBER,
    Action.UPDATE_PROJECT: Role.ADMIN,
    Action.DELETE_PROJECT: Role.OWNER,
    Action.LIST_TASKS: Role.MEMBER,
    Action.VIEW_TASK: Role.MEMBER,
    Action.CREATE_TASK: Role.MEMBER,
    Action.UPDATE_TASK: Role.MEMBER,
    Action.DELETE_TASK: Role.ADMIN,
    Action.LIST_COMMENTS: Role.MEMBER,
    Action.VIEW_COMMENT: Role.MEMBER,
    Action.CREATE_COMMENT: Role.MEMBER,
    Action.DELETE_COMMENT: Role.ADMIN,
    Action.LIST_MEMBERS: Role.MEMBER,
    Action.ADD_MEMBER: Role.ADMIN,
    Action.REMOVE_MEMBER: Role.ADMIN,
}

DENIAL_MESSAGES = {
    Action.UPDATE_PROJECT: "Access denied. You need admin or owner access to update this project.",
    Action.DELETE_PROJECT: "Access denied. Only project owners can delete projects.",
    Action.DELETE_TASK: "Access denied. You can only delete tasks you created or are assigned to, "
                        "or need admin/owner access.",
    Action.DELETE_COMMENT: "Access denied. You can only delete your own comments or need admin/owner access.",
    Action.ADD_MEMBER: "Access denied. You need admin or owner access to add team members.",
    Action.REMOVE_MEMBER: "Access denied. You need admin or owner access to remove team members.",
}
NOT_A_MEMBER = "Access denied. You are not a member of this project."
OWNER_NOT_REMOVABLE = "Access denied. The project owner cannot be removed from the project."
OWNER_ROLE_RESERVED = "Access denied. Only the project owner can grant or revoke owner access."


class DenyReason(str, enum.Enum):
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class Decision:
    allowed: bool
    reason: DenyReason | None = None
    message: str | None = None

    @classmethod
    def allow(cls):
        return cls(True)

    @classmethod
    def deny(cls, reason: DenyReason, message: str):
        return cls(False, reason, message)


def is_project_owner(actor_id: int, project) -> bool:
    return project is not None and project.owner_id == actor_id


def may_grant(actor_id: int, project, role) -> bool:
    """Only the project owner hands out the owner role."""
    return Role(role) is not Role.OWNER or is_project_owner(actor_id, project)


def effective_role(actor_id: int, project, membership) -> Role | None:
    if is_project_owner(actor_id, project):
        return Role.OWNER
    if membership is None:
        return None
    return Role(membership.role)


def _acts_on_own_resource(actor_id: int, action: Action, resource) -> bool:
    """Plain members may delete the tasks they created or hold, and their own comments."""
    if resource is None:
        return False
    if action is Action.DELETE_TASK:
        return actor_id in (resource.created_by_id, resource.assigned_to)
    if action is Action.DELETE_COMMENT:
        return resource.user_id == actor_id
    return False


def decide(actor_id: int, action: Action, project, membership=None, resource=None) -> Decision:
    """Decide whether ``actor_id`` may perform ``action``.

    ``project`` is the governing project (``None`` when it does not exist),
    ``membership`` the actor's membership row on it (``None`` when absent) and
    ``resource`` the task, comment or membership acted upon, when there is one.
    """
    if project is None:
        return Decision.deny(DenyReason.NOT_FOUND, "Project not found")

    role = effective_role(actor_id, project, membership)
    if role is None:
        return Decision.deny(DenyReason.FORBIDDEN, NOT_A_MEMBER)

    # Deleting the project and managing owner memberships belong to the owner pointer alone
    if action is Action.DELETE_PROJECT:
        if is_project_owner(actor_id, project):
            return Decision.allow()
        return Decision.deny(DenyReason.FORBIDDEN, DENIAL_MESSAGES[action])

    if action is Action.REMOVE_MEMBER and resource is not None:
        if resource.user_id == project.owner_id:
            return Decision.deny(DenyReason.FORBIDDEN, OWNER_NOT_REMOVABLE)
        if resource.role == Role.OWNER.value and not is_project_owner(actor_id, project):
            return Decision.deny(DenyReason.FORBIDDEN, OWNER_ROLE_RESERVED)

    required = MINIMUM_ROLE[action]
    if rank(role) >= rank(required):
        return Decision.allow()
    if _acts_on_own_resource(actor_id, action, resource):
        return Decision.allow()
    return Decision.deny(DenyReason.FORBIDDEN, DENIAL_MESSAGES.get(action, NOT_A_MEMBER))


async def get_membership(db: AsyncSession, project_id: int, user_id: int) -> Membership | None:
    result = await db.execute(
        select(Membership).filter(Membership.project_id == project_id, Membership.user_id == user_id)
    )
    return result.scalars().first()


@dataclass
class AccessContext:
    project: Project
    membership: Membership | None
    role: Role


async def authorize(
    db: AsyncSession,
    actor_id: int,
    action: Action,
    *,
    project_id: int | None = None,
    task: Task | None = None,
    comment: Comment | None = None,
    membership: Membership | None = None,
) -> AccessContext:
    """Resolve the governing project of the target and enforce ``action`` on it.

    Exactly one of ``project_id``, ``task``, ``comment`` or ``membership`` names
    the target. Raises ``NotFoundError`` when the governing project (or, for a
    comment, its task) is missing and ``ForbiddenError`` when the role is too low.
    """
    resource = None
    if comment is not None:
        resource = comment
        result = await db.execute(select(Task).filter(Task.id == comment.task_id))
        parent = result.scalars().first()
        if parent is None:
            raise NotFoundError("Associated task not found")
        project_id = parent.project_id
    elif task is not None:
        resource = task
        project_id = task.project_id
    elif membership is not None:
        resource = membership
        project_id = membership.project_id

    if project_id is None:
        raise ValueError("authorize() needs a target")

    result = await db.execute(select(Project).filter(Project.id == project_id))
    project = result.scalars().first()
    actor_membership = None
    if project is not None:
        actor_membership = await get_membership(db, project_id, actor_id)

    decision = decide(actor_id, action, project, actor_membership, resource)
    if not decision.allowed:
        if decision.reason is DenyReason.NOT_FOUND:
            raise NotFoundError(decision.message)
        logger.warning(
            "Denied %s for user %s on project %s: %s", action.value, actor_id, project_id, decision.message
        )
        raise ForbiddenError(decision.message)

    return AccessContext(project, actor_membership, effective_role(actor_id, project, actor_membership))
