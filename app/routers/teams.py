from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_current_user, get_db
from app.errors import ConflictError
from app.models.user import User as UserModel
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.team import Member, MemberAdd, Membership
from app.services import teams as team_service

router = APIRouter(tags=["teams"])


@router.post(
    "/projects/{project_id}/teams",
    response_model=ApiResponse[Membership],
    status_code=status.HTTP_201_CREATED,
)
async def add_team_member(
    member_data: MemberAdd,
    project_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    try:
        membership = await team_service.add_member(db, current_user.id, project_id, member_data)
        await db.commit()
    except IntegrityError:
        # Unique (project, user) constraint caught a concurrent add
        await db.rollback()
        raise ConflictError("User is already a team member")
    membership = await team_service.load_membership(db, membership.id)
    return {"message": "Team member added successfully", "data": membership}


@router.get("/projects/{project_id}/teams", response_model=ApiResponse[list[Member]])
async def list_team_members(
    project_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    members = await team_service.list_members(db, current_user.id, project_id)
    return {"message": "Team members retrieved successfully", "data": members}


@router.delete("/teams/{membership_id}", response_model=MessageResponse)
async def remove_team_member(
    membership_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await team_service.remove_member(db, current_user.id, membership_id)
    await db.commit()
    return {"message": "Team member removed successfully"}
