from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_current_user, get_db
from app.models.user import User as UserModel
from app.schemas.comment import Comment, CommentCreate, CommentDetail
from app.schemas.common import ApiResponse, MessageResponse
from app.services import comments as comment_service

router = APIRouter(tags=["comments"])


@router.post(
    "/tasks/{task_id}/comments",
    response_model=ApiResponse[CommentDetail],
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    comment_data: CommentCreate,
    task_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    comment = await comment_service.create_comment(db, current_user.id, task_id, comment_data)
    await db.commit()
    comment = await comment_service.load_comment(db, comment.id)
    return {"message": "Comment created successfully", "data": comment}


@router.get("/tasks/{task_id}/comments", response_model=ApiResponse[list[Comment]])
async def list_comments(
    task_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    comments = await comment_service.list_comments(db, current_user.id, task_id)
    return {"message": "Comments retrieved successfully", "data": comments}


@router.get("/comments/{comment_id}", response_model=ApiResponse[CommentDetail])
async def get_comment(
    comment_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    comment = await comment_service.get_comment(db, current_user.id, comment_id)
    return {"message": "Comment retrieved successfully", "data": comment}


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await comment_service.delete_comment(db, current_user.id, comment_id)
    await db.commit()
    return {"message": "Comment deleted successfully"}
