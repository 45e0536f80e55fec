from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_current_user, get_db
from app.models.user import User as UserModel
from app.schemas.common import ApiResponse, MessageResponse, PaginatedResponse
from app.schemas.task import Task as TaskSchema, TaskCreate, TaskUpdate
from app.services import tasks as task_service
from app.utils.pagination import PageParams, build_pagination

router = APIRouter(tags=["tasks"])


@router.post(
    "/projects/{project_id}/tasks",
    response_model=ApiResponse[TaskSchema],
    status_code=status.HTTP_201_CREATED,
)
async def create_task(
    task_data: TaskCreate,
    project_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    task = await task_service.create_task(db, current_user.id, project_id, task_data)
    await db.commit()
    task = await task_service.load_task(db, task.id)
    return {"message": "Task created successfully", "data": task}


@router.get("/projects/{project_id}/tasks", response_model=PaginatedResponse[TaskSchema])
async def list_tasks(
    project_id: int = Path(..., ge=1),
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    tasks, total = await task_service.list_tasks(db, current_user.id, project_id, params)
    return {
        "message": "Tasks retrieved successfully",
        "data": tasks,
        "pagination": build_pagination(total, params.page, params.limit),
    }


@router.get("/tasks/{task_id}", response_model=ApiResponse[TaskSchema])
async def get_task(
    task_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    task = await task_service.get_task(db, current_user.id, task_id)
    return {"message": "Task retrieved successfully", "data": task}


@router.put("/tasks/{task_id}", response_model=ApiResponse[TaskSchema])
async def update_task(
    update_data: TaskUpdate,
    task_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await task_service.update_task(db, current_user.id, task_id, update_data)
    await db.commit()
    task = await task_service.load_task(db, task_id)
    return {"message": "Task updated successfully", "data": task}


@router.delete("/tasks/{task_id}", response_model=MessageResponse)
async def delete_task(
    task_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await task_service.delete_task(db, current_user.id, task_id)
    await db.commit()
    return {"message": "Task deleted successfully"}
