from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_current_user, get_db
from app.models.user import User as UserModel
from app.schemas.common import ApiResponse, MessageResponse, PaginatedResponse
from app.schemas.project import ProjectCreate, ProjectDetail, ProjectListItem, ProjectUpdate
from app.services import projects as project_service
from app.utils.pagination import PageParams, build_pagination

router = APIRouter(prefix="/projects", tags=["projects"])


@router.post("", response_model=ApiResponse[ProjectDetail], status_code=status.HTTP_201_CREATED)
async def create_project(
    project_data: ProjectCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    project = await project_service.create_project(db, current_user.id, project_data)
    await db.commit()
    project = await project_service.load_project(db, project.id)
    return {"message": "Project created successfully", "data": project}


@router.get("", response_model=PaginatedResponse[ProjectListItem])
async def list_projects(
    params: PageParams = Depends(),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    projects, total = await project_service.list_projects(db, current_user.id, params)
    return {
        "message": "Projects retrieved successfully",
        "data": projects,
        "pagination": build_pagination(total, params.page, params.limit),
    }


@router.get("/{project_id}", response_model=ApiResponse[ProjectDetail])
async def get_project(
    project_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    project = await project_service.get_project(db, current_user.id, project_id)
    return {"message": "Project retrieved successfully", "data": project}


@router.put("/{project_id}", response_model=ApiResponse[ProjectDetail])
async def update_project(
    update_data: ProjectUpdate,
    project_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await project_service.update_project(db, current_user.id, project_id, update_data)
    await db.commit()
    project = await project_service.load_project(db, project_id)
    return {"message": "Project updated successfully", "data": project}


@router.delete("/{project_id}", response_model=MessageResponse)
async def delete_project(
    project_id: int = Path(..., ge=1),
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await project_service.delete_project(db, current_user.id, project_id)
    await db.commit()
    return {"message": "Project deleted successfully"}
