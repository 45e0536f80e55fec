from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_current_user, get_db
from app.errors import ConflictError, DomainError
from app.models.user import User as UserModel
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.user import (
    AuthResult,
    LoginRequest,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    Token,
    UserProfile,
)
from app.services import users as user_service

router = APIRouter(tags=["auth"])


@router.post("/register", response_model=ApiResponse[AuthResult], status_code=status.HTTP_201_CREATED)
async def register(user: RegisterRequest, db: AsyncSession = Depends(get_db)):
    try:
        new_user = await user_service.register_user(db, user)
        await db.commit()
    except IntegrityError:
        # Lost a race with a concurrent registration
        await db.rollback()
        raise ConflictError("Username or Email already registered")
    return {
        "message": "User registered successfully",
        "data": {"user": new_user, "token": user_service.issue_token(new_user)},
    }


@router.post("/login", response_model=ApiResponse[AuthResult])
async def login(credentials: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await user_service.authenticate(db, credentials.email, credentials.password)
    if not user:
        raise DomainError("Invalid email or password")
    return {"message": "Login successful", "data": {"user": user, "token": user_service.issue_token(user)}}


@router.post("/token", response_model=Token)
async def login_for_access_token(
    db: AsyncSession = Depends(get_db),
    form_data: OAuth2PasswordRequestForm = Depends()
):
    user = await user_service.authenticate(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect username or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return {"access_token": user_service.issue_token(user), "token_type": "bearer"}


@router.get("/profile", response_model=ApiResponse[UserProfile])
async def get_profile(current_user: UserModel = Depends(get_current_user)):
    return {"message": "Profile retrieved successfully", "data": current_user}


@router.put("/profile", response_model=ApiResponse[UserProfile])
async def update_profile(
    user_update: ProfileUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    try:
        await user_service.update_profile(db, current_user, user_update)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise ConflictError("Username or Email already registered")
    user = await user_service.get_user_by_id(db, current_user.id)
    return {"message": "Profile updated successfully", "data": user}


@router.put("/change-password", response_model=MessageResponse)
async def change_password(
    data: PasswordChange,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
):
    await user_service.change_password(db, current_user, data)
    await db.commit()
    return {"message": "Password changed successfully"}
