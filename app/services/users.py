import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.errors import ConflictError, DomainError, NotFoundError
from app.models.user import User
from app.schemas.user import PasswordChange, ProfileUpdate, RegisterRequest
from app.utils.security import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)


async def get_user_by_id(db: AsyncSession, user_id: int) -> User:
    result = await db.execute(
        select(User).filter(User.id == user_id).execution_options(populate_existing=True)
    )
    user = result.scalars().first()
    if not user:
        raise NotFoundError("User not found")
    return user


async def _find_other(db: AsyncSession, column, value, exclude_id: int | None = None) -> User | None:
    query = select(User).filter(column == value)
    if exclude_id is not None:
        query = query.filter(User.id != exclude_id)
    result = await db.execute(query)
    return result.scalars().first()


async def register_user(db: AsyncSession, data: RegisterRequest) -> User:
    if await _find_other(db, User.email, data.email):
        raise ConflictError("User already exists with this email")
    if await _find_other(db, User.username, data.username):
        raise ConflictError("Username is already taken")

    user = User(
        username=data.username,
        email=data.email,
        hashed_password=get_password_hash(data.password),
        first_name=data.first_name,
        last_name=data.last_name,
    )
    db.add(user)
    await db.flush()
    logger.info("Registered user %s (%s)", user.id, user.username)
    return user


async def authenticate(db: AsyncSession, login: str, password: str) -> User | None:
    """Match ``login`` against email, then username. Returns ``None`` on any mismatch."""
    user = await _find_other(db, User.email, login.strip().lower())
    if user is None:
        user = await _find_other(db, User.username, login.strip())
    if user is None or not verify_password(password, user.hashed_password):
        return None
    return user


async def update_profile(db: AsyncSession, user: User, data: ProfileUpdate) -> User:
    update_data = data.model_dump(exclude_unset=True)
    # username and email are required columns; an explicit null leaves them untouched
    for key in ("username", "email"):
        if update_data.get(key, "") is None:
            update_data.pop(key)

    if "username" in update_data and await _find_other(db, User.username, update_data["username"], user.id):
        raise ConflictError("Username is already taken")
    if "email" in update_data and await _find_other(db, User.email, update_data["email"], user.id):
        raise ConflictError("Email is already taken")

    for key, value in update_data.items():
        setattr(user, key, value)
    await db.flush()
    logger.info("Updated profile of user %s: %s", user.id, sorted(update_data))
    return user


async def change_password(db: AsyncSession, user: User, data: PasswordChange) -> None:
    if not verify_password(data.current_password, user.hashed_password):
        raise DomainError("Current password is incorrect")
    user.hashed_password = get_password_hash(data.new_password)
    await db.flush()
    logger.info("Changed password of user %s", user.id)


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": str(user.id), "username": user.username, "email": user.email})
