from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession
from app.config import settings
from app.database import get_db as db_session
from app.errors import AuthenticationError, NotFoundError
from app.models.user import User as UserModel
from app.schemas.user import TokenData
from app.services import users as user_service
from app.utils.security import JWTError, decode_access_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/token")

def get_db(db: AsyncSession = Depends(db_session)):
    return db

async def get_current_user(
    db: AsyncSession = Depends(get_db),
    token: str = Depends(oauth2_scheme)
) -> UserModel:
    credentials_exception = AuthenticationError("Could not validate credentials")
    try:
        payload = decode_access_token(token)
        sub = payload.get("sub")
        if sub is None:
            raise credentials_exception
        token_data = TokenData(user_id=int(sub))
    except (JWTError, ValueError):
        raise credentials_exception

    try:
        return await user_service.get_user_by_id(db, token_data.user_id)
    except NotFoundError:
        raise AuthenticationError("User not found")
