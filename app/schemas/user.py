import re
from datetime import datetime

from pydantic import BaseModel, EmailStr, Field, field_validator
from app.schemas.common import APIModel
from app.utils.sanitization import sanitize_string

USERNAME_PATTERN = r"^[a-zA-Z0-9_]+$"
PASSWORD_RULE = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)")


def check_password_strength(v: str) -> str:
    if not PASSWORD_RULE.match(v):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )
    return v


class UserPublic(APIModel):
    id: int
    username: str
    email: str
    first_name: str | None = None
    last_name: str | None = None


class UserProfile(UserPublic):
    created_at: datetime | None = None
    updated_at: datetime | None = None


class UserFields(APIModel):
    @field_validator("username", "first_name", "last_name", mode="before", check_fields=False)
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)

    @field_validator("email", mode="before", check_fields=False)
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class RegisterRequest(UserFields):
    username: str = Field(..., min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)

    @field_validator("password")
    @classmethod
    def strong_password(cls, v):
        return check_password_strength(v)


class LoginRequest(UserFields):
    email: EmailStr
    password: str = Field(..., min_length=1)


class ProfileUpdate(UserFields):
    username: str | None = Field(None, min_length=3, max_length=50, pattern=USERNAME_PATTERN)
    email: EmailStr | None = None
    first_name: str | None = Field(None, max_length=50)
    last_name: str | None = Field(None, max_length=50)


class PasswordChange(APIModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=128)

    @field_validator("new_password")
    @classmethod
    def strong_password(cls, v):
        return check_password_strength(v)


class AuthResult(APIModel):
    user: UserPublic
    token: str


class Token(BaseModel):
    access_token: str
    token_type: str


class TokenData(BaseModel):
    user_id: int | None = None
