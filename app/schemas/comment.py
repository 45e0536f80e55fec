from datetime import datetime

from pydantic import Field, field_validator
from app.schemas.common import APIModel
from app.schemas.task import TaskBrief
from app.schemas.user import UserPublic
from app.utils.sanitization import sanitize_string


class CommentCreate(APIModel):
    content: str = Field(..., min_length=1, max_length=1000)

    @field_validator("content", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)


class Comment(APIModel):
    id: int
    content: str
    task_id: int
    user_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None
    author: UserPublic


class CommentDetail(Comment):
    task: TaskBrief | None = None
