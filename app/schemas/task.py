from datetime import datetime

from pydantic import Field, field_validator
from app.schemas.common import APIModel
from app.schemas.user import UserPublic
from app.utils.sanitization import sanitize_string

TASK_STATUS_PATTERN = r"^(todo|in-progress|completed)$"
TASK_PRIORITY_PATTERN = r"^(low|medium|high)$"


class TaskFields(APIModel):
    @field_validator("title", "description", mode="before", check_fields=False)
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)


class TaskCreate(TaskFields):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    status: str = Field("todo", pattern=TASK_STATUS_PATTERN)
    priority: str = Field("medium", pattern=TASK_PRIORITY_PATTERN)
    assigned_to: int | None = Field(None, ge=1)


class TaskUpdate(TaskFields):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, max_length=1000)
    status: str | None = Field(None, pattern=TASK_STATUS_PATTERN)
    priority: str | None = Field(None, pattern=TASK_PRIORITY_PATTERN)
    assigned_to: int | None = Field(None, ge=1)


class TaskBrief(APIModel):
    id: int
    title: str


class ProjectTask(APIModel):
    id: int
    title: str
    description: str | None = None
    status: str
    priority: str
    project_id: int
    assigned_to: int | None = None
    created_by_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    assignee: UserPublic | None = None


class Task(ProjectTask):
    project: "ProjectBrief | None" = None


from app.schemas.project import ProjectBrief  # noqa: E402

Task.model_rebuild()
