from datetime import datetime

from pydantic import Field, field_validator
from app.schemas.common import APIModel
from app.schemas.user import UserPublic
from app.utils.sanitization import sanitize_string

PROJECT_STATUS_PATTERN = r"^(active|completed|on-hold)$"


class ProjectFields(APIModel):
    @field_validator("name", "description", mode="before", check_fields=False)
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)


class ProjectCreate(ProjectFields):
    name: str = Field(..., min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)
    status: str = Field("active", pattern=PROJECT_STATUS_PATTERN)


class ProjectUpdate(ProjectFields):
    name: str | None = Field(None, min_length=1, max_length=100)
    description: str | None = Field(None, max_length=1000)
    status: str | None = Field(None, pattern=PROJECT_STATUS_PATTERN)


class ProjectBrief(APIModel):
    id: int
    name: str


class TaskSummary(APIModel):
    id: int
    title: str
    status: str


class Project(APIModel):
    id: int
    name: str
    description: str | None = None
    status: str
    owner_id: int = Field(..., serialization_alias="userId")
    created_at: datetime | None = None
    updated_at: datetime | None = None
    owner: UserPublic | None = None


class ProjectListItem(Project):
    tasks: list[TaskSummary] = []


class ProjectDetail(Project):
    # Resolved by model_rebuild once the task and team schemas are importable
    tasks: list["ProjectTask"] = []
    team_members: list["Member"] = []


from app.schemas.task import ProjectTask  # noqa: E402
from app.schemas.team import Member  # noqa: E402

ProjectDetail.model_rebuild()
