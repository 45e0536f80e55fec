from datetime import datetime

from pydantic import Field
from app.schemas.common import APIModel
from app.schemas.user import UserPublic

ROLE_PATTERN = r"^(owner|admin|member)$"


class MemberAdd(APIModel):
    user_id: int = Field(..., ge=1)
    role: str = Field("member", pattern=ROLE_PATTERN)


class Member(APIModel):
    id: int
    project_id: int
    user_id: int
    role: str
    joined_at: datetime | None = None
    user: UserPublic


class Membership(Member):
    project: "ProjectBrief | None" = None


from app.schemas.project import ProjectBrief  # noqa: E402

Membership.model_rebuild()
