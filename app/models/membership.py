from sqlalchemy import Column, Integer, DateTime, ForeignKey, Enum, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

ROLES = ("owner", "admin", "member")


class Membership(Base):
    __tablename__ = "teams"
    __mapper_args__ = {"eager_defaults": True}
    __table_args__ = (
        UniqueConstraint("project_id", "user_id", name="_project_user_uc"),
    )

    id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    role = Column(Enum(*ROLES, name="team_role", native_enum=False), default="member", nullable=False)
    joined_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    project = relationship("Project", back_populates="team_members")
    user = relationship("User", back_populates="memberships")
