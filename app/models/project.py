from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Enum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.database import Base

PROJECT_STATUSES = ("active", "completed", "on-hold")


class Project(Base):
    __tablename__ = "projects"
    __mapper_args__ = {"eager_defaults": True}

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    status = Column(
        Enum(*PROJECT_STATUSES, name="project_status", native_enum=False),
        default="active",
        nullable=False,
    )
    # Mirrors the creator's owner membership; both are written in one transaction
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    owner = relationship("User", back_populates="projects", foreign_keys=[owner_id])
    tasks = relationship(
        "Task", back_populates="project", cascade="all, delete-orphan", passive_deletes=True,
        order_by="Task.id",
    )
    team_members = relationship(
        "Membership", back_populates="project", cascade="all, delete-orphan", passive_deletes=True,
        order_by="Membership.id",
    )
