from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, JSON, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from synergysphere.database import Base

PROJECT_PRIORITIES = ("low", "medium", "high")
PROJECT_STATUSES = ("active", "completed", "on_hold", "cancelled")
MEMBER_ROLES = ("owner", "manager", "member")


class Project(Base):
    __tablename__ = "projects"
    __mapper_args__ = {"eager_defaults": True}

    project_id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    priority = Column(String(20), default="medium", nullable=False)   # low/medium/high
    status = Column(String(20), default="active", nullable=False)     # active/completed/on_hold/cancelled
    deadline = Column(DateTime(timezone=True), nullable=True)
    tags = Column(JSON, default=lambda: [])
    manager_id = Column(Integer, ForeignKey("users.user_id"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    manager = relationship("User", foreign_keys=[manager_id])
    members = relationship("ProjectMember", back_populates="project", passive_deletes=True)
    tasks = relationship("Task", back_populates="project", passive_deletes=True)
    events = relationship("Event", back_populates="project", passive_deletes=True)


class ProjectMember(Base):
    __tablename__ = "project_members"
    __mapper_args__ = {"eager_defaults": True}
    __table_args__ = (
        UniqueConstraint('project_id', 'user_id', name='_project_user_uc'),
    )

    member_id = Column(Integer, primary_key=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.project_id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    role = Column(String(20), default="member", nullable=False)  # owner/manager/member
    joined_at = Column(DateTime(timezone=True), server_default=func.now())

    project = relationship("Project", back_populates="members", foreign_keys=[project_id])
    user = relationship("User", back_populates="memberships", foreign_keys=[user_id])
