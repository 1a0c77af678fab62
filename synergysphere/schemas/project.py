from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from synergysphere.schemas.user import UserResponse
from synergysphere.utils.sanitization import sanitize_string, sanitize_tags

Priority = Literal["low", "medium", "high"]
ProjectStatus = Literal["active", "completed", "on_hold", "cancelled"]


class ProjectBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    priority: Priority = "medium"
    deadline: datetime | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("name", "description", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v):
        return sanitize_tags(v)


class ProjectCreate(ProjectBase):
    pass


class ProjectUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    priority: Priority | None = None
    status: ProjectStatus | None = None
    deadline: datetime | None = None
    manager_id: int | None = None
    tags: list[str] | None = None

    @field_validator("name", "description", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v):
        return sanitize_tags(v)


class Project(ProjectBase):
    project_id: int
    status: str
    manager_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True


class ProjectDeadline(BaseModel):
    project_id: int
    name: str
    description: str | None = None
    deadline: datetime
    status: str
    priority: str

    class Config:
        from_attributes = True


# ── Membership schemas ──────────────────────────────────

class MemberAdd(BaseModel):
    user_id: int
    role: Literal["manager", "member"] = "member"


class ProjectMember(BaseModel):
    member_id: int
    project_id: int
    user_id: int
    role: str
    joined_at: datetime | None = None
    user: UserResponse | None = None

    class Config:
        from_attributes = True
