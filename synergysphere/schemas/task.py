from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from typing import Literal
from synergysphere.utils.sanitization import sanitize_string, sanitize_tags
from synergysphere.schemas.user import UserResponse

TaskStatus = Literal["todo", "in_progress", "completed", "cancelled"]
Priority = Literal["low", "medium", "high"]


# ── Common base for readable/writeable fields ──
class TaskBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    priority: Priority = "medium"
    deadline: datetime | None = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("title", "description", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v):
        return sanitize_tags(v)


class TaskCreate(TaskBase):
    project_id: int
    status: TaskStatus = "todo"
    assignee_id: int | None = None


class TaskUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    priority: Priority | None = None
    status: TaskStatus | None = None
    deadline: datetime | None = None
    assignee_id: int | None = None
    tags: list[str] | None = None

    @field_validator("title", "description", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)

    @field_validator("tags", mode="before")
    @classmethod
    def clean_tags(cls, v):
        return sanitize_tags(v)


class Task(TaskBase):
    task_id: int
    project_id: int
    status: str
    assignee_id: int | None = None
    created_by_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    assignee: UserResponse | None = None

    class Config:
        from_attributes = True


class TaskDeadline(BaseModel):
    task_id: int
    project_id: int
    title: str
    deadline: datetime
    status: str
    priority: str

    class Config:
        from_attributes = True
