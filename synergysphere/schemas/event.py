from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from synergysphere.utils.sanitization import sanitize_string

EventColor = Literal["sky", "amber", "violet", "rose", "emerald", "orange"]


class EventBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = None
    start: datetime
    end: datetime
    all_day: bool = False
    color: EventColor | None = None
    location: str | None = None
    project_id: int | None = None
    task_id: int | None = None

    @field_validator("title", "description", "location", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)


class EventCreate(EventBase):
    @model_validator(mode="after")
    def check_range(self):
        start, end = self.start, self.end
        if (start.tzinfo is None) != (end.tzinfo is None):
            start, end = start.replace(tzinfo=None), end.replace(tzinfo=None)
        if end < start:
            raise ValueError("Event end must not be before its start")
        return self


class EventUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    all_day: bool | None = None
    color: EventColor | None = None
    location: str | None = None
    project_id: int | None = None
    task_id: int | None = None

    @field_validator("title", "description", "location", mode="before")
    @classmethod
    def sanitize(cls, v):
        return sanitize_string(v)


class Event(EventBase):
    event_id: int
    created_by_id: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
