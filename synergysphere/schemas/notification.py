from datetime import datetime
from typing import Any

from pydantic import BaseModel


class Notification(BaseModel):
    notification_id: int
    user_id: int
    type: str
    title: str
    message: str
    data: dict[str, Any] | None = None
    read: bool
    created_at: datetime | None = None

    class Config:
        from_attributes = True


class UnreadNotifications(BaseModel):
    count: int
    notifications: list[Notification]
