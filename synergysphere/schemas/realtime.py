"""
Wire format of the real-time channel.

Every server push is a JSON envelope ``{type, data, projectId?, taskId?,
eventId?, notification?}``. Optional keys are omitted rather than sent as null.
"""
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

MessageType = Literal[
    "project_created", "project_updated", "project_deleted",
    "task_created", "task_updated", "task_deleted",
    "project_member_added", "project_member_removed",
    "event_created", "event_updated", "event_deleted",
    "notification",
]

ToastLevel = Literal["success", "error", "warning", "info"]


class Toast(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    type: ToastLevel = "info"
    title: str
    message: str
    auto_close: bool = Field(True, alias="autoClose")
    duration: int = 6000


class RealtimeMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: MessageType
    data: Any = None
    project_id: int | None = Field(None, alias="projectId")
    task_id: int | None = Field(None, alias="taskId")
    event_id: int | None = Field(None, alias="eventId")
    notification: Toast | None = None

    def to_text(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)
