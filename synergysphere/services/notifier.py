"""
Best-effort fan-out of state changes to live connections.

Delivery is fire-and-forget: a closed connection is skipped, a failing send is
logged and its connection dropped, nothing is queued or retried. The persisted
notifications table is the source of truth; clients resync from it on reload.
"""
import asyncio
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from synergysphere.config import settings
from synergysphere.schemas.realtime import RealtimeMessage, Toast
from synergysphere.services.membership import MembershipResolver
from synergysphere.services.registry import ConnectionRegistry, LiveConnection


class DeliveryStatus(str, Enum):
    DELIVERED = "delivered"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass
class DeliveryResult:
    user_id: int
    connection_id: int
    status: DeliveryStatus
    error: str | None = None


@dataclass
class BroadcastReport:
    project_id: int | None
    recipients: set[int] = field(default_factory=set)
    results: list[DeliveryResult] = field(default_factory=list)
    error: str | None = None

    @property
    def delivered(self) -> list[DeliveryResult]:
        return [r for r in self.results if r.status == DeliveryStatus.DELIVERED]

    @property
    def delivered_user_ids(self) -> set[int]:
        return {r.user_id for r in self.delivered}


class Notifier:
    def __init__(self, registry: ConnectionRegistry, membership: MembershipResolver):
        self.registry = registry
        self.membership = membership

    # ── Core delivery ───────────────────────────────────

    async def _send(self, connection: LiveConnection, text: str) -> DeliveryResult:
        if not self.registry.is_open(connection):
            return DeliveryResult(connection.user_id, connection.connection_id, DeliveryStatus.SKIPPED)
        try:
            await connection.send_text(text)
        except Exception as e:
            print(f"[NOTIFIER] Send to {connection!r} failed: {e}")
            self.registry.unregister(connection)
            return DeliveryResult(connection.user_id, connection.connection_id, DeliveryStatus.FAILED, str(e))
        return DeliveryResult(connection.user_id, connection.connection_id, DeliveryStatus.DELIVERED)

    async def deliver_to_user(self, user_id: int, message: RealtimeMessage, text: str | None = None) -> list[DeliveryResult]:
        connections = self.registry.connections_for(user_id)
        if not connections:
            return []
        if text is None:
            text = message.to_text()
        return list(await asyncio.gather(*(self._send(c, text) for c in connections)))

    async def notify_user(self, user_id: int, message: RealtimeMessage) -> bool:
        results = await self.deliver_to_user(user_id, message)
        return any(r.status == DeliveryStatus.DELIVERED for r in results)

    async def notify_project(self, project_id: int, message: RealtimeMessage,
                             also: Iterable[int] = ()) -> BroadcastReport:
        """
        Push ``message`` to every member of the project as of now, plus any
        explicit ``also`` recipients. Each user receives it at most once.
        """
        report = BroadcastReport(project_id=project_id, recipients=set(also))
        try:
            report.recipients |= await self.membership.member_ids(project_id)
        except Exception as e:
            print(f"[NOTIFIER] Error resolving members of project {project_id}: {e}")
            report.error = str(e)

        text = message.to_text()
        for user_id in sorted(report.recipients):
            report.results.extend(await self.deliver_to_user(user_id, message, text))
        return report

    # ── Project events ──────────────────────────────────

    async def project_created(self, project: dict, user_id: int) -> bool:
        message = RealtimeMessage(type="project_created", data=project, project_id=project["project_id"])
        return await self.notify_user(user_id, message)

    async def project_updated(self, project: dict) -> BroadcastReport:
        message = RealtimeMessage(type="project_updated", data=project, project_id=project["project_id"])
        return await self.notify_project(project["project_id"], message)

    async def project_deleted(self, project_id: int, member_ids: Iterable[int]) -> BroadcastReport:
        # Membership rows are gone by now, so the caller passes the former members
        message = RealtimeMessage(type="project_deleted", data={"project_id": project_id}, project_id=project_id)
        report = BroadcastReport(project_id=project_id, recipients=set(member_ids))
        text = message.to_text()
        for user_id in sorted(report.recipients):
            report.results.extend(await self.deliver_to_user(user_id, message, text))
        return report

    # ── Task events ─────────────────────────────────────

    async def task_created(self, task: dict) -> BroadcastReport:
        message = RealtimeMessage(type="task_created", data=task,
                                  project_id=task["project_id"], task_id=task["task_id"])
        return await self.notify_project(task["project_id"], message)

    async def task_updated(self, task: dict) -> BroadcastReport:
        message = RealtimeMessage(type="task_updated", data=task,
                                  project_id=task["project_id"], task_id=task["task_id"])
        return await self.notify_project(task["project_id"], message)

    async def task_deleted(self, task_id: int, project_id: int) -> BroadcastReport:
        message = RealtimeMessage(type="task_deleted", data={"task_id": task_id},
                                  project_id=project_id, task_id=task_id)
        return await self.notify_project(project_id, message)

    # ── Membership events ───────────────────────────────

    async def member_added(self, project_id: int, member: dict) -> BroadcastReport:
        message = RealtimeMessage(type="project_member_added", data=member, project_id=project_id)
        return await self.notify_project(project_id, message, also=[member["user_id"]])

    async def member_removed(self, project_id: int, user_id: int) -> BroadcastReport:
        message = RealtimeMessage(type="project_member_removed", data={"user_id": user_id}, project_id=project_id)
        return await self.notify_project(project_id, message, also=[user_id])

    # ── Calendar events ─────────────────────────────────

    async def _event_message(self, kind: str, event: dict, user_id: int,
                             also: Iterable[int] = ()) -> BroadcastReport:
        message = RealtimeMessage(type=kind, data=event, event_id=event["event_id"],
                                  project_id=event.get("project_id"))
        project_id = event.get("project_id")
        recipients = {user_id, *also}
        if project_id:
            return await self.notify_project(project_id, message, also=recipients)
        report = BroadcastReport(project_id=None, recipients=recipients)
        text = message.to_text()
        for recipient in sorted(recipients):
            report.results.extend(await self.deliver_to_user(recipient, message, text))
        return report

    async def _former_members(self, project_id: int) -> set[int]:
        try:
            return await self.membership.member_ids(project_id)
        except Exception as e:
            print(f"[NOTIFIER] Error resolving former members of project {project_id}: {e}")
            return set()

    async def event_created(self, event: dict, user_id: int) -> BroadcastReport:
        return await self._event_message("event_created", event, user_id)

    async def event_updated(self, event: dict, user_id: int,
                            previous_project_id: int | None = None) -> BroadcastReport:
        # An event moved out of a project must also disappear from the old members' calendars
        also: set[int] = set()
        if previous_project_id and previous_project_id != event.get("project_id"):
            also = await self._former_members(previous_project_id)
        return await self._event_message("event_updated", event, user_id, also=also)

    async def event_deleted(self, event_id: int, project_id: int | None, user_id: int) -> BroadcastReport:
        return await self._event_message(
            "event_deleted", {"event_id": event_id, "project_id": project_id}, user_id
        )

    # ── Toast notifications ─────────────────────────────

    async def send_notification(self, user_id: int, title: str, message: str,
                                level: str = "info", auto_close: bool = True,
                                duration: int | None = None, data: Any = None) -> bool:
        toast = Toast(
            id=uuid.uuid4().hex[:9],
            type=level,
            title=title,
            message=message,
            auto_close=auto_close,
            duration=duration or settings.NOTIFICATION_TOAST_DURATION_MS,
        )
        envelope = RealtimeMessage(
            type="notification",
            data=data if data is not None else {"id": toast.id},
            notification=toast,
        )
        return await self.notify_user(user_id, envelope)

    async def push_notification(self, notification: dict, level: str = "info", duration: int | None = None) -> bool:
        """Live copy of a persisted notification row."""
        return await self.send_notification(
            notification["user_id"],
            notification["title"],
            notification["message"],
            level=level,
            duration=duration,
            data=notification,
        )

    async def project_manager_assigned(self, manager_id: int, project: dict) -> bool:
        return await self.send_notification(
            manager_id,
            "Project Manager Assigned",
            f'You have been assigned as manager of "{project["name"]}"',
        )
