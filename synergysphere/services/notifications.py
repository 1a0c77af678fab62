from fastapi import HTTPException
from sqlalchemy import func, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from synergysphere.models.notification import Notification
from synergysphere.models.project import Project
from synergysphere.models.tasks import Task


async def create_notification(db: AsyncSession, user_id: int, type_: str, title: str,
                              message: str, data: dict | None = None) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type_,
        title=title,
        message=message,
        data=data,
        read=False,
    )
    db.add(notification)
    await db.flush()
    return notification


async def notify_task_assigned(db: AsyncSession, task: Task, project: Project,
                               reassigned: bool = False) -> Notification:
    project_name = project.name if project else "a project"
    if reassigned:
        title = "Task Reassigned"
        message = f'"{task.title}" has been reassigned to you in {project_name}'
    else:
        title = "New Task Assigned"
        message = f'You have been assigned to "{task.title}" in {project_name}'
    return await create_notification(
        db, task.assignee_id, "task-assigned", title, message,
        data={"task_id": task.task_id, "project_id": task.project_id},
    )


async def notify_task_completed(db: AsyncSession, task: Task) -> Notification:
    return await create_notification(
        db, task.created_by_id, "task-completed", "Task Completed",
        f'"{task.title}" has been completed',
        data={"task_id": task.task_id, "project_id": task.project_id},
    )


async def list_for_user(db: AsyncSession, user_id: int, unread_only: bool = False,
                        limit: int = 100) -> list[Notification]:
    query = select(Notification).filter(Notification.user_id == user_id)
    if unread_only:
        query = query.filter(Notification.read == False)
    query = query.order_by(Notification.created_at.desc(), Notification.notification_id.desc()).limit(limit)
    result = await db.execute(query)
    return result.scalars().all()


async def mark_read(db: AsyncSession, notification_id: int, user_id: int) -> Notification:
    result = await db.execute(
        select(Notification).filter(
            Notification.notification_id == notification_id,
            Notification.user_id == user_id
        )
    )
    notification = result.scalars().first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")
    notification.read = True
    return notification


async def mark_all_read(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.read == False)
        .values(read=True)
    )
    return result.rowcount


async def count_unread(db: AsyncSession, user_id: int) -> int:
    result = await db.execute(
        select(func.count(Notification.notification_id))
        .filter(Notification.user_id == user_id, Notification.read == False)
    )
    return result.scalar_one()
