from dataclasses import dataclass, field

from fastapi import HTTPException
from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.orm import joinedload

from synergysphere.models.event import Event
from synergysphere.models.notification import Notification
from synergysphere.models.project import Project, ProjectMember
from synergysphere.models.tasks import Task
from synergysphere.schemas.task import TaskCreate, TaskUpdate
from synergysphere.services import notifications as notification_service
from synergysphere.services.membership import ensure_member, get_project_or_404, require_member
from synergysphere.services.users import get_user_or_404


@dataclass
class TaskChange:
    """What a create/update did, so the router can push the right live messages."""
    task: Task
    notifications: list[Notification] = field(default_factory=list)


async def get_task_by_id(db: AsyncSession, task_id: int) -> Task:
    result = await db.execute(
        select(Task)
        .options(joinedload(Task.assignee))
        .filter(Task.task_id == task_id)
        .execution_options(populate_existing=True)
    )
    task = result.scalars().unique().first()
    if not task:
        raise HTTPException(status_code=404, detail="Task not found")
    return task


async def get_for_member(db: AsyncSession, task_id: int, user_id: int) -> Task:
    task = await get_task_by_id(db, task_id)
    await require_member(db, task.project_id, user_id, detail="You do not have access to this task")
    return task


async def _assign(db: AsyncSession, task: Task, project: Project, assignee_id: int,
                  current_user_id: int, reassigned: bool) -> Notification | None:
    if assignee_id == current_user_id:
        return None
    await ensure_member(db, project.project_id, assignee_id)
    return await notification_service.notify_task_assigned(db, task, project, reassigned=reassigned)


async def create_task(db: AsyncSession, task_data: TaskCreate, current_user_id: int) -> TaskChange:
    project = await get_project_or_404(db, task_data.project_id)
    await require_member(db, project.project_id, current_user_id)
    if task_data.assignee_id is not None:
        await get_user_or_404(db, task_data.assignee_id, detail="Assignee not found")

    new_task = Task(
        title=task_data.title,
        description=task_data.description,
        status=task_data.status,
        priority=task_data.priority,
        deadline=task_data.deadline,
        tags=task_data.tags,
        project_id=project.project_id,
        assignee_id=task_data.assignee_id,
        created_by_id=current_user_id,
    )
    db.add(new_task)
    await db.flush()

    change = TaskChange(task=new_task)
    if task_data.assignee_id is not None:
        notification = await _assign(db, new_task, project, task_data.assignee_id,
                                     current_user_id, reassigned=False)
        if notification:
            change.notifications.append(notification)
    return change


async def update_task(db: AsyncSession, task_id: int, update_data: TaskUpdate, current_user_id: int) -> TaskChange:
    task = await get_for_member(db, task_id, current_user_id)
    project = await get_project_or_404(db, task.project_id)

    previous_assignee_id = task.assignee_id
    previous_status = task.status

    changes = update_data.model_dump(exclude_unset=True)
    # The assignee must exist before the row references it
    if changes.get("assignee_id") is not None:
        await get_user_or_404(db, changes["assignee_id"], detail="Assignee not found")
    for key, value in changes.items():
        if key in ("title", "status", "priority") and value is None:
            continue
        setattr(task, key, value)
    await db.flush()

    change = TaskChange(task=task)

    new_assignee_id = changes.get("assignee_id")
    if new_assignee_id is not None and new_assignee_id != previous_assignee_id:
        notification = await _assign(db, task, project, new_assignee_id, current_user_id,
                                     reassigned=previous_assignee_id is not None)
        if notification:
            change.notifications.append(notification)

    if (
        task.status == "completed"
        and previous_status != "completed"
        and task.created_by_id is not None
        and task.created_by_id != current_user_id
    ):
        change.notifications.append(await notification_service.notify_task_completed(db, task))

    return change


async def delete_task(db: AsyncSession, task_id: int, current_user_id: int) -> int:
    """Returns the project id of the deleted task."""
    task = await get_for_member(db, task_id, current_user_id)
    project_id = task.project_id
    await db.execute(update(Event).where(Event.task_id == task_id).values(task_id=None))
    await db.delete(task)
    await db.flush()
    return project_id


async def list_for_user(db: AsyncSession, user_id: int) -> list[Task]:
    result = await db.execute(
        select(Task)
        .options(joinedload(Task.assignee))
        .join(ProjectMember, ProjectMember.project_id == Task.project_id)
        .filter(ProjectMember.user_id == user_id)
        .order_by(Task.updated_at.desc(), Task.task_id.desc())
    )
    return result.scalars().unique().all()


async def list_for_project(db: AsyncSession, project_id: int, user_id: int) -> list[Task]:
    await get_project_or_404(db, project_id)
    await require_member(db, project_id, user_id)
    result = await db.execute(
        select(Task)
        .options(joinedload(Task.assignee))
        .filter(Task.project_id == project_id)
        .order_by(Task.updated_at.desc(), Task.task_id.desc())
    )
    return result.scalars().unique().all()


async def list_assigned_to(db: AsyncSession, user_id: int) -> list[Task]:
    result = await db.execute(
        select(Task)
        .options(joinedload(Task.assignee))
        .filter(Task.assignee_id == user_id)
        .order_by(Task.updated_at.desc(), Task.task_id.desc())
    )
    return result.scalars().unique().all()


async def task_deadlines(db: AsyncSession, user_id: int) -> list[Task]:
    result = await db.execute(
        select(Task)
        .join(ProjectMember, ProjectMember.project_id == Task.project_id)
        .filter(ProjectMember.user_id == user_id, Task.deadline.isnot(None))
        .order_by(Task.deadline)
    )
    return result.scalars().all()
