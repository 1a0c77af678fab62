from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from synergysphere.dependencies import get_db, get_current_user, get_notifier
from synergysphere.models.user import User as UserModel
from synergysphere.schemas.notification import Notification as NotificationSchema
from synergysphere.schemas.task import TaskCreate, Task as TaskSchema, TaskDeadline, TaskUpdate
from synergysphere.services import tasks as task_service
from synergysphere.services.notifier import Notifier
from synergysphere.utils.serialization import dump

router = APIRouter(prefix="/tasks", tags=["tasks"])


async def _push_change(notifier: Notifier, task, change: task_service.TaskChange, created: bool):
    payload = dump(TaskSchema, task)
    if created:
        await notifier.task_created(payload)
    else:
        await notifier.task_updated(payload)
    for notification in change.notifications:
        await notifier.push_notification(dump(NotificationSchema, notification), duration=8000)


@router.get("/", response_model=list[TaskSchema])
async def list_my_project_tasks(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await task_service.list_for_user(db, current_user.user_id)

@router.get("/mine", response_model=list[TaskSchema])
async def list_tasks_assigned_to_me(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await task_service.list_assigned_to(db, current_user.user_id)

@router.get("/deadlines", response_model=list[TaskDeadline])
async def list_task_deadlines(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await task_service.task_deadlines(db, current_user.user_id)

@router.post("/", response_model=TaskSchema, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier)
):
    change = await task_service.create_task(db, task_data, current_user.user_id)
    await db.commit()
    task = await task_service.get_task_by_id(db, change.task.task_id)

    await _push_change(notifier, task, change, created=True)
    return task

@router.get("/{task_id}", response_model=TaskSchema)
async def get_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await task_service.get_for_member(db, task_id, current_user.user_id)

@router.patch("/{task_id}", response_model=TaskSchema)
async def update_task(
    task_id: int,
    update_data: TaskUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier)
):
    change = await task_service.update_task(db, task_id, update_data, current_user.user_id)
    await db.commit()
    task = await task_service.get_task_by_id(db, task_id)

    await _push_change(notifier, task, change, created=False)
    return task

@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(
    task_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier)
):
    project_id = await task_service.delete_task(db, task_id, current_user.user_id)
    await db.commit()
    await notifier.task_deleted(task_id, project_id)
    return None
