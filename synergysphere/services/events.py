from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy import or_
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from synergysphere.models.event import Event
from synergysphere.models.project import ProjectMember
from synergysphere.models.tasks import Task
from synergysphere.schemas.event import EventCreate, EventUpdate
from synergysphere.services.membership import get_membership, get_project_or_404, require_member


def _visible_to(user_id: int):
    """Events the user created, or that belong to a project the user is a member of."""
    member_projects = select(ProjectMember.project_id).filter(ProjectMember.user_id == user_id)
    return or_(Event.created_by_id == user_id, Event.project_id.in_(member_projects))


async def get_event_by_id(db: AsyncSession, event_id: int) -> Event:
    result = await db.execute(
        select(Event)
        .filter(Event.event_id == event_id)
        .execution_options(populate_existing=True)
    )
    event = result.scalars().first()
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


async def _check_links(db: AsyncSession, project_id: int | None, task_id: int | None, user_id: int):
    if project_id is not None:
        await get_project_or_404(db, project_id)
        await require_member(db, project_id, user_id)
    if task_id is not None:
        result = await db.execute(select(Task).filter(Task.task_id == task_id))
        task = result.scalars().first()
        if not task:
            raise HTTPException(status_code=404, detail="Task not found")
        if project_id is not None and task.project_id != project_id:
            raise HTTPException(status_code=400, detail="Task does not belong to the given project")
        await require_member(db, task.project_id, user_id, detail="You do not have access to this task")


async def _require_editor(db: AsyncSession, event: Event, user_id: int, action: str):
    if event.created_by_id == user_id:
        return
    if event.project_id is not None and await get_membership(db, event.project_id, user_id):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=f"You do not have permission to {action} this event"
    )


async def get_for_user(db: AsyncSession, event_id: int, user_id: int) -> Event:
    event = await get_event_by_id(db, event_id)
    await _require_editor(db, event, user_id, "view")
    return event


async def create_event(db: AsyncSession, data: EventCreate, current_user_id: int) -> Event:
    await _check_links(db, data.project_id, data.task_id, current_user_id)
    event = Event(**data.model_dump(), created_by_id=current_user_id)
    db.add(event)
    await db.flush()
    return event


async def update_event(db: AsyncSession, event_id: int, data: EventUpdate,
                       current_user_id: int) -> tuple[Event, int | None]:
    """Returns the event and the project it belonged to before the update."""
    event = await get_event_by_id(db, event_id)
    await _require_editor(db, event, current_user_id, "update")
    previous_project_id = event.project_id

    changes = data.model_dump(exclude_unset=True)
    if "project_id" in changes or "task_id" in changes:
        await _check_links(db, changes.get("project_id", event.project_id),
                           changes.get("task_id", event.task_id), current_user_id)

    start = changes.get("start") or event.start
    end = changes.get("end") or event.end
    if _naive(end) < _naive(start):
        raise HTTPException(status_code=400, detail="Event end must not be before its start")

    for key, value in changes.items():
        if key in ("title", "start", "end", "all_day") and value is None:
            continue
        setattr(event, key, value)
    await db.flush()
    return event, previous_project_id


async def delete_event(db: AsyncSession, event_id: int, current_user_id: int) -> int | None:
    """Returns the project id the event belonged to, captured before deletion."""
    event = await get_event_by_id(db, event_id)
    await _require_editor(db, event, current_user_id, "delete")
    project_id = event.project_id
    await db.delete(event)
    await db.flush()
    return project_id


async def list_for_user(db: AsyncSession, user_id: int) -> list[Event]:
    result = await db.execute(
        select(Event).filter(_visible_to(user_id)).order_by(Event.start.desc())
    )
    return result.scalars().all()


async def list_in_range(db: AsyncSession, user_id: int, start: datetime, end: datetime) -> list[Event]:
    if _naive(end) < _naive(start):
        raise HTTPException(status_code=400, detail="Range end must not be before its start")
    result = await db.execute(
        select(Event)
        .filter(_visible_to(user_id), Event.start >= start, Event.start <= end)
        .order_by(Event.start)
    )
    return result.scalars().all()


def _naive(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; compare on a common footing
    return value.astimezone(timezone.utc).replace(tzinfo=None) if value.tzinfo else value
