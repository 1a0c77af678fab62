from datetime import datetime

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from synergysphere.dependencies import get_db, get_current_user, get_notifier
from synergysphere.models.user import User as UserModel
from synergysphere.schemas.event import Event as EventSchema, EventCreate, EventUpdate
from synergysphere.services import events as event_service
from synergysphere.services.notifier import Notifier
from synergysphere.utils.serialization import dump

router = APIRouter(prefix="/events", tags=["events"])

@router.get("/", response_model=list[EventSchema])
async def list_my_events(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await event_service.list_for_user(db, current_user.user_id)

@router.get("/range", response_model=list[EventSchema])
async def list_events_in_range(
    start: datetime,
    end: datetime,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await event_service.list_in_range(db, current_user.user_id, start, end)

@router.post("/", response_model=EventSchema, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier)
):
    event = await event_service.create_event(db, event_data, current_user.user_id)
    await db.commit()
    event = await event_service.get_event_by_id(db, event.event_id)

    await notifier.event_created(dump(EventSchema, event), current_user.user_id)
    return event

@router.get("/{event_id}", response_model=EventSchema)
async def get_event(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await event_service.get_for_user(db, event_id, current_user.user_id)

@router.patch("/{event_id}", response_model=EventSchema)
async def update_event(
    event_id: int,
    update_data: EventUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier)
):
    _, previous_project_id = await event_service.update_event(db, event_id, update_data, current_user.user_id)
    await db.commit()
    event = await event_service.get_event_by_id(db, event_id)

    await notifier.event_updated(dump(EventSchema, event), current_user.user_id,
                                 previous_project_id=previous_project_id)
    return event

@router.delete("/{event_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_event(
    event_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user),
    notifier: Notifier = Depends(get_notifier)
):
    project_id = await event_service.delete_event(db, event_id, current_user.user_id)
    await db.commit()
    await notifier.event_deleted(event_id, project_id, current_user.user_id)
    return None
