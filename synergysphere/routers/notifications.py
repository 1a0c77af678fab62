from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from synergysphere.dependencies import get_db, get_current_user
from synergysphere.models.user import User as UserModel
from synergysphere.schemas.notification import Notification as NotificationSchema, UnreadNotifications
from synergysphere.services import notifications as notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])

@router.get("/", response_model=list[NotificationSchema])
async def list_my_notifications(
    limit: int = 100,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    return await notification_service.list_for_user(db, current_user.user_id, limit=limit)

@router.get("/unread", response_model=UnreadNotifications)
async def list_unread(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    notifications = await notification_service.list_for_user(db, current_user.user_id, unread_only=True)
    count = await notification_service.count_unread(db, current_user.user_id)
    return {"count": count, "notifications": notifications}

@router.put("/{notification_id}/read", response_model=NotificationSchema)
async def mark_notification_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    notification = await notification_service.mark_read(db, notification_id, current_user.user_id)
    await db.commit()
    return notification

@router.put("/read-all")
async def mark_all_read(
    db: AsyncSession = Depends(get_db),
    current_user: UserModel = Depends(get_current_user)
):
    updated = await notification_service.mark_all_read(db, current_user.user_id)
    await db.commit()
    return {"updated": updated}
