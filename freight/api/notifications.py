from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from freight.core.response_builders import build_notification_response
from freight.core.security import Principal, get_current_principal
from freight.db.session import get_db
from freight.schemas.notification import NotificationOut, UnreadCountOut
from freight.services import notification_service

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("/", response_model=List[NotificationOut])
async def list_notifications(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    notifications = await notification_service.get_my_notifications(db, principal)
    return [build_notification_response(n) for n in notifications]


@router.get("/unread-count", response_model=UnreadCountOut)
async def unread_count(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return UnreadCountOut(unread_count=await notification_service.get_unread_count(db, principal))


@router.post("/{notification_id}/read", response_model=NotificationOut)
async def mark_read(
    notification_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    return build_notification_response(await notification_service.mark_read(db, principal, notification_id))
