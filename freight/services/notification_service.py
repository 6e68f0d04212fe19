from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from freight.core.auth_utils import check_not_found
from freight.core.enums import NotificationType
from freight.core.errors import forbidden
from freight.core.security import Principal
from freight.models.notification import Notification


def create_notification(
    db: AsyncSession,
    receiver_id: int,
    type: NotificationType,
    message: str,
    match_id: Optional[int] = None,
) -> Notification:
    """Stage a notification in the caller's transaction."""
    notification = Notification.create(receiver_id, type, message, match_id=match_id)
    db.add(notification)
    return notification


async def get_my_notifications(db: AsyncSession, principal: Principal) -> List[Notification]:
    res = await db.execute(
        select(Notification)
        .where(Notification.receiver_id == principal.id)
        .order_by(Notification.created_at.desc(), Notification.id.desc())
    )
    return list(res.scalars().all())


async def get_unread_count(db: AsyncSession, principal: Principal) -> int:
    res = await db.execute(
        select(func.count(Notification.id)).where(
            Notification.receiver_id == principal.id,
            Notification.is_read.is_(False),
        )
    )
    return int(res.scalar() or 0)


async def mark_read(db: AsyncSession, principal: Principal, notification_id: int) -> Notification:
    res = await db.execute(select(Notification).where(Notification.id == notification_id))
    notification = res.scalars().first()
    check_not_found(notification, "Notification", notification_id)
    if notification.receiver_id != principal.id:
        raise forbidden("Forbidden: You can only read your own notifications")

    notification.mark_read()
    await db.commit()
    return notification
