from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from freight.core.audit_log import log_audit
from freight.core.auth_utils import check_not_found, ensure_role
from freight.core.enums import AuditAction, UserRole
from freight.core.security import Principal
from freight.models.announcement import Announcement
from freight.schemas.announcement import AnnouncementCreate, AnnouncementUpdate


async def _load(db: AsyncSession, announcement_id: int) -> Announcement:
    res = await db.execute(select(Announcement).where(Announcement.id == announcement_id))
    announcement = res.scalars().first()
    check_not_found(announcement, "Announcement", announcement_id)
    return announcement


async def create_announcement(db: AsyncSession, principal: Principal, req: AnnouncementCreate) -> Announcement:
    ensure_role(principal, UserRole.ADMIN)
    announcement = Announcement.draft(principal.id, req.title, req.content, is_pinned=req.is_pinned)
    if req.publish:
        announcement.publish()
    db.add(announcement)
    await log_audit(db, principal.id, AuditAction.CREATE_ANNOUNCEMENT, req)
    await db.commit()
    return announcement


async def update_announcement(
    db: AsyncSession,
    principal: Principal,
    announcement_id: int,
    req: AnnouncementUpdate,
) -> Announcement:
    ensure_role(principal, UserRole.ADMIN)
    announcement = await _load(db, announcement_id)
    announcement.update(title=req.title, content=req.content, is_pinned=req.is_pinned)
    if req.publish is True:
        announcement.publish()
    elif req.publish is False:
        announcement.unpublish()
    await log_audit(db, principal.id, AuditAction.UPDATE_ANNOUNCEMENT, {"id": announcement_id, **req.model_dump(exclude_unset=True)})
    await db.commit()
    return announcement


async def delete_announcement(db: AsyncSession, principal: Principal, announcement_id: int) -> None:
    ensure_role(principal, UserRole.ADMIN)
    announcement = await _load(db, announcement_id)
    await db.delete(announcement)
    await log_audit(db, principal.id, AuditAction.DELETE_ANNOUNCEMENT, {"id": announcement_id})
    await db.commit()


async def list_all(db: AsyncSession, principal: Principal) -> List[Announcement]:
    ensure_role(principal, UserRole.ADMIN)
    res = await db.execute(select(Announcement).order_by(Announcement.created_at.desc(), Announcement.id.desc()))
    return list(res.scalars().all())


async def get_announcement(db: AsyncSession, announcement_id: int, include_drafts: bool = False) -> Announcement:
    announcement = await _load(db, announcement_id)
    if announcement.published_at is None and not include_drafts:
        check_not_found(None, "Announcement", announcement_id)
    return announcement


async def list_published(db: AsyncSession) -> List[Announcement]:
    res = await db.execute(
        select(Announcement)
        .where(Announcement.published_at.is_not(None))
        .order_by(Announcement.is_pinned.desc(), Announcement.published_at.desc(), Announcement.id.desc())
    )
    return list(res.scalars().all())
