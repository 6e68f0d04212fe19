from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from freight.core.response_builders import build_announcement_response
from freight.core.security import Principal, require_admin
from freight.db.session import get_db
from freight.schemas.announcement import AnnouncementCreate, AnnouncementOut, AnnouncementUpdate
from freight.services import announcement_service

router = APIRouter(prefix="/announcements", tags=["announcements"])
admin_router = APIRouter(prefix="/admin/announcements", tags=["admin"])


@router.get("/", response_model=List[AnnouncementOut])
async def list_published(db: AsyncSession = Depends(get_db)):
    return [build_announcement_response(a) for a in await announcement_service.list_published(db)]


@router.get("/{announcement_id}", response_model=AnnouncementOut)
async def get_published(announcement_id: int, db: AsyncSession = Depends(get_db)):
    return build_announcement_response(await announcement_service.get_announcement(db, announcement_id))


@admin_router.post("/", response_model=AnnouncementOut, status_code=201)
async def create_announcement(
    payload: AnnouncementCreate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return build_announcement_response(await announcement_service.create_announcement(db, principal, payload))


@admin_router.get("/", response_model=List[AnnouncementOut])
async def list_all(
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    return [build_announcement_response(a) for a in await announcement_service.list_all(db, principal)]


@admin_router.get("/{announcement_id}", response_model=AnnouncementOut)
async def get_any(
    announcement_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    announcement = await announcement_service.get_announcement(db, announcement_id, include_drafts=True)
    return build_announcement_response(announcement)


@admin_router.put("/{announcement_id}", response_model=AnnouncementOut)
async def update_announcement(
    announcement_id: int,
    payload: AnnouncementUpdate,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    announcement = await announcement_service.update_announcement(db, principal, announcement_id, payload)
    return build_announcement_response(announcement)


@admin_router.delete("/{announcement_id}")
async def delete_announcement(
    announcement_id: int,
    db: AsyncSession = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    await announcement_service.delete_announcement(db, principal, announcement_id)
    return {"deleted": True}
