from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from freight.core.response_builders import build_checklist_item_response
from freight.db.session import get_db
from freight.schemas.checklist import ChecklistItemOut
from freight.services.checklist_service import list_checklist_items

router = APIRouter(prefix="/checklist-items", tags=["checklist"])


@router.get("/", response_model=List[ChecklistItemOut])
async def list_items(db: AsyncSession = Depends(get_db)):
    return [build_checklist_item_response(item) for item in await list_checklist_items(db)]
