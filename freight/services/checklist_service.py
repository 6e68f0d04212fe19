from typing import List

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from freight.models.catalog import ChecklistItem


async def list_checklist_items(db: AsyncSession) -> List[ChecklistItem]:
    res = await db.execute(
        select(ChecklistItem)
        .where(ChecklistItem.enabled.is_(True))
        .order_by(ChecklistItem.sort_order, ChecklistItem.id)
    )
    return list(res.scalars().all())
