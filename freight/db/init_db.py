from sqlalchemy.ext.asyncio import AsyncEngine

from freight.models import announcement, audit, catalog, counter_offer, match, notification, payment, quote, truck, user  # noqa: F401
from freight.models.base import Base


async def create_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
