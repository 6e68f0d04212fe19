import json
from typing import Optional

from freight.core.redis import get_redis
from freight.core.config import settings


def scoped_key(user_id: int, endpoint: str, key: Optional[str]) -> Optional[str]:
    if not key:
        return None
    return f"{user_id}:{endpoint}:{key}"

async def get_idempotent(key: Optional[str]):
    if not key:
        return None
    redis = get_redis()
    if redis is None:
        return None
    v = await redis.get(f"idemp:{key}")
    return json.loads(v) if v else None

async def set_idempotent(key: Optional[str], value: dict):
    if not key:
        return
    redis = get_redis()
    if redis is None:
        return
    await redis.set(f"idemp:{key}", json.dumps(value, default=str), ex=settings.IDEMPOTENCY_TTL)
