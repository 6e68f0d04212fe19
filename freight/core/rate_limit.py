import logging

from freight.core.config import settings
from freight.core.errors import FreightError, ErrorKind
from freight.core.metrics import rate_limit_exceeded
from freight.core.redis import get_redis

logger = logging.getLogger(__name__)


async def check_rate_limit(user_id: int):
    redis = get_redis()
    if redis is None:
        return
    key = f"rl:{user_id}"
    try:
        current = await redis.get(key)
        if current is None:
            await redis.set(key, "1", ex=settings.RATE_LIMIT_WINDOW)
            return
        count = int(current)
        if count >= settings.RATE_LIMIT:
            rate_limit_exceeded.labels(user_id=str(user_id)).inc()
            raise FreightError(ErrorKind.RATE_LIMITED)
        await redis.incr(key)
    except FreightError:
        raise
    except Exception as e:
        logger.warning(f"Rate limit check skipped for user {user_id}: {e}")
