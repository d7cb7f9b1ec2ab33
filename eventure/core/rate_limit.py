import logging
from fastapi import HTTPException
from eventure.core.redis import get_redis
from eventure.core.config import settings
from eventure.core.metrics import rate_limit_exceeded

logger = logging.getLogger(__name__)


def rate_limit_key(user_id: int) -> str:
    return f"rl:{user_id}"


async def check_rate_limit(user_id: int) -> int:
    """Count one request against the user's fixed window; 429 once it is used up."""
    redis = get_redis()
    key = rate_limit_key(user_id)

    count = await redis.incr(key)
    if count == 1:
        await redis.expire(key, settings.RATE_LIMIT_WINDOW)

    if count > settings.RATE_LIMIT:
        rate_limit_exceeded.inc()
        logger.warning(f"Rate limit exceeded for user {user_id} ({count}/{settings.RATE_LIMIT})")
        raise HTTPException(
            status_code=429,
            detail="Rate limit exceeded",
            headers={"Retry-After": str(settings.RATE_LIMIT_WINDOW)},
        )
    return count
