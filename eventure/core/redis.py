import logging
from typing import Optional
from redis.asyncio import Redis
from redis.exceptions import RedisError
from eventure.core.config import settings

logger = logging.getLogger(__name__)

# drafts, payment sessions, idempotency keys and rate-limit counters all live here
redis: Optional[Redis] = None

async def init_redis() -> Redis:
    global redis
    try:
        redis = Redis.from_url(settings.REDIS_URL, decode_responses=False)
        await redis.ping()
        logger.info(f"Connected to Redis at {settings.REDIS_URL}")
        return redis
    except Exception as e:
        logger.error(f"Failed to connect to Redis at startup: {e}")
        redis = None
        raise

async def close_redis():
    global redis
    if redis:
        await redis.aclose()
        redis = None

def redis_available() -> bool:
    return redis is not None

async def ping_redis() -> bool:
    if redis is None:
        return False
    try:
        return bool(await redis.ping())
    except RedisError as e:
        logger.warning(f"Redis ping failed: {e}")
        return False

def get_redis() -> Redis:
    if redis is None:
        raise RuntimeError("Redis not initialized. Call init_redis() first.")
    return redis
