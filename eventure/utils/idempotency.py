"""Replay cache for retried requests carrying an Idempotency-Key header."""
import json
from typing import Optional
from eventure.core.redis import get_redis
from eventure.core.config import settings


def idempotency_key(key: str, scope: str = "") -> str:
    return f"idemp:{scope}:{key}"


async def get_idempotent(key: str, scope: str = "") -> Optional[dict]:
    if not key:
        return None
    v = await get_redis().get(idempotency_key(key, scope))
    return json.loads(v) if v else None


async def set_idempotent(key: str, value: dict, scope: str = "") -> None:
    await get_redis().set(
        idempotency_key(key, scope),
        json.dumps(value, default=str),
        ex=settings.IDEMPOTENCY_TTL,
    )
