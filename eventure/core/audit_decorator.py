import logging
from functools import wraps
from typing import Callable
from sqlalchemy.ext.asyncio import AsyncSession
from eventure.core.audit_log import log_audit
from eventure.core.enums import AuditAction

logger = logging.getLogger(__name__)


def audit_log(action: AuditAction) -> Callable:
    """Record an audit entry after the wrapped endpoint succeeds."""

    def decorator(func: Callable) -> Callable:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            result = await func(*args, **kwargs)

            db: AsyncSession = kwargs.get("db")
            current_user = kwargs.get("current_user")

            if not db or not current_user:
                return result

            payload = None
            for key in ["payload", "data", "body"]:
                if key in kwargs:
                    payload = kwargs[key]
                    break

            await log_audit(db, int(current_user.id), action, payload)
            try:
                await db.commit()
            except Exception as e:
                logger.error(f"Audit commit failed for {action}: {e}")
                await db.rollback()

            return result

        return wrapper
    return decorator
