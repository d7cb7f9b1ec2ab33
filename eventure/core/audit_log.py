"""Audit trail for booking and account actions"""
import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from eventure.models.audit import Audit
from eventure.core.enums import AuditAction
from eventure.utils.hashing import payload_hash

logger = logging.getLogger(__name__)


def _scooter_id(payload) -> Optional[int]:
    if isinstance(payload, dict):
        return payload.get("scooter_id")
    return getattr(payload, "scooter_id", None)


async def log_audit(
    db: AsyncSession,
    user_id: int,
    action: AuditAction,
    payload: Optional[dict] = None
) -> None:
    """Stage an audit record in the caller's transaction; the caller commits."""
    payload = payload or {}
    try:
        audit_record = Audit(
            user_id=int(user_id),
            action=str(action),
            scooter_id=_scooter_id(payload),
            payload_hash=payload_hash(payload),
        )
        db.add(audit_record)
        await db.flush()
    except Exception as e:
        logger.error(f"Audit logging failed for action {action}: {e}", exc_info=True)
