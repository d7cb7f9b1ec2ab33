from fastapi import APIRouter, Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from eventure.api.deps import get_draft_store, get_payment_handoff
from eventure.db.session import get_db
from eventure.schemas.booking import DraftCreate, DraftUpdate, DraftOut
from eventure.schemas.payment import PaymentSessionOut
from eventure.core.security import get_current_user
from eventure.core.audit_decorator import audit_log
from eventure.core.rate_limit import check_rate_limit
from eventure.core.auth_utils import check_owner
from eventure.core.enums import AuditAction
from eventure.utils.idempotency import get_idempotent, set_idempotent
from eventure.services.drafts import DraftStore, build_draft_response
from eventure.services.payment import PaymentHandoff
from eventure.services.checkout import start_checkout

router = APIRouter(prefix="/drafts", tags=["drafts"])


async def _owned_draft(draft_id: str, drafts: DraftStore, current_user):
    record = await drafts.get(draft_id)
    check_owner(record.user_id, current_user, "Draft")
    return record


@router.post("/", response_model=DraftOut)
async def create_draft(
    payload: DraftCreate,
    db: AsyncSession = Depends(get_db),
    drafts: DraftStore = Depends(get_draft_store),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))

    record = await drafts.create(db, payload.scooter_id, int(current_user.id))
    return build_draft_response(record, await drafts.controller(record))


@router.get("/{draft_id}", response_model=DraftOut)
async def get_draft(
    draft_id: str,
    drafts: DraftStore = Depends(get_draft_store),
    current_user=Depends(get_current_user)
):
    record = await _owned_draft(draft_id, drafts, current_user)
    return build_draft_response(record, await drafts.controller(record))


@router.patch("/{draft_id}", response_model=DraftOut)
async def update_draft(
    draft_id: str,
    payload: DraftUpdate,
    drafts: DraftStore = Depends(get_draft_store),
    current_user=Depends(get_current_user)
):
    """Apply the sent fields one by one; the quote in the response reflects all of them."""
    record = await _owned_draft(draft_id, drafts, current_user)
    controller = await drafts.controller(record)

    for name, value in payload.model_dump(exclude_unset=True).items():
        controller.set_field(name, value)

    record.fields = controller.draft
    await drafts.save(record)
    return build_draft_response(record, controller)


@router.delete("/{draft_id}")
async def cancel_draft(
    draft_id: str,
    drafts: DraftStore = Depends(get_draft_store),
    current_user=Depends(get_current_user)
):
    record = await _owned_draft(draft_id, drafts, current_user)
    await drafts.discard(record.id)
    return {"deleted": True}


@router.post("/{draft_id}/checkout", response_model=PaymentSessionOut)
@audit_log(AuditAction.CHECKOUT)
async def checkout(
    draft_id: str,
    idempotency_key: Optional[str] = Header(None),
    db: AsyncSession = Depends(get_db),
    drafts: DraftStore = Depends(get_draft_store),
    handoff: PaymentHandoff = Depends(get_payment_handoff),
    current_user=Depends(get_current_user)
):
    await check_rate_limit(int(current_user.id))

    record = await _owned_draft(draft_id, drafts, current_user)
    scope = f"checkout:{current_user.id}:{draft_id}"
    if idempotency_key:
        prev = await get_idempotent(idempotency_key, scope=scope)
        if prev:
            return prev

    session = await start_checkout(record, drafts, handoff)

    out = session.to_response()
    if idempotency_key:
        await set_idempotent(idempotency_key, out.model_dump(mode="json"), scope=scope)
    return out
