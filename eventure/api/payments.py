import logging
import stripe
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from eventure.api.deps import get_draft_store, get_payment_handoff
from eventure.db.session import get_db
from eventure.schemas.payment import PaymentSessionOut, PaymentSuccessIn, PaymentResultOut
from eventure.core.config import settings
from eventure.core.security import get_current_user
from eventure.core.auth_utils import check_owner
from eventure.core.errors import PaymentAlreadyResolved
from eventure.core.response_builders import build_booking_response
from eventure.services.drafts import DraftStore
from eventure.services.listing import ListingReconciler, get_listing_reconciler
from eventure.services.payment import PaymentHandoff, Succeeded, Dismissed
from eventure.services.checkout import PaymentResult, complete_payment

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/payments", tags=["payments"])


def _result_response(result: PaymentResult) -> PaymentResultOut:
    if result.booking is None:
        return PaymentResultOut(session=result.session.to_response(), message="Payment cancelled")
    return PaymentResultOut(
        session=result.session.to_response(),
        booking=build_booking_response(result.booking),
        message=f"Booking confirmed: {result.booking.booking_reference}",
    )


@router.get("/{session_id}", response_model=PaymentSessionOut)
async def get_payment_session(
    session_id: str,
    handoff: PaymentHandoff = Depends(get_payment_handoff),
    current_user=Depends(get_current_user)
):
    session = await handoff.get_session(session_id)
    check_owner(session.user_id, current_user, "Payment")
    return session.to_response()


@router.post("/{session_id}/success", response_model=PaymentResultOut)
async def payment_succeeded(
    session_id: str,
    payload: PaymentSuccessIn,
    db: AsyncSession = Depends(get_db),
    drafts: DraftStore = Depends(get_draft_store),
    handoff: PaymentHandoff = Depends(get_payment_handoff),
    listing: ListingReconciler = Depends(get_listing_reconciler),
    current_user=Depends(get_current_user)
):
    session = await handoff.get_session(session_id)
    check_owner(session.user_id, current_user, "Payment")

    result = await complete_payment(session_id, Succeeded(payload.payment_ref), db, drafts, handoff, listing)
    return _result_response(result)


@router.post("/{session_id}/dismiss", response_model=PaymentResultOut)
async def payment_dismissed(
    session_id: str,
    db: AsyncSession = Depends(get_db),
    drafts: DraftStore = Depends(get_draft_store),
    handoff: PaymentHandoff = Depends(get_payment_handoff),
    listing: ListingReconciler = Depends(get_listing_reconciler),
    current_user=Depends(get_current_user)
):
    session = await handoff.get_session(session_id)
    check_owner(session.user_id, current_user, "Payment")

    result = await complete_payment(session_id, Dismissed(), db, drafts, handoff, listing)
    return _result_response(result)


@router.post("/webhook/stripe")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(None),
    db: AsyncSession = Depends(get_db),
    drafts: DraftStore = Depends(get_draft_store),
    handoff: PaymentHandoff = Depends(get_payment_handoff),
    listing: ListingReconciler = Depends(get_listing_reconciler),
):
    if not settings.STRIPE_WEBHOOK_SECRET:
        raise HTTPException(status_code=503, detail="Stripe webhook secret not configured")

    body = await request.body()
    try:
        event = stripe.Webhook.construct_event(body, stripe_signature, settings.STRIPE_WEBHOOK_SECRET)
    except (ValueError, stripe.SignatureVerificationError):
        raise HTTPException(status_code=400, detail="Invalid Stripe signature")

    if event["type"] == "payment_intent.succeeded":
        outcome = None
    elif event["type"] == "payment_intent.canceled":
        outcome = Dismissed()
    else:
        return {"received": True}

    intent = event["data"]["object"]
    metadata = intent.get("metadata") or {}
    session = await handoff.find_session_for_intent(metadata.get("session_id"), intent["id"])
    if session is None:
        logger.warning(f"Stripe event {event['type']} for unknown intent {intent['id']}")
        return {"received": True}

    if outcome is None:
        outcome = Succeeded(intent["id"])
    try:
        result = await complete_payment(session.id, outcome, db, drafts, handoff, listing)
    except PaymentAlreadyResolved:
        # the browser callback settled this session first
        settled = await handoff.get_session(session.id)
        logger.warning(
            f"Stripe event {event['type']} for session {session.id} ignored: already {settled.state}"
        )
        return {"received": True, "state": str(settled.state)}
    return {"received": True, "state": str(result.session.state)}
