"""Checkout: validated draft -> payment session -> confirmed booking."""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from eventure.core.errors import PaymentInitFailed, PaymentInProgress
from eventure.core.metrics import payments_initiated
from eventure.models.booking import Booking
from eventure.services.booking_writer import confirm_booking
from eventure.services.drafts import DraftRecord, DraftStore
from eventure.services.listing import ListingReconciler
from eventure.services.payment import PaymentHandoff, PaymentOutcome, PaymentSession, Succeeded
from eventure.services.tasks import enqueue_booking_notification

logger = logging.getLogger(__name__)


@dataclass
class PaymentResult:
    session: PaymentSession
    booking: Optional[Booking] = None
    replayed: bool = False


async def start_checkout(record: DraftRecord, drafts: DraftStore, handoff: PaymentHandoff) -> PaymentSession:
    controller = await drafts.controller(record)
    quote = controller.validate()

    session_id = handoff.new_session_id()
    if not await drafts.begin_submit(record.id, session_id):
        raise PaymentInProgress()

    try:
        session = await handoff.initiate_payment(
            session_id=session_id,
            draft_id=record.id,
            draft=controller.draft,
            quote=quote,
            scooter_id=record.scooter_id,
            scooter_name=record.scooter_name,
            user_id=record.user_id,
        )
    except Exception as e:
        await drafts.end_submit(record.id)
        payments_initiated.labels(status="failed").inc()
        logger.error(f"Payment initialization failed for draft {record.id}: {e}")
        raise PaymentInitFailed() from e

    payments_initiated.labels(status="opened").inc()
    return session


async def complete_payment(
    session_id: str,
    outcome: PaymentOutcome,
    db: AsyncSession,
    drafts: DraftStore,
    handoff: PaymentHandoff,
    listing: ListingReconciler,
) -> PaymentResult:
    session = await handoff.resolve(session_id, outcome)

    if not isinstance(outcome, Succeeded):
        await drafts.end_submit(session.draft_id)
        logger.info(f"Payment dismissed for draft {session.draft_id}")
        return PaymentResult(session=session)

    try:
        confirmation = await confirm_booking(
            db,
            draft=session.draft,
            quote=session.quote,
            payment_ref=outcome.payment_ref,
            scooter_id=session.scooter_id,
            user_id=session.user_id,
        )
    except Exception:
        await drafts.end_submit(session.draft_id)
        raise

    await drafts.discard(session.draft_id)
    if not confirmation.replayed:
        listing.apply_decrement(session.scooter_id, confirmation.available)
        enqueue_booking_notification(confirmation.booking.id)

    return PaymentResult(session=session, booking=confirmation.booking, replayed=confirmation.replayed)
