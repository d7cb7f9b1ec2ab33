"""Persists a booking once its payment has succeeded.

The availability decrement and the booking insert run in one transaction.
The decrement is conditional (``available > 0``), so a unit that sold out
while the customer was paying yields ``SoldOut`` and nothing is written.
Bookings are keyed on the gateway payment reference: confirming the same
payment twice returns the first booking instead of creating a duplicate;
the same reference arriving for another rider or scooter is a conflict.
"""
import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from eventure.core.audit_log import log_audit
from eventure.core.enums import AuditAction, BookingStatus
from eventure.core.errors import BookingPersistenceFailed, PaymentRefConflict, SoldOut
from eventure.core.metrics import booking_failures, bookings_confirmed
from eventure.models.booking import Booking
from eventure.models.scooter import Scooter
from eventure.schemas.booking import BookingDraft
from eventure.services.pricing import Quote

logger = logging.getLogger(__name__)


@dataclass
class Confirmation:
    booking: Booking
    available: Optional[int]
    replayed: bool = False


def new_booking_reference() -> str:
    return f"EVB-{secrets.token_hex(5).upper()}"


async def get_booking_by_payment_ref(db: AsyncSession, payment_ref: str) -> Optional[Booking]:
    res = await db.execute(select(Booking).where(Booking.payment_ref == payment_ref))
    return res.scalars().first()


def _ensure_same_booking(db_booking: Booking, payment_ref: str, scooter_id: int, user_id: int) -> None:
    """A payment reference only replays the booking it was made for."""
    if db_booking.user_id != user_id or db_booking.scooter_id != scooter_id:
        booking_failures.labels(reason="payment_ref_conflict").inc()
        logger.warning(
            f"Payment {payment_ref} belongs to booking {db_booking.booking_reference}, "
            f"not to user {user_id} on scooter {scooter_id}"
        )
        raise PaymentRefConflict()


async def _current_available(db: AsyncSession, scooter_id: int) -> Optional[int]:
    res = await db.execute(select(Scooter.available).where(Scooter.id == scooter_id))
    return res.scalar_one_or_none()


async def confirm_booking(
    db: AsyncSession,
    draft: BookingDraft,
    quote: Quote,
    payment_ref: str,
    scooter_id: int,
    user_id: int,
) -> Confirmation:
    existing = await get_booking_by_payment_ref(db, payment_ref)
    if existing:
        _ensure_same_booking(existing, payment_ref, scooter_id, user_id)
        logger.info(f"Payment {payment_ref} already booked as {existing.booking_reference}")
        return Confirmation(existing, await _current_available(db, scooter_id), replayed=True)

    try:
        res = await db.execute(
            update(Scooter)
            .where(Scooter.id == scooter_id, Scooter.available > 0)
            .values(available=Scooter.available - 1)
            .execution_options(synchronize_session=False)
        )
        if res.rowcount != 1:
            await db.rollback()
            booking_failures.labels(reason="sold_out").inc()
            logger.warning(f"Scooter {scooter_id} sold out before payment {payment_ref} could be booked")
            raise SoldOut()

        booking = Booking(
            user_id=user_id,
            scooter_id=scooter_id,
            booking_reference=new_booking_reference(),
            pickup_date=draft.pickup_date,
            pickup_time=draft.pickup_time,
            dropoff_date=draft.dropoff_date,
            dropoff_time=draft.dropoff_time,
            pickup_location=draft.pickup_location,
            dropoff_location=draft.dropoff_location,
            total_amount=quote.total_amount,
            total_hours=quote.total_hours,
            payment_ref=payment_ref,
            status=BookingStatus.CONFIRMED,
        )
        db.add(booking)
        await db.flush()
        await log_audit(db, user_id, AuditAction.CONFIRM_BOOKING, {
            "booking_reference": booking.booking_reference,
            "scooter_id": scooter_id,
            "payment_ref": payment_ref,
        })
        await db.commit()
    except IntegrityError:
        # a concurrent confirmation of the same payment got there first
        await db.rollback()
        winner = await get_booking_by_payment_ref(db, payment_ref)
        if winner:
            _ensure_same_booking(winner, payment_ref, scooter_id, user_id)
            return Confirmation(winner, await _current_available(db, scooter_id), replayed=True)
        booking_failures.labels(reason="integrity").inc()
        logger.error(f"Booking insert for payment {payment_ref} violated a constraint", exc_info=True)
        raise BookingPersistenceFailed()
    except SQLAlchemyError as e:
        await db.rollback()
        booking_failures.labels(reason="database").inc()
        logger.error(f"Booking insert for payment {payment_ref} failed: {e}")
        raise BookingPersistenceFailed() from e

    await db.refresh(booking)
    bookings_confirmed.inc()
    logger.info(
        f"Booking {booking.booking_reference} confirmed for user {user_id}, "
        f"scooter {scooter_id}, payment {payment_ref}"
    )
    return Confirmation(booking, await _current_available(db, scooter_id))
