from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List

from eventure.db.session import get_db
from eventure.models.booking import Booking
from eventure.schemas.booking import BookingOut
from eventure.core.security import get_current_user
from eventure.core.auth_utils import check_owner, filter_by_user, get_or_404
from eventure.core.enums import BookingStatus
from eventure.core.response_builders import build_booking_response, build_booking_response_list

router = APIRouter(prefix="/bookings", tags=["bookings"])

ACTIVE_BOOKING_STATUSES = [BookingStatus.CONFIRMED, BookingStatus.PENDING]


@router.get("/", response_model=List[BookingOut])
async def list_active_bookings(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    q = select(Booking).where(Booking.status.in_(ACTIVE_BOOKING_STATUSES))
    q = filter_by_user(q, Booking, current_user)
    q = q.order_by(Booking.pickup_date.asc(), Booking.pickup_time.asc()).limit(limit).offset(offset)

    res = await db.execute(q)
    return build_booking_response_list(res.scalars().all())


@router.get("/{booking_id}", response_model=BookingOut)
async def get_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    booking = await get_or_404(db, Booking, booking_id, "Booking")
    check_owner(booking.user_id, current_user, "Booking")

    return build_booking_response(booking)
