from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.future import select
from eventure.core.config import settings
from eventure.models.booking import Booking
from eventure.services.webhook import send_webhook

engine_worker = create_async_engine(settings.DATABASE_URL, future=True, echo=False)
AsyncSessionWorker = sessionmaker(engine_worker, class_=AsyncSession, expire_on_commit=False)


class NotificationNotDelivered(Exception):
    pass


async def notify_booking_confirmed_async(booking_id: int, session_factory=AsyncSessionWorker):
    """Background task: tell the notification hook about a confirmed booking"""
    async with session_factory() as db:
        res = await db.execute(select(Booking).where(Booking.id == booking_id))
        booking = res.scalars().first()
        if not booking:
            return

        payload = {
            "booking_id": booking.id,
            "booking_reference": booking.booking_reference,
            "user_id": booking.user_id,
            "scooter_id": booking.scooter_id,
            "pickup": f"{booking.pickup_date.isoformat()} {booking.pickup_time.strftime('%H:%M')}",
            "dropoff": f"{booking.dropoff_date.isoformat()} {booking.dropoff_time.strftime('%H:%M')}",
            "total_amount": booking.total_amount,
            "status": str(booking.status),
        }

    if not await send_webhook(payload):
        raise NotificationNotDelivered(f"Booking {booking_id} notification not delivered")
