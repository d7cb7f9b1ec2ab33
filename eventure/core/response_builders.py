from eventure.models.scooter import Scooter
from eventure.models.booking import Booking
from eventure.schemas.scooter import ScooterOut
from eventure.schemas.booking import BookingOut


def build_scooter_response(scooter: Scooter) -> ScooterOut:
    return ScooterOut(
        id=scooter.id,
        name=scooter.name,
        model=scooter.model,
        image_url=scooter.image_url,
        price_per_hour=scooter.price_per_hour,
        max_speed=scooter.max_speed,
        location=scooter.location,
        mileage=scooter.mileage,
        support=scooter.support,
        owner=scooter.owner,
        available=scooter.available,
        rating=scooter.rating,
        created_at=scooter.created_at,
        updated_at=scooter.updated_at,
    )


def build_booking_response(booking: Booking) -> BookingOut:
    return BookingOut(
        id=booking.id,
        booking_reference=booking.booking_reference,
        user_id=booking.user_id,
        scooter_id=booking.scooter_id,
        pickup_date=booking.pickup_date,
        pickup_time=booking.pickup_time,
        dropoff_date=booking.dropoff_date,
        dropoff_time=booking.dropoff_time,
        pickup_location=booking.pickup_location,
        dropoff_location=booking.dropoff_location,
        total_amount=booking.total_amount,
        total_hours=booking.total_hours,
        payment_ref=booking.payment_ref,
        status=booking.status,
        created_at=booking.created_at,
        updated_at=booking.updated_at,
    )


def build_scooter_response_list(scooters: list) -> list:
    return [build_scooter_response(scooter) for scooter in scooters]


def build_booking_response_list(bookings: list) -> list:
    return [build_booking_response(booking) for booking in bookings]
