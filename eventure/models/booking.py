from sqlalchemy import Column, String, Float, ForeignKey, Enum, Date, Time
from sqlalchemy.orm import relationship
from eventure.models.base import BaseModel
from eventure.core.enums import BookingStatus

class Booking(BaseModel):
    __tablename__ = "bookings"

    user_id = Column(ForeignKey("users.id"), nullable=False, index=True)
    scooter_id = Column(ForeignKey("scooters.id"), nullable=False)

    user = relationship("User", backref="bookings")
    scooter = relationship("Scooter", backref="bookings")

    booking_reference = Column(String(32), unique=True, nullable=False)
    pickup_date = Column(Date, nullable=False)
    pickup_time = Column(Time, nullable=False)
    dropoff_date = Column(Date, nullable=False)
    dropoff_time = Column(Time, nullable=False)
    pickup_location = Column(String(255), nullable=False)
    dropoff_location = Column(String(255), nullable=False)

    total_amount = Column(Float, nullable=False)
    total_hours = Column(Float, nullable=False)
    # one booking per gateway payment
    payment_ref = Column(String(255), unique=True, nullable=False)
    status = Column(Enum(BookingStatus), default=BookingStatus.CONFIRMED, nullable=False)
