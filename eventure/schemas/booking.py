from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import date, time, datetime
from eventure.core.enums import BookingStatus
from eventure.schemas.quote import QuoteResponse


class BookingDraft(BaseModel):
    pickup_date: Optional[date] = None
    pickup_time: Optional[time] = None
    dropoff_date: Optional[date] = None
    dropoff_time: Optional[time] = None
    pickup_location: Optional[str] = None
    dropoff_location: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_as_missing(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v


class DraftCreate(BaseModel):
    scooter_id: int


class DraftUpdate(BookingDraft):
    """Partial draft update; only the fields sent are applied."""


class DraftOut(BaseModel):
    id: str
    scooter_id: int
    scooter_name: str
    hourly_rate: float
    fields: BookingDraft
    quote: QuoteResponse
    submitting: bool = False


class BookingOut(BaseModel):
    id: int
    booking_reference: str
    user_id: int
    scooter_id: int
    pickup_date: date
    pickup_time: time
    dropoff_date: date
    dropoff_time: time
    pickup_location: str
    dropoff_location: str
    total_amount: float
    total_hours: float
    payment_ref: str
    status: BookingStatus
    created_at: datetime
    updated_at: Optional[datetime] = None
