from datetime import date, time
from typing import Optional
from pydantic import BaseModel, field_validator


class QuoteRequest(BaseModel):
    scooter_id: int
    pickup_date: Optional[date] = None
    pickup_time: Optional[time] = None
    dropoff_date: Optional[date] = None
    dropoff_time: Optional[time] = None

    @field_validator("pickup_date", "pickup_time", "dropoff_date", "dropoff_time", mode="before")
    @classmethod
    def blank_as_missing(cls, v):
        return None if v == "" else v


class QuoteResponse(BaseModel):
    total_hours: float
    total_amount: float
    total_amount_display: str
    hourly_rate: float
    valid: bool
    payable: bool
