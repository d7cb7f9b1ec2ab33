from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class ScooterCreate(BaseModel):
    name: str = Field(min_length=1)
    model: str = Field(min_length=1)
    image_url: Optional[str] = None
    price_per_hour: float = Field(ge=0)
    max_speed: Optional[str] = None
    location: str = Field(min_length=1)
    mileage: Optional[str] = None
    support: Optional[str] = None
    owner: str = Field(min_length=1)
    available: int = Field(1, ge=0)
    rating: float = Field(0.0, ge=0, le=5)


class ScooterUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    model: Optional[str] = Field(None, min_length=1)
    image_url: Optional[str] = None
    price_per_hour: Optional[float] = Field(None, ge=0)
    max_speed: Optional[str] = None
    location: Optional[str] = Field(None, min_length=1)
    mileage: Optional[str] = None
    support: Optional[str] = None
    owner: Optional[str] = Field(None, min_length=1)
    available: Optional[int] = Field(None, ge=0)
    rating: Optional[float] = Field(None, ge=0, le=5)


class ScooterOut(BaseModel):
    id: int
    name: str
    model: str
    image_url: Optional[str] = None
    price_per_hour: float
    max_speed: Optional[str] = None
    location: str
    mileage: Optional[str] = None
    support: Optional[str] = None
    owner: str
    available: int
    rating: float
    created_at: datetime
    updated_at: Optional[datetime] = None


class NotificationOut(BaseModel):
    message: str
    type: str


class ListingOut(BaseModel):
    scooters: List[ScooterOut]
    fetched_at: Optional[datetime] = None
    notification: Optional[NotificationOut] = None
