from sqlalchemy import Column, String, Float, Integer, CheckConstraint
from eventure.models.base import BaseModel


class Scooter(BaseModel):
    __tablename__ = "scooters"
    __table_args__ = (
        CheckConstraint("available >= 0", name="ck_scooters_available_non_negative"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_scooters_rating_range"),
        CheckConstraint("price_per_hour >= 0", name="ck_scooters_price_non_negative"),
    )

    name = Column(String(120), nullable=False)
    model = Column(String(120), nullable=False)
    image_url = Column(String(500))
    price_per_hour = Column(Float, nullable=False, default=0.0)
    max_speed = Column(String(40))
    location = Column(String(255), nullable=False)
    mileage = Column(String(40))
    support = Column(String(120))
    owner = Column(String(120), nullable=False)
    available = Column(Integer, nullable=False, default=1)
    rating = Column(Float, nullable=False, default=0.0)
