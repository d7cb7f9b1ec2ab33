from sqlalchemy import Column, String, ForeignKey, Integer
from sqlalchemy.orm import relationship
from eventure.models.base import BaseModel


class Audit(BaseModel):
    """One row per state-changing action: scooter edits, checkouts, confirmed bookings."""
    __tablename__ = "audits"

    user_id = Column(ForeignKey("users.id"), nullable=False, index=True)
    user = relationship("User", backref="audit_entries")

    action = Column(String(64), nullable=False, index=True)
    scooter_id = Column(Integer, nullable=True)
    payload_hash = Column(String(128), nullable=False)
