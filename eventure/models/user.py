from sqlalchemy import Column, String, Enum, Boolean
from eventure.models.base import BaseModel
from eventure.core.enums import UserRole


class User(BaseModel):
    """A rider (customer) or a fleet admin. Admins are only created with create_admin.py."""
    __tablename__ = "users"
    username = Column(String(64), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.CUSTOMER)
    is_active = Column(Boolean, nullable=False, default=True)
