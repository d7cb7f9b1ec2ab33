from pydantic import BaseModel, Field
from typing import Optional
from eventure.core.enums import PaymentState
from eventure.schemas.booking import BookingOut


class PaymentIntentRequest(BaseModel):
    amount: int = Field(gt=0, description="Amount in minor currency units")
    currency: str
    description: str
    reference: str


class PaymentSessionOut(BaseModel):
    session_id: str
    draft_id: str
    state: PaymentState
    amount: int
    currency: str
    description: str
    gateway_intent_id: str
    client_secret: Optional[str] = None
    payment_ref: Optional[str] = None


class PaymentSuccessIn(BaseModel):
    payment_ref: str = Field(min_length=1)


class PaymentResultOut(BaseModel):
    session: PaymentSessionOut
    booking: Optional[BookingOut] = None
    message: str
