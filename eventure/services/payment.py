"""Hand-off to the external payment gateway.

A payment session is opened for one validated draft. The gateway's hosted
widget then ends in exactly one terminal outcome: ``Succeeded`` with the
gateway's payment reference, or ``Dismissed`` when the customer closes it.
The first outcome recorded for a session wins; later conflicting outcomes
are rejected.
"""
import asyncio
import json
import logging
import secrets
from dataclasses import dataclass, asdict
from typing import Optional, Union

import stripe

from eventure.core.config import settings
from eventure.core.enums import PaymentState
from eventure.core.errors import PaymentAlreadyResolved, PaymentSessionNotFound
from eventure.core.metrics import payment_resolutions
from eventure.schemas.booking import BookingDraft
from eventure.schemas.payment import PaymentIntentRequest, PaymentSessionOut
from eventure.services.pricing import Quote, to_minor_units

logger = logging.getLogger(__name__)

stripe.api_key = settings.STRIPE_API_KEY


@dataclass(frozen=True)
class Succeeded:
    payment_ref: str


@dataclass(frozen=True)
class Dismissed:
    pass


PaymentOutcome = Union[Succeeded, Dismissed]


@dataclass(frozen=True)
class GatewayIntent:
    id: str
    client_secret: Optional[str] = None


class StripeGateway:
    """Creates payment intents that the browser completes in Stripe's hosted UI."""

    async def create_intent(self, intent: PaymentIntentRequest, session_id: str) -> GatewayIntent:
        created = await asyncio.to_thread(
            stripe.PaymentIntent.create,
            amount=intent.amount,
            currency=intent.currency.lower(),
            description=intent.description,
            metadata={"reference": intent.reference, "session_id": session_id},
            automatic_payment_methods={"enabled": True},
        )
        return GatewayIntent(id=created["id"], client_secret=created.get("client_secret"))


@dataclass
class PaymentSession:
    id: str
    draft_id: str
    user_id: int
    scooter_id: int
    draft: BookingDraft
    total_hours: float
    total_amount: float
    hourly_rate: float
    intent: PaymentIntentRequest
    gateway_intent_id: str
    client_secret: Optional[str] = None
    state: PaymentState = PaymentState.PENDING
    payment_ref: Optional[str] = None

    @property
    def quote(self) -> Quote:
        return Quote(
            total_hours=self.total_hours,
            total_amount=self.total_amount,
            hourly_rate=self.hourly_rate,
            valid=True,
        )

    def to_json(self) -> str:
        data = asdict(self)
        data["draft"] = self.draft.model_dump(mode="json")
        data["intent"] = self.intent.model_dump()
        data["state"] = self.state.value
        return json.dumps(data)

    @classmethod
    def from_json(cls, raw) -> "PaymentSession":
        data = json.loads(raw)
        data["draft"] = BookingDraft.model_validate(data["draft"])
        data["intent"] = PaymentIntentRequest.model_validate(data["intent"])
        data["state"] = PaymentState(data["state"])
        return cls(**data)

    def to_response(self) -> PaymentSessionOut:
        return PaymentSessionOut(
            session_id=self.id,
            draft_id=self.draft_id,
            state=self.state,
            amount=self.intent.amount,
            currency=self.intent.currency,
            description=self.intent.description,
            gateway_intent_id=self.gateway_intent_id,
            client_secret=self.client_secret,
            payment_ref=self.payment_ref,
        )


def build_intent(quote: Quote, scooter_name: str, reference: str) -> PaymentIntentRequest:
    return PaymentIntentRequest(
        amount=to_minor_units(quote.total_amount),
        currency=settings.PAYMENT_CURRENCY,
        description=f"EV scooter booking: {scooter_name}",
        reference=reference,
    )


def _encode_outcome(outcome: PaymentOutcome) -> str:
    if isinstance(outcome, Succeeded):
        return json.dumps({"state": PaymentState.SUCCEEDED.value, "payment_ref": outcome.payment_ref})
    return json.dumps({"state": PaymentState.DISMISSED.value})


def _decode_outcome(raw) -> PaymentOutcome:
    data = json.loads(raw)
    if data["state"] == PaymentState.SUCCEEDED.value:
        return Succeeded(data["payment_ref"])
    return Dismissed()


class PaymentHandoff:

    def __init__(self, redis, gateway=None):
        self.redis = redis
        self.gateway = gateway or StripeGateway()

    @staticmethod
    def _key(session_id: str) -> str:
        return f"payment:{session_id}"

    @staticmethod
    def _resolution_key(session_id: str) -> str:
        return f"payment:{session_id}:resolution"

    @staticmethod
    def new_session_id() -> str:
        return secrets.token_urlsafe(16)

    async def initiate_payment(
        self,
        session_id: str,
        draft_id: str,
        draft: BookingDraft,
        quote: Quote,
        scooter_id: int,
        scooter_name: str,
        user_id: int,
    ) -> PaymentSession:
        intent = build_intent(quote, scooter_name, reference=f"draft-{draft_id}")
        gateway_intent = await self.gateway.create_intent(intent, session_id)

        session = PaymentSession(
            id=session_id,
            draft_id=draft_id,
            user_id=user_id,
            scooter_id=scooter_id,
            draft=draft,
            total_hours=quote.total_hours,
            total_amount=quote.total_amount,
            hourly_rate=quote.hourly_rate,
            intent=intent,
            gateway_intent_id=gateway_intent.id,
            client_secret=gateway_intent.client_secret,
        )
        await self.save(session)
        logger.info(
            f"Opened payment session {session_id} for draft {draft_id}: "
            f"{intent.amount} {intent.currency} (intent {gateway_intent.id})"
        )
        return session

    async def get_session(self, session_id: str) -> PaymentSession:
        raw = await self.redis.get(self._key(session_id))
        if not raw:
            raise PaymentSessionNotFound()
        return PaymentSession.from_json(raw)

    async def save(self, session: PaymentSession) -> None:
        await self.redis.set(self._key(session.id), session.to_json(), ex=settings.PAYMENT_SESSION_TTL)

    async def resolve(self, session_id: str, outcome: PaymentOutcome) -> PaymentSession:
        """Record the terminal outcome of a session.

        Only the first outcome is accepted. Repeating the same successful
        payment reference returns the session unchanged so the caller can
        retry confirmation; anything else raises PaymentAlreadyResolved.
        """
        session = await self.get_session(session_id)

        claimed = await self.redis.set(
            self._resolution_key(session_id),
            _encode_outcome(outcome),
            nx=True,
            ex=settings.PAYMENT_SESSION_TTL,
        )
        if not claimed:
            existing = _decode_outcome(await self.redis.get(self._resolution_key(session_id)))
            if isinstance(outcome, Succeeded) and existing == outcome:
                logger.info(f"Replaying success for payment session {session_id}")
                return session
            logger.warning(f"Rejected second resolution for payment session {session_id}: {outcome}")
            raise PaymentAlreadyResolved()

        if isinstance(outcome, Succeeded):
            session.state = PaymentState.SUCCEEDED
            session.payment_ref = outcome.payment_ref
        else:
            session.state = PaymentState.DISMISSED
        await self.save(session)

        payment_resolutions.labels(outcome=session.state.value).inc()
        logger.info(f"Payment session {session_id} resolved as {session.state}")
        return session

    async def find_session_for_intent(self, session_id: Optional[str], intent_id: str) -> Optional[PaymentSession]:
        if not session_id:
            return None
        try:
            session = await self.get_session(session_id)
        except PaymentSessionNotFound:
            return None
        return session if session.gateway_intent_id == intent_id else None
