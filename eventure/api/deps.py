from fastapi import Depends
from eventure.core.redis import get_redis
from eventure.services.drafts import DraftStore
from eventure.services.payment import PaymentHandoff, StripeGateway


def get_draft_store() -> DraftStore:
    return DraftStore(get_redis())


def get_payment_gateway() -> StripeGateway:
    return StripeGateway()


def get_payment_handoff(gateway=Depends(get_payment_gateway)) -> PaymentHandoff:
    return PaymentHandoff(get_redis(), gateway)
