import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("REDIS_URL", "redis://localhost:6379/15")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("CELERY_BROKER_URL", "memory://")
os.environ.setdefault("CELERY_BACKEND", "cache+memory://")
os.environ["WEBHOOK_URL"] = ""

import pytest
from functools import partial
from datetime import date, time
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import eventure.core.redis as redis_module
from eventure.main import app
from eventure.api.deps import get_payment_gateway
from eventure.db.session import get_db
from eventure.models.base import Base
from eventure.models.user import User
from eventure.models.scooter import Scooter
import eventure.models.booking  # noqa: F401
import eventure.models.audit  # noqa: F401
from eventure.core.security import create_access_token
from eventure.core.enums import UserRole
from eventure.schemas.booking import BookingDraft
from eventure.services.drafts import DraftStore
from eventure.services.listing import ListingReconciler, fetch_catalog, get_listing_reconciler
from eventure.services.payment import GatewayIntent, PaymentHandoff


class FakeRedis:
    """In-memory stand-in for the handful of redis.asyncio calls the service makes."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    async def get(self, key):
        return self.store.get(key)

    async def set(self, key, value, ex=None, nx=False):
        if nx and key in self.store:
            return None
        if ex is not None:
            self.ttls[key] = ex
        if isinstance(value, str):
            value = value.encode()
        self.store[key] = value
        return True

    async def delete(self, *keys):
        removed = 0
        for key in keys:
            if self.store.pop(key, None) is not None:
                removed += 1
        return removed

    async def expire(self, key, seconds):
        self.ttls[key] = seconds
        return key in self.store

    async def incr(self, key):
        value = int(self.store.get(key, b"0")) + 1
        self.store[key] = str(value).encode()
        return value

    async def ping(self):
        return True

    async def aclose(self):
        pass


class FakeGateway:
    def __init__(self):
        self.fail = False
        self.intents = []

    async def create_intent(self, intent, session_id):
        if self.fail:
            raise RuntimeError("gateway widget failed to load")
        self.intents.append((intent, session_id))
        return GatewayIntent(id=f"pi_test_{len(self.intents)}", client_secret="pi_secret")


@pytest.fixture
async def db_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def fake_redis(monkeypatch):
    fake = FakeRedis()
    monkeypatch.setattr(redis_module, "redis", fake)
    return fake


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def drafts(fake_redis):
    return DraftStore(fake_redis)


@pytest.fixture
def handoff(fake_redis, fake_gateway):
    return PaymentHandoff(fake_redis, fake_gateway)


@pytest.fixture
def listing(session_factory):
    return ListingReconciler(fetch=partial(fetch_catalog, session_factory))


@pytest.fixture
def create_user(session_factory):
    async def _create_user(username="rider", role=UserRole.CUSTOMER):
        async with session_factory() as db:
            user = User(username=username, password_hash="not-a-real-hash", role=role)
            db.add(user)
            await db.commit()
            await db.refresh(user)
            return user

    return _create_user


@pytest.fixture
def create_scooter(session_factory):
    async def _create_scooter(name="Ather 450X", price_per_hour=100.0, available=3, **kwargs):
        data = {
            "name": name,
            "model": "450X Gen 3",
            "image_url": "https://example.com/ather.png",
            "price_per_hour": price_per_hour,
            "max_speed": "90 km/h",
            "location": "Koramangala",
            "mileage": "110 km",
            "support": "24x7",
            "owner": "EVenture",
            "available": available,
            "rating": 4.5,
        }
        data.update(kwargs)
        async with session_factory() as db:
            scooter = Scooter(**data)
            db.add(scooter)
            await db.commit()
            await db.refresh(scooter)
            return scooter

    return _create_scooter


@pytest.fixture
def token_for():
    def _token_for(user):
        return {"Authorization": f"Bearer {create_access_token(str(user.id), user.role)}"}

    return _token_for


@pytest.fixture
def complete_draft():
    """A complete 70 minute booking on 2024-01-01."""
    return BookingDraft(
        pickup_date=date(2024, 1, 1),
        pickup_time=time(10, 0),
        dropoff_date=date(2024, 1, 1),
        dropoff_time=time(11, 10),
        pickup_location="Indiranagar Metro",
        dropoff_location="MG Road",
    )


@pytest.fixture
async def test_client(session_factory, fake_redis, fake_gateway, listing):
    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_listing_reconciler] = lambda: listing
    app.dependency_overrides[get_payment_gateway] = lambda: fake_gateway

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


def pytest_configure(config):
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "pricing: marks tests related to pricing"
    )
    config.addinivalue_line(
        "markers", "payments: marks tests related to the payment handoff"
    )
    config.addinivalue_line(
        "markers", "listing: marks tests related to the availability listing"
    )
    config.addinivalue_line(
        "markers", "idempotency: marks tests related to idempotency"
    )
