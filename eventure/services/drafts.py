"""Redis-backed storage for in-progress booking drafts."""
import json
import logging
import secrets
from dataclasses import dataclass, field
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from eventure.core.config import settings
from eventure.core.errors import DraftNotFound, ScooterUnavailable
from eventure.models.scooter import Scooter
from eventure.schemas.booking import BookingDraft, DraftOut
from eventure.services.booking_form import BookingFormController

logger = logging.getLogger(__name__)


@dataclass
class DraftRecord:
    id: str
    user_id: int
    scooter_id: int
    scooter_name: str
    hourly_rate: float
    fields: BookingDraft = field(default_factory=BookingDraft)

    def to_json(self) -> str:
        return json.dumps({
            "id": self.id,
            "user_id": self.user_id,
            "scooter_id": self.scooter_id,
            "scooter_name": self.scooter_name,
            "hourly_rate": self.hourly_rate,
            "fields": self.fields.model_dump(mode="json"),
        })

    @classmethod
    def from_json(cls, raw) -> "DraftRecord":
        data = json.loads(raw)
        data["fields"] = BookingDraft.model_validate(data["fields"])
        return cls(**data)


class DraftStore:

    def __init__(self, redis):
        self.redis = redis

    @staticmethod
    def _key(draft_id: str) -> str:
        return f"draft:{draft_id}"

    @staticmethod
    def _submitting_key(draft_id: str) -> str:
        return f"draft:{draft_id}:submitting"

    async def create(self, db: AsyncSession, scooter_id: int, user_id: int) -> DraftRecord:
        res = await db.execute(select(Scooter).where(Scooter.id == scooter_id))
        scooter = res.scalars().first()
        if not scooter:
            raise ScooterUnavailable(f"Scooter with id {scooter_id} not found")
        if scooter.available <= 0:
            raise ScooterUnavailable(f"{scooter.name} is currently unavailable")

        record = DraftRecord(
            id=secrets.token_urlsafe(12),
            user_id=user_id,
            scooter_id=scooter.id,
            scooter_name=scooter.name,
            hourly_rate=scooter.price_per_hour,
        )
        await self.save(record)
        logger.info(f"Created booking draft {record.id} for scooter {scooter.id} by user {user_id}")
        return record

    async def get(self, draft_id: str) -> DraftRecord:
        raw = await self.redis.get(self._key(draft_id))
        if not raw:
            raise DraftNotFound()
        return DraftRecord.from_json(raw)

    async def save(self, record: DraftRecord) -> None:
        await self.redis.set(self._key(record.id), record.to_json(), ex=settings.DRAFT_TTL)

    async def discard(self, draft_id: str) -> None:
        await self.redis.delete(self._key(draft_id), self._submitting_key(draft_id))

    async def begin_submit(self, draft_id: str, session_id: str) -> bool:
        """Mark the draft as submitting. False when another payment already holds it."""
        claimed = await self.redis.set(
            self._submitting_key(draft_id),
            session_id,
            nx=True,
            ex=settings.PAYMENT_SESSION_TTL,
        )
        return bool(claimed)

    async def end_submit(self, draft_id: str) -> None:
        await self.redis.delete(self._submitting_key(draft_id))

    async def is_submitting(self, draft_id: str) -> bool:
        return await self.redis.get(self._submitting_key(draft_id)) is not None

    async def controller(self, record: DraftRecord) -> BookingFormController:
        return BookingFormController(
            draft=record.fields,
            hourly_rate=record.hourly_rate,
            submitting=await self.is_submitting(record.id),
        )


def build_draft_response(record: DraftRecord, controller: BookingFormController) -> DraftOut:
    return DraftOut(
        id=record.id,
        scooter_id=record.scooter_id,
        scooter_name=record.scooter_name,
        hourly_rate=record.hourly_rate,
        fields=controller.draft,
        quote=controller.quote.to_response(),
        submitting=controller.submitting,
    )

