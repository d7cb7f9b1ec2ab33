"""In-memory scooter availability listing kept in sync by polling.

Each successful fetch replaces the whole listing. Snapshots are ordered by
the time their fetch started: a slow fetch that started before the current
snapshot is dropped. Optimistic local edits (a booking's decrement, admin
changes) do not move that timestamp, so the next poll may overwrite them.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional

from sqlalchemy.future import select

from eventure.core.config import settings
from eventure.core.enums import NotificationType
from eventure.core.errors import AvailabilityUpdateFailed, CatalogFetchFailed
from eventure.core.metrics import catalog_refreshes, listed_scooters
from eventure.core.response_builders import build_scooter_response_list
from eventure.db.session import AsyncSessionLocal
from eventure.models.scooter import Scooter
from eventure.schemas.scooter import ListingOut, NotificationOut, ScooterOut

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Notification:
    message: str
    type: NotificationType
    raised_at: float


async def fetch_catalog(session_factory=AsyncSessionLocal) -> List[ScooterOut]:
    try:
        async with session_factory() as db:
            res = await db.execute(select(Scooter).order_by(Scooter.created_at.desc(), Scooter.id.desc()))
            return build_scooter_response_list(res.scalars().all())
    except Exception as e:
        raise CatalogFetchFailed(f"Failed to load scooters: {e}") from e


class ListingReconciler:

    def __init__(
        self,
        fetch: Callable[[], Awaitable[List[ScooterOut]]] = fetch_catalog,
        interval: float = settings.LISTING_POLL_INTERVAL,
        notification_ttl: float = settings.NOTIFICATION_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._fetch = fetch
        self.interval = interval
        self.notification_ttl = notification_ttl
        self._clock = clock
        self._scooters: List[ScooterOut] = []
        self.fetched_at: Optional[datetime] = None
        self._notification: Optional[Notification] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def scooters(self) -> List[ScooterOut]:
        return list(self._scooters)

    @property
    def notification(self) -> Optional[Notification]:
        if self._notification is None:
            return None
        if self._clock() - self._notification.raised_at > self.notification_ttl:
            self._notification = None
        return self._notification

    def notify(self, message: str, type: NotificationType = NotificationType.ERROR) -> None:
        self._notification = Notification(message=message, type=type, raised_at=self._clock())

    async def refresh(self) -> bool:
        """Re-fetch the catalog. False when the listing was left unchanged."""
        started_at = datetime.now(timezone.utc)
        try:
            scooters = await self._fetch()
        except Exception as e:
            catalog_refreshes.labels(status="error").inc()
            error = e if isinstance(e, CatalogFetchFailed) else CatalogFetchFailed(f"Failed to load scooters: {e}")
            logger.error(f"Catalog refresh failed, keeping {len(self._scooters)} listed scooters: {e}")
            self.notify(error.message)
            return False

        if self.fetched_at is not None and started_at < self.fetched_at:
            catalog_refreshes.labels(status="stale").inc()
            logger.debug("Discarding catalog snapshot older than the current listing")
            return False

        self._scooters = list(scooters)
        self.fetched_at = started_at
        catalog_refreshes.labels(status="success").inc()
        listed_scooters.set(len(self._scooters))
        return True

    async def ensure_loaded(self) -> None:
        if self.fetched_at is None:
            await self.refresh()

    def snapshot(self) -> ListingOut:
        notification = self.notification
        return ListingOut(
            scooters=self.scooters,
            fetched_at=self.fetched_at,
            notification=NotificationOut(message=notification.message, type=str(notification.type))
            if notification else None,
        )

    def apply_decrement(self, scooter_id: int, available: Optional[int] = None) -> bool:
        for i, scooter in enumerate(self._scooters):
            if scooter.id == scooter_id:
                remaining = available if available is not None else max(scooter.available - 1, 0)
                self._scooters[i] = scooter.model_copy(update={"available": remaining})
                return True

        error = AvailabilityUpdateFailed(f"Scooter {scooter_id} is not in the local listing")
        logger.warning(f"{error.message}; it will appear on the next refresh")
        return False

    def upsert(self, scooter: ScooterOut) -> None:
        for i, existing in enumerate(self._scooters):
            if existing.id == scooter.id:
                self._scooters[i] = scooter
                return
        self._scooters.insert(0, scooter)

    def remove(self, scooter_id: int) -> None:
        self._scooters = [s for s in self._scooters if s.id != scooter_id]

    async def _poll(self) -> None:
        while True:
            await asyncio.sleep(self.interval)
            logger.debug("Polling for scooter changes...")
            await self.refresh()

    async def start(self) -> None:
        await self.refresh()
        if self._task is None:
            self._task = asyncio.create_task(self._poll())
            logger.info(f"Listing reconciler polling every {self.interval}s")

    async def stop(self) -> None:
        if self._task is not None:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None


listing_reconciler = ListingReconciler()


def get_listing_reconciler() -> ListingReconciler:
    return listing_reconciler
