import logging
from celery import Celery
from eventure.core.config import settings

logger = logging.getLogger(__name__)

celery_app = Celery(
    "worker",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_BACKEND,
)
celery_app.conf.task_routes = {"eventure.services.tasks.notify_booking_confirmed": {"queue": "notifications"}}

@celery_app.task(bind=True, max_retries=3)
def notify_booking_confirmed(self, booking_id: int):
    import asyncio
    from eventure.services.tasks_internal import notify_booking_confirmed_async
    
    try:
        asyncio.run(notify_booking_confirmed_async(booking_id))
    except Exception as e:
        retry_kwargs = {"countdown": 2 ** self.request.retries}
        raise self.retry(exc=e, **retry_kwargs)


def enqueue_booking_notification(booking_id: int) -> None:
    if not settings.WEBHOOK_URL:
        return
    try:
        notify_booking_confirmed.delay(booking_id)
    except Exception as e:
        # booking stands; only the notification is lost
        logger.error(f"Could not enqueue notification for booking {booking_id}: {e}")
