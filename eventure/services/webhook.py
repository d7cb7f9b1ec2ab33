import httpx
import asyncio
import logging
from eventure.core.config import settings
from eventure.core.metrics import webhook_deliveries

logger = logging.getLogger(__name__)


async def send_webhook(payload: dict, retries: int | None = None) -> bool:

    if not settings.WEBHOOK_URL:
        logger.debug("WEBHOOK_URL not configured, skipping booking notification")
        return False

    if retries is None:
        retries = settings.WEBHOOK_RETRIES
    
    backoff = 1.0
    reference = payload.get("booking_reference")
    
    for attempt in range(1, retries + 1):
        try:
            async with httpx.AsyncClient(timeout=settings.WEBHOOK_TIMEOUT) as client:
                response = await client.post(settings.WEBHOOK_URL, json=payload)
                
                if 200 <= response.status_code < 300:
                    webhook_deliveries.labels(status="success").inc()
                    logger.info(f"Webhook delivery succeeded for booking {reference}")
                    return True
                else:
                    webhook_deliveries.labels(status="failed").inc()
                    logger.warning(
                        f"Webhook delivery failed (attempt {attempt}/{retries}): "
                        f"Status {response.status_code} for booking {reference}"
                    )
        except httpx.TimeoutException:
            webhook_deliveries.labels(status="timeout").inc()
            logger.warning(
                f"Webhook timeout (attempt {attempt}/{retries}) for booking {reference}"
            )
        except httpx.HTTPError as e:
            webhook_deliveries.labels(status="error").inc()
            logger.warning(
                f"Webhook delivery error (attempt {attempt}/{retries}): {e} "
                f"for booking {reference}"
            )
        
        if attempt < retries:
            await asyncio.sleep(backoff)
            backoff *= 2.0
    
    logger.error(f"Webhook delivery failed after {retries} attempts for booking {reference}")
    return False
