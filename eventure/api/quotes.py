"""Quote preview for a scooter and a pickup/drop-off range"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from eventure.db.session import get_db
from eventure.models.scooter import Scooter
from eventure.schemas.booking import BookingDraft
from eventure.schemas.quote import QuoteRequest, QuoteResponse
from eventure.core.auth_utils import get_or_404
from eventure.services.pricing import quote_for_draft

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("/calc", response_model=QuoteResponse)
async def calc_quote(req: QuoteRequest, db: AsyncSession = Depends(get_db)):
    scooter = await get_or_404(db, Scooter, req.scooter_id, "Scooter")

    draft = BookingDraft(
        pickup_date=req.pickup_date,
        pickup_time=req.pickup_time,
        dropoff_date=req.dropoff_date,
        dropoff_time=req.dropoff_time,
    )
    return quote_for_draft(draft, scooter.price_per_hour).to_response()
