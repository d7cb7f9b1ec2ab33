import logging
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventure.db.session import get_db
from eventure.models.scooter import Scooter
from eventure.schemas.scooter import ScooterCreate, ScooterUpdate, ScooterOut, ListingOut
from eventure.core.security import get_current_user, require_admin
from eventure.core.audit_decorator import audit_log
from eventure.core.rate_limit import check_rate_limit
from eventure.core.auth_utils import get_or_404
from eventure.core.enums import AuditAction
from eventure.core.response_builders import build_scooter_response
from eventure.services.listing import ListingReconciler, get_listing_reconciler

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/scooters", tags=["scooters"])


@router.get("/", response_model=ListingOut)
async def list_scooters(
    listing: ListingReconciler = Depends(get_listing_reconciler),
    current_user=Depends(get_current_user)
):
    await listing.ensure_loaded()
    return listing.snapshot()


@router.get("/{scooter_id}", response_model=ScooterOut)
async def get_scooter(
    scooter_id: int,
    db: AsyncSession = Depends(get_db),
    current_user=Depends(get_current_user)
):
    scooter = await get_or_404(db, Scooter, scooter_id, "Scooter")
    return build_scooter_response(scooter)


@router.post("/", response_model=ScooterOut)
@audit_log(AuditAction.CREATE_SCOOTER)
async def create_scooter(
    payload: ScooterCreate,
    db: AsyncSession = Depends(get_db),
    listing: ListingReconciler = Depends(get_listing_reconciler),
    current_user=Depends(require_admin)
):
    await check_rate_limit(int(current_user.id))

    scooter = Scooter(**payload.model_dump())
    db.add(scooter)
    await db.commit()
    await db.refresh(scooter)

    out = build_scooter_response(scooter)
    listing.upsert(out)
    logger.info(f"Scooter {scooter.id} ({scooter.name}) added by admin {current_user.id}")
    return out


@router.put("/{scooter_id}", response_model=ScooterOut)
@audit_log(AuditAction.UPDATE_SCOOTER)
async def update_scooter(
    scooter_id: int,
    payload: ScooterUpdate,
    db: AsyncSession = Depends(get_db),
    listing: ListingReconciler = Depends(get_listing_reconciler),
    current_user=Depends(require_admin)
):
    await check_rate_limit(int(current_user.id))

    scooter = await get_or_404(db, Scooter, scooter_id, "Scooter")

    for field, value in payload.model_dump(exclude_unset=True).items():
        if value is None:
            raise HTTPException(status_code=422, detail=f"{field} cannot be null")
        setattr(scooter, field, value)

    db.add(scooter)
    await db.commit()
    await db.refresh(scooter)

    out = build_scooter_response(scooter)
    listing.upsert(out)
    return out


@router.delete("/{scooter_id}")
@audit_log(AuditAction.DELETE_SCOOTER)
async def delete_scooter(
    scooter_id: int,
    db: AsyncSession = Depends(get_db),
    listing: ListingReconciler = Depends(get_listing_reconciler),
    current_user=Depends(require_admin)
):
    await check_rate_limit(int(current_user.id))

    scooter = await get_or_404(db, Scooter, scooter_id, "Scooter")

    try:
        await db.delete(scooter)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=409, detail="Scooter has bookings and cannot be deleted")

    listing.remove(scooter_id)
    return {"deleted": True}
