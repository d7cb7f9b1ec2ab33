import logging
from fastapi import APIRouter, Depends, HTTPException
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.exc import IntegrityError
from sqlalchemy.future import select
from sqlalchemy.ext.asyncio import AsyncSession
from eventure.schemas.auth import LoginIn, TokenOut, UserOut
from eventure.models.user import User
from eventure.db.session import get_db
from eventure.core.security import create_access_token, get_current_user, hash_password, verify_password
from eventure.core.audit_log import log_audit
from eventure.core.enums import AuditAction, UserRole

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=TokenOut)
async def register(payload: LoginIn, db: AsyncSession = Depends(get_db)):
    """Sign up a rider. Fleet admins are provisioned with create_admin.py instead."""
    res = await db.execute(select(User).where(User.username == payload.username))
    if res.scalars().first():
        raise HTTPException(status_code=400, detail="Username already taken")

    rider = User(username=payload.username, password_hash=hash_password(payload.password), role=UserRole.CUSTOMER)
    db.add(rider)
    try:
        await db.flush()
        await log_audit(db, int(rider.id), AuditAction.REGISTER, {"username": payload.username})
        await db.commit()
    except IntegrityError:
        await db.rollback()
        raise HTTPException(status_code=400, detail="Username already taken")

    logger.info(f"Registered rider {rider.id} ({rider.username})")
    return {"access_token": create_access_token(str(rider.id), rider.role)}


@router.post("/login", response_model=TokenOut)
async def login(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    username = form_data.username.strip().lower()
    res = await db.execute(select(User).where(User.username == username))
    user = res.scalars().first()
    if not user or not verify_password(form_data.password, user.password_hash):
        raise HTTPException(status_code=400, detail="Invalid credentials")
    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account disabled")

    await log_audit(db, int(user.id), AuditAction.LOGIN, {"username": username})
    await db.commit()

    return {"access_token": create_access_token(str(user.id), user.role)}


@router.get("/me", response_model=UserOut)
async def me(current_user=Depends(get_current_user)):
    return UserOut(id=current_user.id, username=current_user.username, role=current_user.role)
