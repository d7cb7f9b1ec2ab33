"""Authentication and authorization utilities"""
from fastapi import HTTPException
from typing import Optional, Type, TypeVar
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from eventure.core.enums import UserRole

ModelT = TypeVar("ModelT")


def is_admin(current_user) -> bool:
    return current_user.role == UserRole.ADMIN


def check_owner(owner_id: int, current_user, resource_name: str = "Resource") -> None:
    """Customers only see their own drafts, payments and bookings; admins see all."""
    if not is_admin(current_user) and owner_id != int(current_user.id):
        raise HTTPException(
            status_code=403,
            detail=f"Forbidden: You can only access your own {resource_name.lower()}s"
        )


def filter_by_user(query, model, current_user):

    if not is_admin(current_user):
        return query.where(model.user_id == int(current_user.id))
    return query


def check_not_found(item, resource_name: str = "Resource", resource_id: Optional[int] = None) -> None:

    if not item:
        if resource_id:
            raise HTTPException(
                status_code=404,
                detail=f"{resource_name} with id {resource_id} not found"
            )
        raise HTTPException(status_code=404, detail=f"{resource_name} not found")


async def get_or_404(db: AsyncSession, model: Type[ModelT], item_id: int, resource_name: str) -> ModelT:
    res = await db.execute(select(model).where(model.id == item_id))
    item = res.scalars().first()
    check_not_found(item, resource_name, item_id)
    return item
