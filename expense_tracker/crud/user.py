# expense_tracker/crud/user.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
from expense_tracker.models.user import User
from typing import Optional
import uuid

# Repository functions only flush; the calling service owns the transaction.

async def get_user_by_id(user_id: uuid.UUID, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()

async def get_user_by_auth_provider_id(auth_provider_id: str, db: AsyncSession) -> Optional[User]:
    result = await db.execute(select(User).where(User.auth_provider_id == auth_provider_id))
    return result.scalar_one_or_none()

async def add_user(user: User, db: AsyncSession) -> User:
    db.add(user)
    await db.flush()
    return user

async def update_user_fields(user: User, fields: dict, db: AsyncSession) -> User:
    for field, value in fields.items():
        setattr(user, field, value)
    db.add(user)
    await db.flush()
    return user

async def delete_user_by_id(user_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(delete(User).where(User.id == user_id))
    return result.rowcount
