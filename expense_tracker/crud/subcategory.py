# expense_tracker/crud/subcategory.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from expense_tracker.models.category import Subcategory
from typing import List, Optional
import uuid

async def get_subcategories_for_household(
    household_id: uuid.UUID,
    db: AsyncSession,
    category_id: Optional[uuid.UUID] = None,
) -> List[Subcategory]:
    query = select(Subcategory).where(Subcategory.household_id == household_id)
    if category_id is not None:
        query = query.where(Subcategory.category_id == category_id)
    result = await db.execute(query.order_by(Subcategory.name))
    return list(result.scalars().all())

async def get_subcategory_by_id(subcategory_id: uuid.UUID, household_id: uuid.UUID, db: AsyncSession) -> Optional[Subcategory]:
    result = await db.execute(
        select(Subcategory).where(Subcategory.id == subcategory_id, Subcategory.household_id == household_id)
    )
    return result.scalar_one_or_none()

async def add_subcategory(subcategory: Subcategory, db: AsyncSession) -> Subcategory:
    db.add(subcategory)
    await db.flush()
    return subcategory

async def update_subcategory(subcategory: Subcategory, fields: dict, db: AsyncSession) -> Subcategory:
    for field, value in fields.items():
        setattr(subcategory, field, value)
    db.add(subcategory)
    await db.flush()
    return subcategory

async def delete_subcategory(subcategory: Subcategory, db: AsyncSession) -> None:
    await db.delete(subcategory)
    await db.flush()
