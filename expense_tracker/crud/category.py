# expense_tracker/crud/category.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func
from expense_tracker.models.category import Category, Subcategory
from typing import List, Optional
import uuid

async def get_categories_for_household(household_id: uuid.UUID, db: AsyncSession) -> List[Category]:
    result = await db.execute(
        select(Category).where(Category.household_id == household_id).order_by(Category.name)
    )
    return list(result.scalars().all())

async def get_category_by_id(category_id: uuid.UUID, household_id: uuid.UUID, db: AsyncSession) -> Optional[Category]:
    result = await db.execute(
        select(Category).where(Category.id == category_id, Category.household_id == household_id)
    )
    return result.scalar_one_or_none()

async def add_category(category: Category, db: AsyncSession) -> Category:
    db.add(category)
    await db.flush()
    return category

async def rename_category(category: Category, name: str, db: AsyncSession) -> Category:
    category.name = name
    db.add(category)
    await db.flush()
    return category

async def count_subcategories(category_id: uuid.UUID, household_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count(Subcategory.id)).where(
            Subcategory.category_id == category_id,
            Subcategory.household_id == household_id,
        )
    )
    return result.scalar_one()

async def delete_subcategories_by_category_id(category_id: uuid.UUID, household_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(
        delete(Subcategory)
        .where(Subcategory.category_id == category_id, Subcategory.household_id == household_id)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount

async def delete_category_by_id(category_id: uuid.UUID, household_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(
        delete(Category)
        .where(Category.id == category_id, Category.household_id == household_id)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount
