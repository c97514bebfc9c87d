# expense_tracker/crud/expense.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from expense_tracker.models.expense import Expense
from expense_tracker.schemas.expense import ExpenseFilters
from typing import List, Optional, Tuple
import uuid

def _expense_conditions(household_id: uuid.UUID, filters: ExpenseFilters):
    conditions = [Expense.household_id == household_id]
    if filters.start_date:
        conditions.append(Expense.expense_datetime >= filters.start_date)
    if filters.end_date:
        conditions.append(Expense.expense_datetime <= filters.end_date)
    if filters.category:
        conditions.append(Expense.category == filters.category)
    if filters.subcategory:
        conditions.append(Expense.subcategory == filters.subcategory)
    if filters.amount is not None:
        conditions.append(Expense.amount == filters.amount)
    if filters.description:
        conditions.append(Expense.description.ilike(f"%{filters.description}%"))
    return conditions

async def get_expenses_page(
    household_id: uuid.UUID,
    filters: ExpenseFilters,
    db: AsyncSession,
) -> Tuple[List[Expense], int]:
    conditions = _expense_conditions(household_id, filters)
    offset = (filters.page - 1) * filters.limit

    result = await db.execute(
        select(Expense)
        .where(*conditions)
        .order_by(Expense.expense_datetime.desc(), Expense.created_at.desc())
        .limit(filters.limit)
        .offset(offset)
    )
    count_result = await db.execute(select(func.count(Expense.id)).where(*conditions))
    return list(result.scalars().all()), count_result.scalar_one()

async def get_expense_by_id(expense_id: uuid.UUID, household_id: uuid.UUID, db: AsyncSession) -> Optional[Expense]:
    result = await db.execute(
        select(Expense).where(Expense.id == expense_id, Expense.household_id == household_id)
    )
    return result.scalar_one_or_none()

async def add_expense(expense: Expense, db: AsyncSession) -> Expense:
    db.add(expense)
    await db.flush()
    return expense

async def update_expense(expense: Expense, fields: dict, db: AsyncSession) -> Expense:
    for field, value in fields.items():
        setattr(expense, field, value)
    db.add(expense)
    await db.flush()
    return expense

async def delete_expense(expense: Expense, db: AsyncSession) -> None:
    await db.delete(expense)
    await db.flush()
