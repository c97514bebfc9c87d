# expense_tracker/services/expense.py
import logging
import math
import uuid

from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker.core.db_utils import parse_uuid, transaction
from expense_tracker.core.errors import BadRequestError, NotFoundError
from expense_tracker.crud import expense as expense_crud
from expense_tracker.models.expense import Expense
from expense_tracker.schemas.expense import ExpenseCreate, ExpenseFilters, ExpensePage, ExpenseRead, ExpenseUpdate

logger = logging.getLogger(__name__)


class ExpenseService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_expenses(self, household_id: uuid.UUID, filters: ExpenseFilters) -> ExpensePage:
        if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
            raise BadRequestError("start_date must not be after end_date", fields=["start_date", "end_date"])

        expenses, total_items = await expense_crud.get_expenses_page(household_id, filters, self.db)
        logger.info(f"Fetched {len(expenses)} of {total_items} expenses for household {household_id}")
        return ExpensePage(
            page=filters.page,
            total_pages=math.ceil(total_items / filters.limit),
            total_items=total_items,
            expenses=[ExpenseRead.model_validate(e) for e in expenses],
        )

    async def get_expense(self, expense_id, household_id: uuid.UUID) -> Expense:
        expense = await expense_crud.get_expense_by_id(parse_uuid(expense_id, "expense_id"), household_id, self.db)
        if expense is None:
            raise NotFoundError("Expense not found")
        return expense

    async def create_expense(self, household_id: uuid.UUID, ex_in: ExpenseCreate) -> Expense:
        async with transaction(self.db, "Error creating expense"):
            expense = await expense_crud.add_expense(
                Expense(**ex_in.model_dump(), household_id=household_id), self.db
            )
        logger.info(f"Created expense {expense.id} ({expense.amount}) in household {household_id}")
        return expense

    async def update_expense(self, expense_id, household_id: uuid.UUID, ex_in: ExpenseUpdate) -> Expense:
        expense_id = parse_uuid(expense_id, "expense_id")
        fields = ex_in.model_dump(exclude_unset=True)
        for required in ("description", "amount", "category", "expense_datetime"):
            if required in fields and fields[required] is None:
                raise BadRequestError(f"Invalid expense: {required} cannot be empty", fields=[required])

        async with transaction(self.db, "Error updating expense"):
            expense = await expense_crud.get_expense_by_id(expense_id, household_id, self.db)
            if expense is None:
                logger.warning(f"Expense {expense_id} not found in household {household_id}")
                raise NotFoundError("Expense not found")
            await expense_crud.update_expense(expense, fields, self.db)

        logger.info(f"Updated expense {expense_id}")
        return expense

    async def delete_expense(self, expense_id, household_id: uuid.UUID) -> None:
        expense_id = parse_uuid(expense_id, "expense_id")
        async with transaction(self.db, "Error deleting expense"):
            expense = await expense_crud.get_expense_by_id(expense_id, household_id, self.db)
            if expense is None:
                logger.warning(f"Expense {expense_id} not found in household {household_id}")
                raise NotFoundError("Expense not found")
            await expense_crud.delete_expense(expense, self.db)
        logger.info(f"Deleted expense {expense_id}")
