# expense_tracker/api/v1/routes/expenses.py
from fastapi import APIRouter, Depends, File, Query, Response, UploadFile, status
from typing import Annotated
from sqlalchemy.ext.asyncio import AsyncSession
import uuid

from expense_tracker.api.deps import get_ai_client, get_current_household_id
from expense_tracker.core.database import get_async_session
from expense_tracker.schemas.expense import (
    ExpenseCreate,
    ExpenseFilters,
    ExpensePage,
    ExpenseRead,
    ExpenseUpdate,
    ExpenseUploadResult,
)
from expense_tracker.services.expense import ExpenseService
from expense_tracker.services.ingestion import AIClient, ExpenseIngestionService

router = APIRouter(prefix="/expenses", tags=["expenses"])

@router.get("", response_model=ExpensePage)
async def read_expenses(
    filters: Annotated[ExpenseFilters, Query()],
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    """
    List the household's expenses, newest first.
    Filters: start_date, end_date, category, subcategory, amount, description (substring).
    """
    return await ExpenseService(db).get_expenses(household_id, filters)

@router.post("", response_model=ExpenseRead, status_code=status.HTTP_201_CREATED)
async def create_expense(
    ex_in: ExpenseCreate,
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    return await ExpenseService(db).create_expense(household_id, ex_in)

@router.post("/upload", response_model=ExpenseUploadResult)
async def upload_expense(
    file: UploadFile = File(...),
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
    ai_client: AIClient = Depends(get_ai_client),
):
    """Create an expense from a receipt image or a voice memo"""
    content = await file.read()
    expense = await ExpenseIngestionService(db, ai_client).ingest(
        household_id, file.filename or "upload", file.content_type, content
    )
    return {"message": "Expense logged successfully.", "expense": expense}

@router.get("/{expense_id}", response_model=ExpenseRead)
async def read_expense(
    expense_id: str,
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    return await ExpenseService(db).get_expense(expense_id, household_id)

@router.put("/{expense_id}", response_model=ExpenseRead)
async def update_expense(
    expense_id: str,
    ex_in: ExpenseUpdate,
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    return await ExpenseService(db).update_expense(expense_id, household_id, ex_in)

@router.delete("/{expense_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_expense(
    expense_id: str,
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    await ExpenseService(db).delete_expense(expense_id, household_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
