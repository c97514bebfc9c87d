# expense_tracker/schemas/expense.py
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
import uuid

class ExpenseBase(BaseModel):
    description: str = Field(..., min_length=1, description="What the money was spent on")
    amount: float = Field(..., gt=0, description="Amount of the expense")
    category: str = Field(..., min_length=1, max_length=255)
    subcategory: Optional[str] = Field(None, max_length=255)
    expense_datetime: datetime

class ExpenseCreate(ExpenseBase):
    pass

class ExpenseUpdate(BaseModel):
    description: Optional[str] = Field(None, min_length=1)
    amount: Optional[float] = Field(None, gt=0)
    category: Optional[str] = Field(None, min_length=1, max_length=255)
    subcategory: Optional[str] = Field(None, max_length=255)
    expense_datetime: Optional[datetime] = None

class ExpenseRead(ExpenseBase):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    household_id: uuid.UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class ExpenseFilters(BaseModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    amount: Optional[float] = None
    description: Optional[str] = None
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)

class ExpensePage(BaseModel):
    page: int
    total_pages: int
    total_items: int
    expenses: List[ExpenseRead]

class ExpenseUploadResult(BaseModel):
    message: str
    expense: ExpenseRead
