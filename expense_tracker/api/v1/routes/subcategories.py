# expense_tracker/api/v1/routes/subcategories.py
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import uuid

from expense_tracker.api.deps import get_current_household_id
from expense_tracker.core.database import get_async_session
from expense_tracker.schemas.category import SubcategoryCreate, SubcategoryRead, SubcategoryUpdate
from expense_tracker.services.subcategory import SubcategoryService

router = APIRouter(prefix="/subcategories", tags=["subcategories"])

@router.get("", response_model=List[SubcategoryRead])
async def read_subcategories(
    category_id: Optional[uuid.UUID] = Query(None),
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    return await SubcategoryService(db).list_subcategories(household_id, category_id)

@router.post("", response_model=SubcategoryRead, status_code=status.HTTP_201_CREATED)
async def create_subcategory(
    sub_in: SubcategoryCreate,
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    return await SubcategoryService(db).create_subcategory(household_id, sub_in)

@router.put("/{subcategory_id}", response_model=SubcategoryRead)
async def update_subcategory(
    subcategory_id: str,
    sub_in: SubcategoryUpdate,
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    return await SubcategoryService(db).update_subcategory(subcategory_id, household_id, sub_in)

@router.delete("/{subcategory_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_subcategory(
    subcategory_id: str,
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    await SubcategoryService(db).delete_subcategory(subcategory_id, household_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
