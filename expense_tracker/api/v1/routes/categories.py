# expense_tracker/api/v1/routes/categories.py
from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List
import uuid

from expense_tracker.api.deps import get_current_household_id
from expense_tracker.core.database import get_async_session
from expense_tracker.schemas.category import CategoryCreate, CategoryHierarchy, CategoryRead, CategoryUpdate
from expense_tracker.services.category import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])

@router.get("", response_model=List[CategoryRead])
async def read_categories(
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    return await CategoryService(db).list_categories(household_id)

@router.get("/hierarchy", response_model=CategoryHierarchy)
async def read_category_hierarchy(
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    return await CategoryService(db).get_category_hierarchy(household_id)

@router.post("", response_model=CategoryRead, status_code=status.HTTP_201_CREATED)
async def create_category(
    cat_in: CategoryCreate,
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    return await CategoryService(db).create_category(household_id, cat_in)

@router.put("/{category_id}", response_model=CategoryRead)
async def update_category_endpoint(
    category_id: str,
    cat_in: CategoryUpdate,
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    return await CategoryService(db).update_category(category_id, household_id, cat_in.name)

@router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_category_endpoint(
    category_id: str,
    force: bool = Query(False, description="Also delete the category's subcategories"),
    household_id: uuid.UUID = Depends(get_current_household_id),
    db: AsyncSession = Depends(get_async_session),
):
    await CategoryService(db).delete_category(category_id, household_id, force=force)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
