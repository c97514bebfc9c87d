# expense_tracker/api/v1/routes/users.py
from typing import List

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker.api.deps import get_current_user, get_token_subject
from expense_tracker.core.database import get_async_session
from expense_tracker.core.errors import ForbiddenError
from expense_tracker.models.user import User
from expense_tracker.schemas.household import HouseholdRead
from expense_tracker.schemas.user import UserCreate, UserRead, UserRegistrationResult, UserUpdate
from expense_tracker.services.household import HouseholdService
from expense_tracker.services.user import UserService
from expense_tracker.services.user_household import UserHouseholdTransactionCoordinator, default_household_name

router = APIRouter(prefix="/users", tags=["User Management"])

@router.post("", response_model=UserRegistrationResult, status_code=status.HTTP_201_CREATED)
async def register_user(
    user_in: UserCreate,
    subject: str = Depends(get_token_subject),
    db: AsyncSession = Depends(get_async_session),
):
    """Register the authenticated identity together with its first household"""
    if user_in.auth_provider_id != subject:
        raise ForbiddenError("auth_provider_id does not match the authenticated identity")

    coordinator = UserHouseholdTransactionCoordinator(db)
    user, household = await coordinator.create_user_with_household(user_in, default_household_name(user_in.name))
    return UserRegistrationResult(
        user=UserRead.model_validate(user),
        household=HouseholdRead.model_validate(household),
    )

# 1) GET /users/me
@router.get("/me", response_model=UserRead)
async def read_own_profile(user: User = Depends(get_current_user)):
    """Get current user's profile"""
    return user

# 2) PUT /users/me
@router.put("/me", response_model=UserRead)
async def update_own_profile(
    user_update: UserUpdate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Update current user's name or email"""
    return await UserService(db).update_profile(user, user_update)

# 3) DELETE /users/me
@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_own_profile(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Delete current user's account; owned households are handed over or removed"""
    await UserService(db).delete_account(user.id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/me/households", response_model=List[HouseholdRead])
async def read_own_households(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    return await HouseholdService(db).get_user_households(user.id)
