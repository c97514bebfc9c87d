# expense_tracker/api/v1/routes/households.py
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker.api.deps import get_current_user
from expense_tracker.core.database import get_async_session
from expense_tracker.models.user import User
from expense_tracker.schemas.household import (
    HouseholdCreate,
    HouseholdMemberRead,
    HouseholdRead,
    InviteRequest,
    MessageResponse,
)
from expense_tracker.services.household import HouseholdService

router = APIRouter(prefix="/households", tags=["Households"])

@router.post("", response_model=HouseholdRead, status_code=status.HTTP_201_CREATED)
async def create_household(
    household_in: HouseholdCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    return await HouseholdService(db).create_household(household_in.name, user.id)

@router.post("/{household_id}/invite", response_model=MessageResponse)
async def invite_member(
    household_id: str,
    invite: InviteRequest,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    await HouseholdService(db).invite_member(household_id, invite.invited_user_id, user.id)
    return {"message": "Invitation sent successfully"}

@router.post("/{household_id}/accept", response_model=MessageResponse)
async def accept_invitation(
    household_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    await HouseholdService(db).accept_invitation(household_id, user.id)
    return {"message": "Invitation accepted successfully"}

@router.post("/{household_id}/reject", response_model=MessageResponse)
async def reject_invitation(
    household_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    await HouseholdService(db).reject_invitation(household_id, user.id)
    return {"message": "Invitation rejected successfully"}

@router.post("/{household_id}/leave", response_model=MessageResponse)
async def leave_household(
    household_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    """Leave a household as a regular member; owners leave by deleting their account"""
    await HouseholdService(db).leave_household(household_id, user.id)
    return {"message": "Left household successfully"}

@router.get("/{household_id}/members", response_model=List[HouseholdMemberRead])
async def get_household_members(
    household_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    return await HouseholdService(db).get_household_members(household_id, requester_id=user.id)

@router.delete("/{household_id}/members/{user_id}", response_model=MessageResponse)
async def remove_member(
    household_id: str,
    user_id: str,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
):
    await HouseholdService(db).remove_member(household_id, user_id, user.id)
    return {"message": "Member removed successfully"}
