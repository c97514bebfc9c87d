# expense_tracker/crud/household.py
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
from expense_tracker.models.household import Household, HouseholdMember, MemberRole, MemberStatus
from typing import List, Optional
import uuid

# Repository functions only flush; the calling service owns the transaction.

async def add_household(household: Household, db: AsyncSession) -> Household:
    db.add(household)
    await db.flush()
    return household

async def get_household_by_id(household_id: uuid.UUID, db: AsyncSession) -> Optional[Household]:
    result = await db.execute(select(Household).where(Household.id == household_id))
    return result.scalar_one_or_none()

async def add_member(member: HouseholdMember, db: AsyncSession) -> HouseholdMember:
    db.add(member)
    await db.flush()
    return member

async def get_member(
    household_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
    for_update: bool = False,
) -> Optional[HouseholdMember]:
    query = select(HouseholdMember).where(
        HouseholdMember.household_id == household_id,
        HouseholdMember.user_id == user_id,
    )
    if for_update:
        query = query.with_for_update()
    result = await db.execute(query)
    return result.scalar_one_or_none()

async def is_active_member(household_id: uuid.UUID, user_id: uuid.UUID, db: AsyncSession) -> bool:
    result = await db.execute(
        select(HouseholdMember.id).where(
            HouseholdMember.household_id == household_id,
            HouseholdMember.user_id == user_id,
            HouseholdMember.status == MemberStatus.active,
        )
    )
    return result.first() is not None

async def get_members(household_id: uuid.UUID, db: AsyncSession) -> List[HouseholdMember]:
    result = await db.execute(
        select(HouseholdMember)
        .where(HouseholdMember.household_id == household_id)
        .order_by(HouseholdMember.created_at)
    )
    return list(result.scalars().all())

async def get_longest_tenured_active_member(
    household_id: uuid.UUID,
    exclude_user_id: uuid.UUID,
    db: AsyncSession,
) -> Optional[HouseholdMember]:
    result = await db.execute(
        select(HouseholdMember)
        .where(
            HouseholdMember.household_id == household_id,
            HouseholdMember.user_id != exclude_user_id,
            HouseholdMember.status == MemberStatus.active,
        )
        .order_by(HouseholdMember.created_at.asc())
        .limit(1)
        .with_for_update()
    )
    return result.scalar_one_or_none()

async def set_member_role(household_id: uuid.UUID, user_id: uuid.UUID, role: MemberRole, db: AsyncSession) -> int:
    result = await db.execute(
        update(HouseholdMember)
        .where(HouseholdMember.household_id == household_id, HouseholdMember.user_id == user_id)
        .values(role=role)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount

async def transition_member_status(
    household_id: uuid.UUID,
    user_id: uuid.UUID,
    from_status: MemberStatus,
    to_status: MemberStatus,
    db: AsyncSession,
) -> int:
    """Conditional status change; returns 0 when the row is not in ``from_status``."""
    result = await db.execute(
        update(HouseholdMember)
        .where(
            HouseholdMember.household_id == household_id,
            HouseholdMember.user_id == user_id,
            HouseholdMember.status == from_status,
        )
        .values(status=to_status)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount

async def delete_member(
    household_id: uuid.UUID,
    user_id: uuid.UUID,
    db: AsyncSession,
    status: Optional[MemberStatus] = None,
    exclude_user_id: Optional[uuid.UUID] = None,
) -> int:
    query = delete(HouseholdMember).where(
        HouseholdMember.household_id == household_id,
        HouseholdMember.user_id == user_id,
    )
    if status is not None:
        query = query.where(HouseholdMember.status == status)
    if exclude_user_id is not None:
        query = query.where(HouseholdMember.user_id != exclude_user_id)
    result = await db.execute(query.execution_options(synchronize_session="fetch"))
    return result.rowcount

async def delete_members_of_household(household_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(
        delete(HouseholdMember)
        .where(HouseholdMember.household_id == household_id)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount

async def delete_memberships_of_user(user_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(
        delete(HouseholdMember)
        .where(HouseholdMember.user_id == user_id)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount

async def delete_household_row(household_id: uuid.UUID, db: AsyncSession) -> int:
    result = await db.execute(delete(Household).where(Household.id == household_id))
    return result.rowcount

async def get_user_households(user_id: uuid.UUID, db: AsyncSession) -> List[Household]:
    result = await db.execute(
        select(Household)
        .join(HouseholdMember, HouseholdMember.household_id == Household.id)
        .where(HouseholdMember.user_id == user_id, HouseholdMember.status == MemberStatus.active)
        .order_by(HouseholdMember.created_at)
    )
    return list(result.scalars().all())

async def get_owned_household_ids(user_id: uuid.UUID, db: AsyncSession) -> List[uuid.UUID]:
    result = await db.execute(
        select(HouseholdMember.household_id).where(
            HouseholdMember.user_id == user_id,
            HouseholdMember.role == MemberRole.owner,
            HouseholdMember.status == MemberStatus.active,
        )
    )
    return list(result.scalars().all())

async def get_default_household_id(user_id: uuid.UUID, db: AsyncSession) -> Optional[uuid.UUID]:
    """Household of the user's earliest-created active membership."""
    result = await db.execute(
        select(HouseholdMember.household_id)
        .where(HouseholdMember.user_id == user_id, HouseholdMember.status == MemberStatus.active)
        .order_by(HouseholdMember.created_at.asc())
        .limit(1)
    )
    return result.scalar_one_or_none()
