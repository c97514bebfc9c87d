# expense_tracker/services/household.py
"""
Household lifecycle: creation, invitations, membership and ownership transfer.

Membership rows move through a small state machine::

    invited -> active      (accept)
    invited -> deleted     (reject)
    active  -> deleted     (remove / leave)
    owner   -> deleted     paired with member -> owner (ownership transfer)

Anything else fails with NotFound or BadRequest instead of silently doing
nothing. Multi-row changes run inside a single transaction.
"""
import logging
import uuid
from typing import List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker.core.db_utils import parse_uuid, transaction
from expense_tracker.core.errors import BadRequestError, ForbiddenError, NotFoundError
from expense_tracker.crud import household as household_crud
from expense_tracker.crud.user import get_user_by_id
from expense_tracker.models.household import Household, HouseholdMember, MemberRole, MemberStatus

logger = logging.getLogger(__name__)

IdLike = Union[str, uuid.UUID]


def validate_household_name(name: Optional[str]) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        logger.warning("Invalid household data: name is required")
        raise BadRequestError("Invalid household: Name is required", fields=["name"])
    return cleaned


class HouseholdService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_household(self, name: Optional[str], owner_id: IdLike) -> Household:
        """Persist a household and its owner membership as one unit."""
        cleaned = validate_household_name(name)
        owner_id = parse_uuid(owner_id, "user_id")

        async with transaction(self.db, "Error creating household"):
            household = await household_crud.add_household(Household(name=cleaned), self.db)
            await household_crud.add_member(
                HouseholdMember(
                    household_id=household.id,
                    user_id=owner_id,
                    role=MemberRole.owner,
                    status=MemberStatus.active,
                ),
                self.db,
            )
            household_id = household.id

        logger.info(f"Created household {household_id} owned by {owner_id}")
        return household

    async def get_household(self, household_id: IdLike) -> Household:
        household_id = parse_uuid(household_id, "household_id")
        household = await household_crud.get_household_by_id(household_id, self.db)
        if household is None:
            raise NotFoundError("Household not found")
        return household

    async def is_member(self, household_id: IdLike, user_id: IdLike) -> bool:
        return await household_crud.is_active_member(
            parse_uuid(household_id, "household_id"), parse_uuid(user_id, "user_id"), self.db
        )

    async def get_user_households(self, user_id: IdLike) -> List[Household]:
        return await household_crud.get_user_households(parse_uuid(user_id, "user_id"), self.db)

    async def invite_member(self, household_id: IdLike, invited_user_id: IdLike, inviter_id: IdLike) -> HouseholdMember:
        household_id = parse_uuid(household_id, "household_id")
        invited_user_id = parse_uuid(invited_user_id, "invited_user_id")
        inviter_id = parse_uuid(inviter_id, "user_id")

        async with transaction(
            self.db,
            "Error inviting member to household",
            conflict_message="User is already a member or invited to this household",
        ):
            if not await household_crud.is_active_member(household_id, inviter_id, self.db):
                logger.warning(f"User {inviter_id} tried to invite into household {household_id} without membership")
                raise ForbiddenError("You are not a member of this household")

            if await get_user_by_id(invited_user_id, self.db) is None:
                raise NotFoundError("Invited user not found")

            existing = await household_crud.get_member(household_id, invited_user_id, self.db)
            if existing is not None:
                logger.warning(f"User {invited_user_id} already has a {existing.status.value} membership in {household_id}")
                raise BadRequestError("User is already a member or invited to this household")

            member = await household_crud.add_member(
                HouseholdMember(
                    household_id=household_id,
                    user_id=invited_user_id,
                    role=MemberRole.member,
                    status=MemberStatus.invited,
                ),
                self.db,
            )

        logger.info(f"Invited user {invited_user_id} to household {household_id}")
        return member

    async def accept_invitation(self, household_id: IdLike, user_id: IdLike) -> None:
        household_id = parse_uuid(household_id, "household_id")
        user_id = parse_uuid(user_id, "user_id")

        async with transaction(self.db, "Error accepting household invitation"):
            updated = await household_crud.transition_member_status(
                household_id, user_id, MemberStatus.invited, MemberStatus.active, self.db
            )
            if updated == 0:
                logger.warning(f"No pending invitation for user {user_id} in household {household_id}")
                raise NotFoundError("No valid invitation found")

        logger.info(f"User {user_id} accepted invitation to household {household_id}")

    async def reject_invitation(self, household_id: IdLike, user_id: IdLike) -> None:
        household_id = parse_uuid(household_id, "household_id")
        user_id = parse_uuid(user_id, "user_id")

        async with transaction(self.db, "Error rejecting household invitation"):
            deleted = await household_crud.delete_member(
                household_id, user_id, self.db, status=MemberStatus.invited
            )
            if deleted == 0:
                logger.warning(f"No pending invitation for user {user_id} in household {household_id}")
                raise NotFoundError("No valid invitation found")

        logger.info(f"User {user_id} rejected invitation to household {household_id}")

    async def get_household_members(
        self,
        household_id: IdLike,
        requester_id: Optional[IdLike] = None,
    ) -> List[HouseholdMember]:
        """All membership rows of a household, whatever their status."""
        household_id = parse_uuid(household_id, "household_id")
        if await household_crud.get_household_by_id(household_id, self.db) is None:
            raise NotFoundError("Household not found")

        if requester_id is not None:
            requester = await household_crud.get_member(household_id, parse_uuid(requester_id, "user_id"), self.db)
            if requester is None:
                raise ForbiddenError("User does not have access to this household")

        members = await household_crud.get_members(household_id, self.db)
        logger.debug(f"Retrieved {len(members)} members of household {household_id}")
        return members

    async def remove_member(self, household_id: IdLike, target_user_id: IdLike, remover_id: IdLike) -> None:
        """Owner-only removal of another member. Owners leave via account deletion instead."""
        household_id = parse_uuid(household_id, "household_id")
        target_user_id = parse_uuid(target_user_id, "user_id")
        remover_id = parse_uuid(remover_id, "user_id")

        async with transaction(self.db, "Error removing member from household"):
            remover = await household_crud.get_member(household_id, remover_id, self.db, for_update=True)
            if remover is None or not remover.is_owner or not remover.is_active:
                logger.warning(f"User {remover_id} is not allowed to remove members of household {household_id}")
                raise ForbiddenError("You do not have permission to remove members")

            deleted = await household_crud.delete_member(
                household_id, target_user_id, self.db, exclude_user_id=remover_id
            )
            if deleted == 0:
                raise NotFoundError("Member not found or cannot remove yourself")

        logger.info(f"Removed user {target_user_id} from household {household_id}")

    async def leave_household(self, household_id: IdLike, user_id: IdLike) -> None:
        household_id = parse_uuid(household_id, "household_id")
        user_id = parse_uuid(user_id, "user_id")

        async with transaction(self.db, "Error leaving household"):
            member = await household_crud.get_member(household_id, user_id, self.db, for_update=True)
            if member is None or not member.is_active:
                raise NotFoundError("Active membership not found")
            if member.is_owner:
                raise BadRequestError("The owner cannot leave the household; delete the account to transfer ownership")
            await household_crud.delete_member(household_id, user_id, self.db)

        logger.info(f"User {user_id} left household {household_id}")

    async def transfer_household_ownership(self, current_owner_id: IdLike, household_id: IdLike) -> uuid.UUID:
        """
        Hand the household to its longest-tenured other active member and drop
        the former owner's row. Raises BadRequest when there is no successor;
        the caller then deletes the orphaned household. Nothing is changed
        unless every step succeeds.
        """
        current_owner_id = parse_uuid(current_owner_id, "user_id")
        household_id = parse_uuid(household_id, "household_id")

        async with transaction(self.db, "Error transferring household ownership"):
            owner = await household_crud.get_member(household_id, current_owner_id, self.db, for_update=True)
            if owner is None or not owner.is_owner:
                logger.warning(f"User {current_owner_id} is not the owner of household {household_id}")
                raise BadRequestError("Current user is not the owner")

            successor = await household_crud.get_longest_tenured_active_member(
                household_id, current_owner_id, self.db
            )
            if successor is None:
                logger.warning(f"No eligible member to take over household {household_id}")
                raise BadRequestError("No eligible member found to transfer ownership")
            new_owner_id = successor.user_id

            await household_crud.set_member_role(household_id, new_owner_id, MemberRole.owner, self.db)
            await household_crud.delete_member(household_id, current_owner_id, self.db)

        logger.info(f"Transferred ownership of household {household_id} from {current_owner_id} to {new_owner_id}")
        return new_owner_id

    async def delete_orphaned_household(self, household_id: IdLike) -> None:
        household_id = parse_uuid(household_id, "household_id")

        async with transaction(self.db, "Error deleting orphaned household"):
            await household_crud.delete_members_of_household(household_id, self.db)
            await household_crud.delete_household_row(household_id, self.db)

        logger.info(f"Deleted orphaned household {household_id}")
