# expense_tracker/services/user.py
import logging
import uuid
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker.core.db_utils import transaction
from expense_tracker.core.errors import BadRequestError, NotFoundError
from expense_tracker.crud import household as household_crud
from expense_tracker.crud import user as user_crud
from expense_tracker.models.user import User
from expense_tracker.schemas.user import UserUpdate
from expense_tracker.services.household import HouseholdService

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db
        self.households = HouseholdService(db)

    async def get_by_auth_provider_id(self, auth_provider_id: str) -> User:
        user = await user_crud.get_user_by_auth_provider_id(auth_provider_id, self.db)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, user: User, user_update: UserUpdate) -> User:
        update_dict = user_update.model_dump(exclude_unset=True, exclude_none=True)
        if not update_dict:
            raise BadRequestError("No fields provided for update")
        user_id = user.id

        async with transaction(self.db, "Error updating user", conflict_message="Email already in use"):
            updated = await user_crud.update_user_fields(user, update_dict, self.db)

        logger.info(f"Updated profile of user {user_id}: {sorted(update_dict)}")
        return updated

    async def delete_account(self, user_id: uuid.UUID) -> List[uuid.UUID]:
        """
        Delete a user. Every household the user owns is handed to its
        longest-tenured active member, or deleted when nobody is left.

        Returns the ids of the households that were deleted.
        """
        owned = await household_crud.get_owned_household_ids(user_id, self.db)
        deleted_households: List[uuid.UUID] = []

        for household_id in owned:
            try:
                await self.households.transfer_household_ownership(user_id, household_id)
            except BadRequestError:
                # Transfer rolled back; no successor means the household goes too
                await self.households.delete_orphaned_household(household_id)
                deleted_households.append(household_id)

        async with transaction(self.db, "Error deleting user"):
            await household_crud.delete_memberships_of_user(user_id, self.db)
            if await user_crud.delete_user_by_id(user_id, self.db) == 0:
                raise NotFoundError("User not found")

        logger.info(f"Deleted user {user_id} ({len(deleted_households)} orphaned households removed)")
        return deleted_households
