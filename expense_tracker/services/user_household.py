# expense_tracker/services/user_household.py
import logging
from typing import Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker.core.db_utils import transaction
from expense_tracker.core.errors import AppError, ConflictError, InternalError
from expense_tracker.crud import household as household_crud
from expense_tracker.crud.user import add_user
from expense_tracker.models.household import Household, HouseholdMember, MemberRole, MemberStatus
from expense_tracker.models.user import User
from expense_tracker.schemas.user import UserCreate
from expense_tracker.services.household import validate_household_name

logger = logging.getLogger(__name__)


def default_household_name(user_name: str) -> str:
    return f"{user_name}'s Household"


class UserHouseholdTransactionCoordinator:
    """Creates a user, its first household and the owner membership together, or none of them."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_user_with_household(self, user_in: UserCreate, household_name: str) -> Tuple[User, Household]:
        household_name = validate_household_name(household_name)
        logger.info(f"Creating user {user_in.email} with household {household_name!r}")

        try:
            async with transaction(
                self.db,
                "Error creating user with household",
                conflict_message="User with this email or auth provider ID already exists",
            ):
                user = await add_user(
                    User(
                        email=user_in.email,
                        name=user_in.name,
                        auth_provider_id=user_in.auth_provider_id,
                        memberships=[],
                    ),
                    self.db,
                )
                household = await household_crud.add_household(Household(name=household_name), self.db)

                member = HouseholdMember(
                    household_id=household.id,
                    user_id=user.id,
                    role=MemberRole.owner,
                    status=MemberStatus.active,
                )
                # Linking through the collection keeps user.households in step with the new row
                user.memberships.append(member)
                await self.db.flush()
        except ConflictError:
            logger.warning(f"User {user_in.email} already exists")
            raise
        except AppError:
            raise
        except Exception as e:
            logger.error(f"Error creating user with household: {str(e)}")
            raise InternalError("Error creating user with household") from e

        logger.info(f"Created user {user.id} with household {household.id}")
        return user, household
