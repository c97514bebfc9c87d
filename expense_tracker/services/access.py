# expense_tracker/services/access.py
import logging
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker.core.db_utils import parse_uuid
from expense_tracker.core.errors import BadRequestError, ForbiddenError
from expense_tracker.crud import household as household_crud

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HouseholdContext:
    """Per-request scope handed to every household-scoped handler."""
    user_id: uuid.UUID
    household_id: Optional[uuid.UUID]


async def resolve_household_context(
    db: AsyncSession,
    user_id: uuid.UUID,
    requested_household_id: Optional[str] = None,
) -> HouseholdContext:
    """
    Work out which household a request acts on.

    An explicit id must belong to an active membership of the user. Without
    one, the household of the user's earliest active membership is used.
    """
    if requested_household_id:
        try:
            household_id = parse_uuid(requested_household_id, "X-Household-Id")
        except BadRequestError:
            logger.warning(f"User {user_id} sent a malformed household id {requested_household_id!r}")
            raise
        if not await household_crud.is_active_member(household_id, user_id, db):
            logger.warning(f"User {user_id} attempted to access unauthorized household {household_id}")
            raise ForbiddenError("User does not have access to this household")
    else:
        household_id = await household_crud.get_default_household_id(user_id, db)
        if household_id is None:
            logger.warning(f"No default household found for user {user_id}")
            raise BadRequestError("No household selected and no default household found")

    logger.info(f"Set current household to {household_id} for user {user_id}")
    return HouseholdContext(user_id=user_id, household_id=household_id)


def ensure_household_selected(context: HouseholdContext) -> uuid.UUID:
    """Fail closed when resolution produced no household."""
    if context.household_id is None:
        raise BadRequestError("No household selected")
    return context.household_id
