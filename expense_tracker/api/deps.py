# expense_tracker/api/deps.py
from typing import Optional
import uuid

from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker.core.auth import TokenError, decode_token
from expense_tracker.core.database import get_async_session
from expense_tracker.core.errors import ForbiddenError
from expense_tracker.crud.user import get_user_by_auth_provider_id
from expense_tracker.models.user import User
from expense_tracker.services.access import HouseholdContext, ensure_household_selected, resolve_household_context
from expense_tracker.services.ingestion import AIClient

# Security scheme; errors are raised below so every failure has the same shape
optional_security = HTTPBearer(auto_error=False)


async def get_token_subject(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
) -> str:
    """Verified ``sub`` claim of the bearer token: the user's auth provider id."""
    if not credentials or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        payload = await decode_token(credentials.credentials)
    except TokenError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(e),
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload["sub"]


async def get_current_user(
    subject: str = Depends(get_token_subject),
    db: AsyncSession = Depends(get_async_session),
) -> User:
    user = await get_user_by_auth_provider_id(subject, db)
    if user is None:
        raise ForbiddenError("User not registered in the system")
    return user


async def get_household_context(
    x_household_id: Optional[str] = Header(None, alias="X-Household-Id"),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_session),
) -> HouseholdContext:
    return await resolve_household_context(db, user.id, x_household_id)


async def get_current_household_id(
    context: HouseholdContext = Depends(get_household_context),
) -> uuid.UUID:
    """Household every category/subcategory/expense query is scoped to."""
    return ensure_household_selected(context)


def get_ai_client() -> AIClient:
    return AIClient.from_settings()
