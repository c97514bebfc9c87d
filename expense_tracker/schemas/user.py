# expense_tracker/schemas/user.py
from typing import List, Optional
from datetime import datetime
import uuid
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from expense_tracker.schemas.household import HouseholdRead

class UserCreate(BaseModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=255)
    auth_provider_id: str = Field(..., min_length=1, max_length=255)

# Fields accepted on PUT /users/me
class UserUpdate(BaseModel):
    email: Optional[EmailStr] = None
    name: Optional[str] = Field(None, min_length=1, max_length=255)

# Public fields returned on GET /users/me
class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    email: EmailStr
    name: str
    auth_provider_id: str
    households: List[uuid.UUID] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class UserRegistrationResult(BaseModel):
    user: UserRead
    household: HouseholdRead
