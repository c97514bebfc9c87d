# expense_tracker/schemas/household.py
from typing import Optional
from datetime import datetime
import uuid
from pydantic import BaseModel, ConfigDict

from expense_tracker.models.household import MemberRole, MemberStatus

class HouseholdCreate(BaseModel):
    # Emptiness is checked by the service so it can report the failing fields
    name: Optional[str] = None

class HouseholdRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class HouseholdMemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    household_id: uuid.UUID
    user_id: uuid.UUID
    role: MemberRole
    status: MemberStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class InviteRequest(BaseModel):
    invited_user_id: str

class MessageResponse(BaseModel):
    message: str
