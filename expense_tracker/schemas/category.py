# expense_tracker/schemas/category.py
from typing import Dict, List, Optional
import uuid
from pydantic import BaseModel, ConfigDict, Field

class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

class CategoryUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)

class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    household_id: uuid.UUID

class SubcategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    category_id: uuid.UUID

class SubcategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    category_id: Optional[uuid.UUID] = None

class SubcategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    category_id: uuid.UUID
    household_id: uuid.UUID

# {"Food": ["Groceries", "Restaurants"], ...}
CategoryHierarchy = Dict[str, List[str]]
