# expense_tracker/services/subcategory.py
import logging
import uuid
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker.core.db_utils import parse_uuid, transaction
from expense_tracker.core.errors import NotFoundError
from expense_tracker.crud import subcategory as subcategory_crud
from expense_tracker.crud.category import get_category_by_id
from expense_tracker.models.category import Subcategory
from expense_tracker.schemas.category import SubcategoryCreate, SubcategoryUpdate

logger = logging.getLogger(__name__)


class SubcategoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def _require_parent(self, category_id: uuid.UUID, household_id: uuid.UUID) -> None:
        # The parent must live in the same household as the subcategory
        if await get_category_by_id(category_id, household_id, self.db) is None:
            logger.warning(f"Parent category {category_id} not found in household {household_id}")
            raise NotFoundError("Parent category not found")

    async def list_subcategories(
        self,
        household_id: uuid.UUID,
        category_id: Optional[uuid.UUID] = None,
    ) -> List[Subcategory]:
        return await subcategory_crud.get_subcategories_for_household(household_id, self.db, category_id)

    async def create_subcategory(self, household_id: uuid.UUID, sub_in: SubcategoryCreate) -> Subcategory:
        async with transaction(self.db, "Error creating subcategory"):
            await self._require_parent(sub_in.category_id, household_id)
            subcategory = await subcategory_crud.add_subcategory(
                Subcategory(name=sub_in.name.strip(), category_id=sub_in.category_id, household_id=household_id),
                self.db,
            )
        logger.info(f"Created subcategory {subcategory.name!r} under category {subcategory.category_id}")
        return subcategory

    async def update_subcategory(self, subcategory_id, household_id: uuid.UUID, sub_in: SubcategoryUpdate) -> Subcategory:
        subcategory_id = parse_uuid(subcategory_id, "subcategory_id")
        fields = sub_in.model_dump(exclude_unset=True, exclude_none=True)

        async with transaction(self.db, "Error updating subcategory"):
            subcategory = await subcategory_crud.get_subcategory_by_id(subcategory_id, household_id, self.db)
            if subcategory is None:
                raise NotFoundError("Subcategory not found")
            if "category_id" in fields:
                await self._require_parent(fields["category_id"], household_id)
            if "name" in fields:
                fields["name"] = fields["name"].strip()
            await subcategory_crud.update_subcategory(subcategory, fields, self.db)

        logger.info(f"Updated subcategory {subcategory_id}")
        return subcategory

    async def delete_subcategory(self, subcategory_id, household_id: uuid.UUID) -> None:
        subcategory_id = parse_uuid(subcategory_id, "subcategory_id")
        async with transaction(self.db, "Error deleting subcategory"):
            subcategory = await subcategory_crud.get_subcategory_by_id(subcategory_id, household_id, self.db)
            if subcategory is None:
                raise NotFoundError("Subcategory not found")
            await subcategory_crud.delete_subcategory(subcategory, self.db)
        logger.info(f"Deleted subcategory {subcategory_id}")
