# expense_tracker/services/category.py
import logging
import uuid
from typing import List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from expense_tracker.core.db_utils import is_foreign_key_violation, parse_uuid, transaction
from expense_tracker.core.errors import BadRequestError, NotFoundError
from expense_tracker.crud import category as category_crud
from expense_tracker.crud.subcategory import get_subcategories_for_household
from expense_tracker.models.category import Category
from expense_tracker.schemas.category import CategoryCreate, CategoryHierarchy

logger = logging.getLogger(__name__)

FORCE_HINT = "Cannot delete category with associated subcategories. Use force=true to force deletion."


class CategoryService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_categories(self, household_id: uuid.UUID) -> List[Category]:
        categories = await category_crud.get_categories_for_household(household_id, self.db)
        logger.info(f"Fetched {len(categories)} categories for household {household_id}")
        return categories

    async def create_category(self, household_id: uuid.UUID, cat_in: CategoryCreate) -> Category:
        async with transaction(
            self.db,
            "Error creating category",
            conflict_message="A category with this name already exists",
        ):
            category = await category_crud.add_category(
                Category(name=cat_in.name.strip(), household_id=household_id), self.db
            )
        logger.info(f"Created category {category.name!r} in household {household_id}")
        return category

    async def update_category(self, category_id, household_id: uuid.UUID, name: str) -> Category:
        category_id = parse_uuid(category_id, "category_id")
        async with transaction(
            self.db,
            "Error updating category",
            conflict_message="A category with this name already exists",
        ):
            category = await category_crud.get_category_by_id(category_id, household_id, self.db)
            if category is None:
                logger.warning(f"Category {category_id} not found in household {household_id}")
                raise NotFoundError("Category not found")
            await category_crud.rename_category(category, name.strip(), self.db)
        logger.info(f"Renamed category {category_id} to {name!r}")
        return category

    async def delete_category(self, category_id, household_id: uuid.UUID, force: bool = False) -> int:
        """
        Delete a category. Its subcategories block the deletion unless ``force``
        is set, in which case they are deleted in the same transaction.

        Returns the number of subcategories removed alongside it.
        """
        category_id = parse_uuid(category_id, "category_id")
        async with transaction(self.db, "Error deleting category"):
            if await category_crud.get_category_by_id(category_id, household_id, self.db) is None:
                raise NotFoundError("Category not found")

            removed_subcategories = 0
            if await category_crud.count_subcategories(category_id, household_id, self.db):
                if not force:
                    logger.warning(f"Refusing to delete category {category_id} with subcategories")
                    raise BadRequestError(FORCE_HINT)
                removed_subcategories = await category_crud.delete_subcategories_by_category_id(
                    category_id, household_id, self.db
                )

            try:
                await category_crud.delete_category_by_id(category_id, household_id, self.db)
            except IntegrityError as e:
                # A subcategory was added concurrently
                if is_foreign_key_violation(e):
                    raise BadRequestError(FORCE_HINT) from e
                raise

        logger.info(f"Deleted category {category_id} and {removed_subcategories} subcategories")
        return removed_subcategories

    async def get_category_hierarchy(self, household_id: uuid.UUID) -> CategoryHierarchy:
        categories = await category_crud.get_categories_for_household(household_id, self.db)
        subcategories = await get_subcategories_for_household(household_id, self.db)

        hierarchy: CategoryHierarchy = {}
        for category in categories:
            hierarchy[category.name] = [s.name for s in subcategories if s.category_id == category.id]
        return hierarchy

    async def describe_hierarchy(self, household_id: uuid.UUID) -> str:
        """Bullet list of categories and their subcategories, used in AI prompts."""
        hierarchy = await self.get_category_hierarchy(household_id)
        return "\n".join(f"- {name}: {', '.join(subs)}" for name, subs in hierarchy.items())
