import uuid

import pytest

from expense_tracker.core.errors import BadRequestError, ConflictError, NotFoundError
from expense_tracker.schemas.category import CategoryCreate, SubcategoryCreate, SubcategoryUpdate
from expense_tracker.services.category import CategoryService
from expense_tracker.services.subcategory import SubcategoryService


async def test_categories_are_scoped_to_household(db, register) -> None:
    _, home = await register("Alice")
    _, other = await register("Bob")
    categories = CategoryService(db)

    food = await categories.create_category(home, CategoryCreate(name="Food"))
    food_id = food.id
    await categories.create_category(other, CategoryCreate(name="Food"))

    assert [c.id for c in await categories.list_categories(home)] == [food_id]
    with pytest.raises(NotFoundError):
        await categories.update_category(food_id, other, "Groceries")
    with pytest.raises(NotFoundError):
        await categories.delete_category(food_id, other)
    assert [c.name for c in await categories.list_categories(home)] == ["Food"]


async def test_duplicate_category_name_conflicts(db, register) -> None:
    _, home = await register("Alice")
    categories = CategoryService(db)
    await categories.create_category(home, CategoryCreate(name="Food"))
    travel = await categories.create_category(home, CategoryCreate(name="Travel"))
    travel_id = travel.id

    with pytest.raises(ConflictError):
        await categories.create_category(home, CategoryCreate(name="Food"))
    with pytest.raises(ConflictError):
        await categories.update_category(travel_id, home, "Food")

    assert sorted(c.name for c in await categories.list_categories(home)) == ["Food", "Travel"]


async def test_subcategory_parent_must_be_in_same_household(db, register) -> None:
    _, home = await register("Alice")
    _, other = await register("Bob")
    foreign = await CategoryService(db).create_category(other, CategoryCreate(name="Food"))

    with pytest.raises(NotFoundError, match="Parent category not found"):
        await SubcategoryService(db).create_subcategory(home, SubcategoryCreate(name="Groceries", category_id=foreign.id))
    with pytest.raises(NotFoundError):
        await SubcategoryService(db).create_subcategory(home, SubcategoryCreate(name="Groceries", category_id=uuid.uuid4()))


async def test_subcategory_crud(db, register) -> None:
    _, home = await register("Alice")
    categories = CategoryService(db)
    subcategories = SubcategoryService(db)
    food = await categories.create_category(home, CategoryCreate(name="Food"))
    fun = await categories.create_category(home, CategoryCreate(name="Fun"))

    groceries = await subcategories.create_subcategory(home, SubcategoryCreate(name="Groceries", category_id=food.id))
    dining = await subcategories.create_subcategory(home, SubcategoryCreate(name=" Dining ", category_id=food.id))
    assert dining.name == "Dining"
    assert [s.id for s in await subcategories.list_subcategories(home, fun.id)] == []

    moved = await subcategories.update_subcategory(dining.id, home, SubcategoryUpdate(category_id=fun.id, name="Restaurants"))
    moved_id, groceries_id = moved.id, groceries.id
    assert moved.category_id == fun.id
    assert moved.name == "Restaurants"
    assert [s.id for s in await subcategories.list_subcategories(home, food.id)] == [groceries_id]

    await subcategories.delete_subcategory(groceries_id, home)
    with pytest.raises(NotFoundError):
        await subcategories.delete_subcategory(groceries_id, home)
    assert [s.id for s in await subcategories.list_subcategories(home)] == [moved_id]


async def test_category_with_subcategories_needs_force(db, register) -> None:
    _, home = await register("Alice")
    categories = CategoryService(db)
    food = await categories.create_category(home, CategoryCreate(name="Food"))
    food_id = food.id
    await SubcategoryService(db).create_subcategory(home, SubcategoryCreate(name="Groceries", category_id=food_id))

    with pytest.raises(BadRequestError, match="force=true"):
        await categories.delete_category(food_id, home)
    assert await categories.get_category_hierarchy(home) == {"Food": ["Groceries"]}

    removed = await categories.delete_category(food_id, home, force=True)
    assert removed == 1
    assert await categories.get_category_hierarchy(home) == {}
    assert await SubcategoryService(db).list_subcategories(home) == []


async def test_category_hierarchy(db, register) -> None:
    _, home = await register("Alice")
    categories = CategoryService(db)
    food = await categories.create_category(home, CategoryCreate(name="Food"))
    await categories.create_category(home, CategoryCreate(name="Rent"))
    subcategories = SubcategoryService(db)
    await subcategories.create_subcategory(home, SubcategoryCreate(name="Groceries", category_id=food.id))
    await subcategories.create_subcategory(home, SubcategoryCreate(name="Dining", category_id=food.id))

    hierarchy = await categories.get_category_hierarchy(home)

    assert hierarchy == {"Food": ["Dining", "Groceries"], "Rent": []}
    description = await categories.describe_hierarchy(home)
    assert "- Food: Dining, Groceries" in description
    assert "- Rent: " in description
