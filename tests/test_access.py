import uuid

import pytest

from expense_tracker.core.errors import BadRequestError, ForbiddenError
from expense_tracker.crud.user import add_user
from expense_tracker.models.user import User
from expense_tracker.services.access import HouseholdContext, ensure_household_selected, resolve_household_context
from expense_tracker.services.household import HouseholdService


async def test_defaults_to_earliest_active_household(db, register) -> None:
    alice, home = await register("Alice")
    await HouseholdService(db).create_household("Cabin", alice)

    context = await resolve_household_context(db, alice)

    assert context == HouseholdContext(user_id=alice, household_id=home)


async def test_explicit_household_must_be_active_membership(db, register) -> None:
    alice, home = await register("Alice")
    bob, bobs_home = await register("Bob")
    households = HouseholdService(db)

    with pytest.raises(ForbiddenError, match="does not have access"):
        await resolve_household_context(db, alice, str(bobs_home))

    await households.invite_member(bobs_home, alice, bob)
    with pytest.raises(ForbiddenError):
        await resolve_household_context(db, alice, str(bobs_home))

    await households.accept_invitation(bobs_home, alice)
    context = await resolve_household_context(db, alice, str(bobs_home))
    assert context.household_id == bobs_home

    await households.remove_member(bobs_home, alice, bob)
    with pytest.raises(ForbiddenError):
        await resolve_household_context(db, alice, str(bobs_home))
    assert (await resolve_household_context(db, alice)).household_id == home


async def test_malformed_household_header(db, register) -> None:
    alice, _ = await register("Alice")

    with pytest.raises(BadRequestError):
        await resolve_household_context(db, alice, "household-1")


async def test_user_without_households_has_no_default(db) -> None:
    user = await add_user(User(email="lonely@example.com", name="Lonely", auth_provider_id="auth|lonely", memberships=[]), db)
    user_id = user.id
    await db.commit()

    with pytest.raises(BadRequestError, match="no default household"):
        await resolve_household_context(db, user_id)


def test_ensure_household_selected_fails_closed() -> None:
    with pytest.raises(BadRequestError):
        ensure_household_selected(HouseholdContext(user_id=uuid.uuid4(), household_id=None))
