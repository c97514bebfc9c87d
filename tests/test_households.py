import pytest

from expense_tracker.core.errors import BadRequestError, ForbiddenError, NotFoundError
from expense_tracker.crud import household as household_crud
from expense_tracker.models.household import MemberRole, MemberStatus
from expense_tracker.services.household import HouseholdService


async def join(service: HouseholdService, household_id, owner_id, user_id) -> None:
    await service.invite_member(household_id, user_id, owner_id)
    await service.accept_invitation(household_id, user_id)


@pytest.mark.parametrize("name", [None, "", "   "])
async def test_create_household_requires_a_name(db, register, name) -> None:
    alice, _ = await register("Alice")

    with pytest.raises(BadRequestError) as exc:
        await HouseholdService(db).create_household(name, alice)

    assert exc.value.message == "Invalid household: Name is required"
    assert exc.value.fields == ["name"]
    assert len(await household_crud.get_user_households(alice, db)) == 1


async def test_created_household_has_exactly_one_active_owner(db, register) -> None:
    alice, _ = await register("Alice")

    household = await HouseholdService(db).create_household("  Beach house ", alice)
    members = await household_crud.get_members(household.id, db)

    assert household.name == "Beach house"
    assert len(members) == 1
    assert members[0].user_id == alice
    assert members[0].role == MemberRole.owner
    assert members[0].status == MemberStatus.active


async def test_invitation_lifecycle(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    service = HouseholdService(db)

    await service.invite_member(str(home), str(bob), alice)
    invited = await household_crud.get_member(home, bob, db)
    assert invited.status == MemberStatus.invited
    assert invited.role == MemberRole.member
    assert not await service.is_member(home, bob)

    await service.accept_invitation(home, bob)
    assert await service.is_member(home, bob)

    with pytest.raises(NotFoundError, match="No valid invitation found"):
        await service.accept_invitation(home, bob)
    assert (await household_crud.get_member(home, bob, db)).status == MemberStatus.active


async def test_duplicate_invitation_is_rejected(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    service = HouseholdService(db)

    await service.invite_member(home, bob, alice)
    with pytest.raises(BadRequestError, match="already a member or invited"):
        await service.invite_member(home, bob, alice)

    members = await household_crud.get_members(home, db)
    assert [m.user_id for m in members] == [alice, bob]


async def test_inviting_an_existing_member_is_rejected(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    service = HouseholdService(db)
    await join(service, home, alice, bob)

    with pytest.raises(BadRequestError):
        await service.invite_member(home, bob, alice)


async def test_only_active_members_can_invite(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    carol, _ = await register("Carol")
    service = HouseholdService(db)

    with pytest.raises(ForbiddenError):
        await service.invite_member(home, carol, bob)

    # Invited but not yet accepted is not enough either
    await service.invite_member(home, bob, alice)
    with pytest.raises(ForbiddenError):
        await service.invite_member(home, carol, bob)

    await service.accept_invitation(home, bob)
    await service.invite_member(home, carol, bob)
    assert (await household_crud.get_member(home, carol, db)).status == MemberStatus.invited


async def test_inviting_unknown_user_is_not_found(db, register) -> None:
    alice, home = await register("Alice")

    with pytest.raises(NotFoundError, match="Invited user not found"):
        await HouseholdService(db).invite_member(home, "00000000-0000-0000-0000-000000000001", alice)


async def test_malformed_ids_are_bad_requests(db, register) -> None:
    alice, home = await register("Alice")

    with pytest.raises(BadRequestError):
        await HouseholdService(db).invite_member(home, "not-a-uuid", alice)
    with pytest.raises(BadRequestError):
        await HouseholdService(db).accept_invitation("nope", alice)


async def test_reject_deletes_the_invitation(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    service = HouseholdService(db)

    await service.invite_member(home, bob, alice)
    await service.reject_invitation(home, bob)

    assert await household_crud.get_member(home, bob, db) is None
    with pytest.raises(NotFoundError):
        await service.accept_invitation(home, bob)
    with pytest.raises(NotFoundError):
        await service.reject_invitation(home, bob)

    # A rejected user can be invited again
    await service.invite_member(home, bob, alice)


async def test_active_member_cannot_reject(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    service = HouseholdService(db)
    await join(service, home, alice, bob)

    with pytest.raises(NotFoundError):
        await service.reject_invitation(home, bob)
    assert await service.is_member(home, bob)


async def test_only_owner_can_remove_members(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    carol, _ = await register("Carol")
    service = HouseholdService(db)
    await join(service, home, alice, bob)
    await join(service, home, alice, carol)

    with pytest.raises(ForbiddenError):
        await service.remove_member(home, carol, bob)
    assert await service.is_member(home, carol)

    await service.remove_member(home, carol, alice)
    assert not await service.is_member(home, carol)
    assert await household_crud.get_member(home, carol, db) is None


async def test_owner_cannot_remove_themselves(db, register) -> None:
    alice, home = await register("Alice")

    with pytest.raises(NotFoundError, match="cannot remove yourself"):
        await HouseholdService(db).remove_member(home, alice, alice)
    assert await HouseholdService(db).is_member(home, alice)


async def test_owner_can_withdraw_an_invitation(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    service = HouseholdService(db)

    await service.invite_member(home, bob, alice)
    await service.remove_member(home, bob, alice)

    assert await household_crud.get_member(home, bob, db) is None


async def test_member_can_leave_but_owner_cannot(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    service = HouseholdService(db)
    await join(service, home, alice, bob)

    await service.leave_household(home, bob)
    assert not await service.is_member(home, bob)

    with pytest.raises(NotFoundError):
        await service.leave_household(home, bob)
    with pytest.raises(BadRequestError):
        await service.leave_household(home, alice)
    assert await service.is_member(home, alice)


async def test_member_listing_requires_a_membership(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    carol, _ = await register("Carol")
    service = HouseholdService(db)
    await service.invite_member(home, bob, alice)

    # Invitees may look at the household they were invited to
    members = await service.get_household_members(home, requester_id=bob)
    assert {m.user_id: m.status for m in members} == {alice: MemberStatus.active, bob: MemberStatus.invited}

    with pytest.raises(ForbiddenError):
        await service.get_household_members(home, requester_id=carol)
    with pytest.raises(NotFoundError):
        await service.get_household_members("00000000-0000-0000-0000-000000000001", requester_id=alice)


async def test_transfer_goes_to_longest_tenured_active_member(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    carol, _ = await register("Carol")
    dave, _ = await register("Dave")
    service = HouseholdService(db)

    # Tenure counts from the invitation, not from the acceptance
    await service.invite_member(home, bob, alice)
    await service.invite_member(home, carol, alice)
    await service.invite_member(home, dave, alice)
    await service.accept_invitation(home, carol)
    await service.accept_invitation(home, bob)

    new_owner = await service.transfer_household_ownership(alice, home)

    assert new_owner == bob
    members = {m.user_id: m for m in await household_crud.get_members(home, db)}
    assert alice not in members
    assert members[bob].role == MemberRole.owner
    assert members[carol].role == MemberRole.member
    assert members[dave].status == MemberStatus.invited
    owners = [m for m in members.values() if m.role == MemberRole.owner and m.status == MemberStatus.active]
    assert len(owners) == 1


async def test_transfer_without_successor_changes_nothing(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    service = HouseholdService(db)
    # Pending invitations do not count as successors
    await service.invite_member(home, bob, alice)

    with pytest.raises(BadRequestError, match="No eligible member"):
        await service.transfer_household_ownership(alice, home)

    owner = await household_crud.get_member(home, alice, db)
    assert owner is not None
    assert owner.role == MemberRole.owner
    assert owner.status == MemberStatus.active
    assert (await household_crud.get_member(home, bob, db)).status == MemberStatus.invited


async def test_transfer_requires_the_owner(db, register) -> None:
    alice, home = await register("Alice")
    bob, _ = await register("Bob")
    service = HouseholdService(db)
    await join(service, home, alice, bob)

    with pytest.raises(BadRequestError, match="not the owner"):
        await service.transfer_household_ownership(bob, home)
    assert (await household_crud.get_member(home, alice, db)).role == MemberRole.owner


async def test_delete_orphaned_household(db, register) -> None:
    alice, home = await register("Alice")
    service = HouseholdService(db)

    await service.delete_orphaned_household(home)

    assert await household_crud.get_household_by_id(home, db) is None
    assert await household_crud.get_members(home, db) == []
    with pytest.raises(NotFoundError):
        await service.get_household(home)
