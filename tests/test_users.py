"""
Tests for user administration and PIN management.
"""
from uuid import uuid4

import pytest

from timeclock.core.exceptions import ConflictError, NotFoundError, UnauthorizedError, ValidationError
from timeclock.core.security import get_pin_digest
from timeclock.models.user import User, UserRole, UserStatus
from timeclock.schemas.user import UserCreate, UserUpdate
from timeclock.services import user_service


@pytest.mark.asyncio
async def test_admin_creates_user_with_pin(db, admin):
    user = await user_service.create_user(
        db,
        admin,
        UserCreate(email="New.Hire@Test.com", first_name=" Nia ", last_name="Hire", pin="4826", hourly_rate=17.5),
    )
    assert user.email == "new.hire@test.com"
    assert user.first_name == "Nia"
    assert user.role == UserRole.EMPLOYEE
    assert user.status == UserStatus.ACTIVE
    assert user.has_pin
    assert user.pin_digest == get_pin_digest("4826")
    assert user.pin_changed_at is not None
    assert user.hourly_rate == 17.5


@pytest.mark.asyncio
async def test_create_user_rejects_duplicates(db, admin, employee):
    with pytest.raises(ValidationError) as exc_info:
        await user_service.create_user(
            db, admin, UserCreate(email="EMPLOYEE@test.com", first_name="Dup", last_name="Email")
        )
    assert exc_info.value.message == "Email already in use"

    with pytest.raises(ValidationError) as exc_info:
        await user_service.create_user(
            db, admin, UserCreate(email="other@test.com", first_name="Dup", last_name="Pin", pin="2580")
        )
    assert exc_info.value.message == "PIN already in use"


@pytest.mark.asyncio
async def test_create_user_rejects_weak_pin(db, admin):
    with pytest.raises(ValidationError) as exc_info:
        await user_service.create_user(
            db, admin, UserCreate(email="weak@test.com", first_name="Weak", last_name="Pin", pin="1234")
        )
    assert exc_info.value.message == "PIN is too weak. Please choose a different PIN"


@pytest.mark.asyncio
async def test_only_admin_creates_users(db, manager):
    with pytest.raises(UnauthorizedError) as exc_info:
        await user_service.create_user(
            db, manager, UserCreate(email="someone@test.com", first_name="Some", last_name="One")
        )
    assert exc_info.value.status_code == 403


@pytest.mark.asyncio
async def test_inactive_users_pin_can_be_reused(db, admin, make_user):
    await make_user(pin="4826", status=UserStatus.INACTIVE)

    user = await user_service.create_user(
        db, admin, UserCreate(email="reuse@test.com", first_name="Re", last_name="Use", pin="4826")
    )
    assert user.has_pin


@pytest.mark.asyncio
async def test_update_user_clears_pin(db, manager, employee):
    updated = await user_service.update_user(db, manager, employee.id, UserUpdate(pin="", phone="555-0100"))
    assert updated.pin_digest is None
    assert updated.pin_changed_at is None
    assert updated.phone == "555-0100"
    assert not updated.has_pin


@pytest.mark.asyncio
async def test_update_user_rejects_taken_pin(db, manager, employee, make_user):
    other = await make_user(pin="4826")

    with pytest.raises(ValidationError) as exc_info:
        await user_service.update_user(db, manager, other.id, UserUpdate(pin="2580"))
    assert exc_info.value.message == "PIN already in use"


@pytest.mark.asyncio
async def test_reactivation_with_taken_pin_is_a_conflict(db, manager, make_user):
    former = await make_user(pin="4826", status=UserStatus.INACTIVE)
    await make_user(pin="4826")

    with pytest.raises(ConflictError) as exc_info:
        await user_service.update_user(db, manager, former.id, UserUpdate(status=UserStatus.ACTIVE))
    assert exc_info.value.message == "PIN already in use by another active user"

    # Reactivating with a fresh PIN works
    reactivated = await user_service.update_user(
        db, manager, former.id, UserUpdate(status=UserStatus.ACTIVE, pin="7391")
    )
    assert reactivated.status == UserStatus.ACTIVE
    assert reactivated.pin_digest == get_pin_digest("7391")


@pytest.mark.asyncio
async def test_storage_rejects_second_active_pin_holder(db, make_user):
    """The partial unique index is the last word on active PIN uniqueness."""
    await make_user(pin="4826")

    with pytest.raises(ConflictError):
        duplicate = User(
            email="dup@test.com",
            first_name="Dup",
            last_name="Pin",
            pin_digest=get_pin_digest("4826"),
        )
        db.add(duplicate)
        await user_service._commit_unique(db, duplicate, "PIN already in use")


@pytest.mark.asyncio
async def test_update_missing_user(db, manager, admin):
    with pytest.raises(NotFoundError):
        await user_service.update_user(db, manager, uuid4(), UserUpdate(first_name="X"))


@pytest.mark.asyncio
async def test_update_my_pin(db, employee, make_user):
    other = await make_user(pin="4826")

    with pytest.raises(ValidationError) as exc_info:
        await user_service.update_my_pin(db, employee, "")
    assert exc_info.value.message == "New PIN is required"

    with pytest.raises(ValidationError) as exc_info:
        await user_service.update_my_pin(db, employee, "4826")
    assert exc_info.value.message == "This PIN is already in use by another employee"

    updated = await user_service.update_my_pin(db, employee, "7391")
    assert updated.pin_digest == get_pin_digest("7391")
    assert other.pin_digest == get_pin_digest("4826")


@pytest.mark.asyncio
async def test_list_users_is_sorted_and_filtered(db, manager, make_user):
    await make_user(first_name="Zed", last_name="Adams")
    await make_user(first_name="Amy", last_name="Adams")
    await make_user(first_name="Bea", last_name="Zhou", status=UserStatus.INACTIVE)

    everyone = await user_service.list_users(db, manager)
    assert [u.full_name for u in everyone] == ["Amy Adams", "Zed Adams", "Morgan Manager", "Bea Zhou"]

    employees = await user_service.list_users(db, manager, role=UserRole.EMPLOYEE, status=UserStatus.ACTIVE)
    assert [u.full_name for u in employees] == ["Amy Adams", "Zed Adams"]
