"""
Tests for the address book handlers.
"""

import pytest
from unittest.mock import AsyncMock

from storefront_account.application.commands import (
    AddAddress,
    UpdateAddress,
    SetDefaultAddress,
    DeleteAddress,
)
from storefront_account.application.handlers import (
    AddAddressHandler,
    UpdateAddressHandler,
    SetDefaultAddressHandler,
    DeleteAddressHandler,
)
from storefront_account.domain.aggregates import User
from storefront_account.domain.errors import PersistenceFailureError
from storefront_account.domain.events import DefaultAddressChanged
from storefront_account.domain.value_objects import (
    Address,
    AddressFields,
    DefaultAddressSnapshot,
)


@pytest.mark.asyncio
async def test_add_default_address(registered_user, user_repo, home, office):
    handler = AddAddressHandler(user_repo)

    await handler.handle(AddAddress(user_id=registered_user.id, address=home, is_default=True))
    response = await handler.handle(
        AddAddress(user_id=registered_user.id, address=office, is_default=True)
    )

    result = response.result
    assert result.success
    assert [a["is_default"] for a in result.addresses] == [False, True]
    assert result.default_address["line1"] == office.line1
    assert result.address["line1"] == office.line1
    assert any(isinstance(e, DefaultAddressChanged) for e in response.events)

    stored = await user_repo.get(registered_user.id)
    assert stored.default_invariant_holds()


@pytest.mark.asyncio
async def test_set_default_by_stable_id(user_repo, home, office):
    user = User(
        entity_id="u1",
        email="lan@example.com",
        password_hash="h",
        addresses=[
            Address(address_id="a1", is_default=True, **home.__dict__),
            Address(address_id="a2", **office.__dict__),
        ],
        default_address=DefaultAddressSnapshot(**home.__dict__),
    )
    await user_repo.save(user)

    response = await SetDefaultAddressHandler(user_repo).handle(
        SetDefaultAddress(user_id="u1", address_key="a2")
    )

    result = response.result
    assert [(a["address_id"], a["is_default"]) for a in result.addresses] == [
        ("a1", False),
        ("a2", True),
    ]
    stored = await user_repo.get("u1")
    assert stored.default_address == DefaultAddressSnapshot(**office.__dict__)


@pytest.mark.asyncio
async def test_update_by_position_for_legacy_addresses(user_repo, office):
    user = User(
        entity_id="u1",
        email="lan@example.com",
        addresses=[Address(line1=f"{i} Main St") for i in range(3)],
    )
    await user_repo.save(user)

    response = await UpdateAddressHandler(user_repo).handle(
        UpdateAddress(user_id="u1", address_key="1", address=office)
    )

    assert response.result.success
    stored = await user_repo.get("u1")
    assert [a.line1 for a in stored.addresses] == ["0 Main St", office.line1, "2 Main St"]
    assert stored.default_address is None


@pytest.mark.asyncio
async def test_delete_default_leaves_no_default(registered_user, user_repo, home, office):
    first = registered_user.add_address(home, is_default=True)
    registered_user.add_address(office)
    await user_repo.save(registered_user)

    response = await DeleteAddressHandler(user_repo).handle(
        DeleteAddress(user_id=registered_user.id, address_key=first.address_id)
    )

    result = response.result
    assert result.success
    assert result.default_address is None
    assert [a["is_default"] for a in result.addresses] == [False]


@pytest.mark.asyncio
async def test_unknown_address_is_not_found_and_nothing_saved(registered_user, home):
    repo = AsyncMock()
    repo.get.return_value = registered_user

    response = await DeleteAddressHandler(repo).handle(
        DeleteAddress(user_id=registered_user.id, address_key="5")
    )

    assert not response.result.success
    assert response.result.error_code == "ADDRESS_NOT_FOUND"
    repo.save.assert_not_awaited()


@pytest.mark.asyncio
async def test_unknown_user(user_repo):
    response = await AddAddressHandler(user_repo).handle(
        AddAddress(user_id="missing", address=AddressFields(line1="x"))
    )
    assert response.result.error_code == "USER_NOT_FOUND"


@pytest.mark.asyncio
async def test_persistence_failure_is_reported(registered_user, home):
    repo = AsyncMock()
    repo.get.return_value = registered_user
    repo.save.side_effect = PersistenceFailureError()

    response = await AddAddressHandler(repo).handle(
        AddAddress(user_id=registered_user.id, address=home)
    )

    assert response.result.error_code == "PERSISTENCE_FAILED"
    assert response.result.user_id == registered_user.id
