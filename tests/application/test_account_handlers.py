"""
Tests for register, login, logout and the account queries.
"""

import pytest

from storefront_account.application.commands import (
    RegisterUser,
    Login,
    Logout,
    RequestPasswordReset,
)
from storefront_account.application.handlers import (
    RegisterUserHandler,
    LoginHandler,
    LogoutHandler,
    RequestPasswordResetHandler,
    GetAccountProfileHandler,
    GetPendingChallengeHandler,
)
from storefront_account.application.queries import (
    GetAccountProfile,
    GetPendingChallenge,
)
from storefront_account.domain.events import UserLoggedIn, UserRegistered
from storefront_account.domain.value_objects import OTPPurpose
from storefront_account.infrastructure.adapters.otp import SessionOTPService


@pytest.fixture
def register(user_repo, hasher, session_backend):
    return RegisterUserHandler(
        user_repo=user_repo, password_hasher=hasher, session_backend=session_backend
    )


@pytest.fixture
def login(user_repo, hasher, session_backend):
    return LoginHandler(
        user_repo=user_repo, password_hasher=hasher, session_backend=session_backend
    )


# -----------------------------------------------------------------------------
# Register
# -----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_register_signs_user_in(register, user_repo, session_backend):
    response = await register.handle(
        RegisterUser(
            session_id="s1",
            email=" Lan@Example.com",
            password="abc123",
            full_name="Lan Nguyen",
        )
    )

    result = response.result
    assert result.success
    assert result.user.full_name == "Lan Nguyen"
    assert isinstance(response.events[0], UserRegistered)

    user = await user_repo.get_by_email("lan@example.com")
    assert user.has_local_password
    assert user.addresses == []
    assert user.default_address is None

    session_user = await session_backend.scope("s1").get("user")
    assert session_user == {"id": user.id, "full_name": "Lan Nguyen", "role": "customer"}


@pytest.mark.asyncio
async def test_register_with_address_makes_it_default(register, user_repo):
    await register.handle(
        RegisterUser(
            session_id="s1",
            email="lan@example.com",
            password="abc123",
            full_name="Lan Nguyen",
            line1="12 Hang Bac",
            city="Hanoi",
            phone="0901234567",
        )
    )

    user = await user_repo.get_by_email("lan@example.com")
    assert len(user.addresses) == 1
    assert user.addresses[0].is_default
    assert user.default_address.line1 == "12 Hang Bac"
    assert user.default_invariant_holds()


@pytest.mark.asyncio
async def test_register_existing_email_conflicts(register, registered_user):
    response = await register.handle(
        RegisterUser(session_id="s1", email="lan@example.com", password="abc123")
    )
    assert not response.result.success
    assert response.result.error_code == "EMAIL_ALREADY_REGISTERED"


@pytest.mark.asyncio
async def test_register_upgrades_guest(register, guest_user, user_repo):
    response = await register.handle(
        RegisterUser(
            session_id="s1",
            email="guest@example.com",
            password="abc123",
            full_name="Former Guest",
        )
    )

    assert response.result.success
    assert response.events[0].upgraded_from_guest

    user = await user_repo.get(guest_user.id)
    assert not user.is_guest
    assert user.has_local_password
    assert user.full_name == "Former Guest"


@pytest.mark.asyncio
async def test_register_enforces_password_policy(register, user_repo):
    response = await register.handle(
        RegisterUser(
            session_id="s1",
            email="lan@example.com",
            password="abc123",
            confirm_password="abc124",
        )
    )
    assert response.result.error_code == "PASSWORD_MISMATCH"
    assert await user_repo.get_by_email("lan@example.com") is None


# -----------------------------------------------------------------------------
# Login / Logout
# -----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_login_success(login, registered_user, session_backend):
    response = await login.handle(
        Login(session_id="s1", email="lan@example.com", password="abc123")
    )

    assert response.result.success
    assert response.result.user.id == registered_user.id
    assert isinstance(response.events[0], UserLoggedIn)
    assert (await session_backend.scope("s1").get("user"))["id"] == registered_user.id


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "email, password",
    [
        ("lan@example.com", "wrong"),
        ("nobody@example.com", "abc123"),
        ("guest@example.com", ""),
    ],
)
async def test_login_failures_are_indistinguishable(
    login, registered_user, guest_user, session_backend, email, password
):
    response = await login.handle(Login(session_id="s1", email=email, password=password))

    assert not response.result.success
    assert response.result.error_code == "INVALID_LOGIN"
    assert response.result.error_message == "Invalid email or password"
    assert await session_backend.scope("s1").get("user") is None


@pytest.mark.asyncio
async def test_logout_clears_session(session_backend):
    session = session_backend.scope("s1")
    await session.set("user", {"id": "u1"})
    await session.set("otp:change-password", {"code": "123456"})

    response = await LogoutHandler(session_backend).handle(Logout(session_id="s1"))

    assert response.result.success
    assert await session.get("user") is None
    assert await session.get("otp:change-password") is None


# -----------------------------------------------------------------------------
# Queries
# -----------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_profile_query(registered_user, user_repo, home):
    registered_user.add_address(home, is_default=True)
    await user_repo.save(registered_user)

    response = await GetAccountProfileHandler(user_repo).handle(
        GetAccountProfile(user_id=registered_user.id)
    )

    profile = response.result
    assert profile.email == "lan@example.com"
    assert profile.has_local_password
    assert len(profile.addresses) == 1
    assert profile.default_address["line1"] == home.line1
    assert profile.default_address["is_default"] is True


@pytest.mark.asyncio
async def test_profile_query_unknown_user(user_repo):
    response = await GetAccountProfileHandler(user_repo).handle(
        GetAccountProfile(user_id="missing")
    )
    assert response.result is None


@pytest.mark.asyncio
async def test_pending_challenge_query(
    registered_user, user_repo, otp_service, session_backend
):
    handler = GetPendingChallengeHandler(otp_service, session_backend)
    query = GetPendingChallenge(session_id="s1", purpose=OTPPurpose.RESET_PASSWORD)

    assert not (await handler.handle(query)).result.pending

    await RequestPasswordResetHandler(user_repo, otp_service, session_backend).handle(
        RequestPasswordReset(session_id="s1", email="lan@example.com")
    )

    result = (await handler.handle(query)).result
    assert result.pending
    assert result.purpose == "reset-password"
    assert result.email == "l****@example.com"
    assert not result.expired

    other = GetPendingChallenge(session_id="s1", purpose=OTPPurpose.CHANGE_PASSWORD)
    assert not (await handler.handle(other)).result.pending


@pytest.mark.asyncio
async def test_pending_challenge_expiry_uses_service_clock(
    registered_user, user_repo, email_sender, session_backend, clock
):
    # The frozen clock is in the past, so the wall clock would call it expired
    otp_service = SessionOTPService(email_sender=email_sender, clock=clock)
    await RequestPasswordResetHandler(user_repo, otp_service, session_backend).handle(
        RequestPasswordReset(session_id="s1", email="lan@example.com")
    )
    handler = GetPendingChallengeHandler(otp_service, session_backend)
    query = GetPendingChallenge(session_id="s1", purpose=OTPPurpose.RESET_PASSWORD)

    assert not (await handler.handle(query)).result.expired

    clock.advance(61)
    assert (await handler.handle(query)).result.expired
