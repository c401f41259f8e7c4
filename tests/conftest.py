"""
Pytest configuration for storefront-account tests.
"""

from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from unittest.mock import AsyncMock, MagicMock

from storefront_account.domain.aggregates import User
from storefront_account.domain.value_objects import AddressFields
from storefront_account.infrastructure.adapters.hashing import BcryptPasswordHasher
from storefront_account.infrastructure.adapters.otp import SessionOTPService
from storefront_account.infrastructure.adapters.repositories import (
    InMemoryUserRepository,
)
from storefront_account.infrastructure.adapters.session import InMemorySessionBackend
from storefront_account.ports.communication import EmailMessage
from storefront_account.ports.persistence import UserRepository


class CapturingEmailSender:
    """Email sender that keeps every message instead of delivering it."""

    def __init__(self):
        self.sent: list[EmailMessage] = []

    async def send(self, message: EmailMessage) -> None:
        self.sent.append(message)

    @property
    def last_code(self) -> str:
        """The verification code in the most recent message."""
        body = self.sent[-1].body_text
        return body.split("Your verification code is: ", 1)[1].split()[0]


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


# -----------------------------------------------------------------------------
# ADAPTERS
# -----------------------------------------------------------------------------


@pytest.fixture
def email_sender():
    return CapturingEmailSender()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def otp_service(email_sender):
    return SessionOTPService(email_sender=email_sender, ttl_seconds=60)


@pytest.fixture
def session_backend():
    return InMemorySessionBackend()


@pytest.fixture
def user_repo():
    return InMemoryUserRepository()


@pytest.fixture
def hasher():
    # Minimum cost keeps the suite fast
    return BcryptPasswordHasher(rounds=4)


# -----------------------------------------------------------------------------
# MOCKS
# -----------------------------------------------------------------------------


@pytest.fixture
def mock_user_repo():
    mock = MagicMock(spec=UserRepository)
    mock.get = AsyncMock(return_value=None)
    mock.get_by_email = AsyncMock(return_value=None)
    mock.save = AsyncMock()
    return mock


# -----------------------------------------------------------------------------
# USERS
# -----------------------------------------------------------------------------


@pytest.fixture
def home():
    return AddressFields(
        full_name="Lan Nguyen",
        phone="0901234567",
        line1="12 Hang Bac",
        city="Hanoi",
        district="Hoan Kiem",
        ward="Hang Bac",
    )


@pytest.fixture
def office():
    return AddressFields(
        full_name="Lan Nguyen",
        phone="0901234567",
        line1="5 Le Loi",
        city="Ho Chi Minh City",
        district="District 1",
        ward="Ben Nghe",
    )


@pytest_asyncio.fixture
async def registered_user(user_repo, hasher):
    """A local account with password 'abc123', saved in user_repo."""
    user = User.register(
        email="lan@example.com",
        password_hash=await hasher.hash("abc123"),
        full_name="Lan Nguyen",
    )
    user.collect_events()
    await user_repo.save(user)
    return user


@pytest_asyncio.fixture
async def guest_user(user_repo):
    """A guest checkout record without a password, saved in user_repo."""
    user = User(entity_id="guest-1", email="guest@example.com", is_guest=True)
    await user_repo.save(user)
    return user
