"""Concrete adapter implementations."""

from storefront_account.infrastructure.adapters.communication import (
    ConsoleEmailSender,
)
from storefront_account.infrastructure.adapters.hashing import BcryptPasswordHasher
from storefront_account.infrastructure.adapters.otp import SessionOTPService
from storefront_account.infrastructure.adapters.repositories import (
    InMemoryUserRepository,
)
from storefront_account.infrastructure.adapters.session import (
    InMemorySessionBackend,
    InMemorySessionStore,
    RedisSessionBackend,
    RedisSessionStore,
)

__all__ = [
    "ConsoleEmailSender",
    "BcryptPasswordHasher",
    "SessionOTPService",
    "InMemoryUserRepository",
    "InMemorySessionBackend",
    "InMemorySessionStore",
    "RedisSessionBackend",
    "RedisSessionStore",
]
