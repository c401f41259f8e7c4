"""
Domain events for the storefront account.

Domain events represent facts that have happened in the domain.
They are immutable records of state changes and are returned by the
command handlers alongside their results.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from storefront_account.ddd import DomainEvent


# ═══════════════════════════════════════════════════════════════
# ACCOUNT
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class UserRegistered(DomainEvent):
    """Raised when an account is created or a guest record is upgraded."""

    user_id: str
    email: str
    upgraded_from_guest: bool = False


@dataclass(frozen=True, kw_only=True)
class UserLoggedIn(DomainEvent):
    user_id: str


@dataclass(frozen=True, kw_only=True)
class PasswordChanged(DomainEvent):
    """Raised when a new password hash is committed."""

    user_id: str
    purpose: str  # change-password | reset-password
    email: str = ""


# ═══════════════════════════════════════════════════════════════
# OTP
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class OTPChallengeIssued(DomainEvent):
    user_id: str
    purpose: str
    expires_at: datetime


@dataclass(frozen=True, kw_only=True)
class OTPValidated(DomainEvent):
    user_id: str
    purpose: str


@dataclass(frozen=True, kw_only=True)
class OTPValidationFailed(DomainEvent):
    purpose: str
    reason: str  # error code


# ═══════════════════════════════════════════════════════════════
# ADDRESS BOOK
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True, kw_only=True)
class AddressAdded(DomainEvent):
    user_id: str
    index: int
    address_id: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class AddressUpdated(DomainEvent):
    user_id: str
    index: int
    address_id: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class AddressDeleted(DomainEvent):
    user_id: str
    index: int
    address_id: Optional[str] = None
    was_default: bool = False


@dataclass(frozen=True, kw_only=True)
class DefaultAddressChanged(DomainEvent):
    """Raised whenever an address becomes the sole default."""

    user_id: str
    index: int
    address_id: Optional[str] = None


@dataclass(frozen=True, kw_only=True)
class DefaultAddressCleared(DomainEvent):
    user_id: str


__all__ = [
    "UserRegistered",
    "UserLoggedIn",
    "PasswordChanged",
    "OTPChallengeIssued",
    "OTPValidated",
    "OTPValidationFailed",
    "AddressAdded",
    "AddressUpdated",
    "AddressDeleted",
    "DefaultAddressChanged",
    "DefaultAddressCleared",
]
