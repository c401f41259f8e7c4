"""
Domain value objects for the storefront account.

Enums for roles, sign-in providers and OTP purposes, the address
structures that make up a user's address book, and the password policy
applied before a credential is replaced.
"""

from dataclasses import dataclass, asdict
from enum import Enum
from typing import Optional, Any

from storefront_account.domain.errors import (
    PasswordTooShortError,
    PasswordTooLongError,
    PasswordConfirmationMismatchError,
)


class UserRole(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class AuthProvider(str, Enum):
    """Where the account was created."""

    LOCAL = "local"
    GOOGLE = "google"
    FACEBOOK = "facebook"


class OTPPurpose(str, Enum):
    """
    Workflow that issued a challenge.

    Challenges are stored under a purpose-scoped session key so a
    password change and a password reset never overwrite each other.
    """

    CHANGE_PASSWORD = "change-password"
    RESET_PASSWORD = "reset-password"

    @property
    def session_key(self) -> str:
        return f"otp:{self.value}"


def obfuscate_email(email: str) -> str:
    """Obfuscate email for display: j****@example.com"""
    if "@" not in email:
        return "****"
    local, domain = email.rsplit("@", 1)
    obfuscated = local[0] + "****" if len(local) > 1 else local + "****"
    return f"{obfuscated}@{domain}"


# ═══════════════════════════════════════════════════════════════
# ADDRESSES
# ═══════════════════════════════════════════════════════════════

ADDRESS_FIELDS = ("full_name", "phone", "line1", "city", "district", "ward")


@dataclass(frozen=True)
class AddressFields:
    """The mutable fields of a shipping address, as submitted by a form."""

    full_name: str = ""
    phone: str = ""
    line1: str = ""
    city: str = ""
    district: str = ""
    ward: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AddressFields":
        return cls(**{name: data.get(name) or "" for name in ADDRESS_FIELDS})


@dataclass
class Address:
    """
    A shipping address owned by one user.

    ``address_id`` is the stable identifier. Addresses loaded from older
    records may not have one and are then addressed by position.
    """

    full_name: str = ""
    phone: str = ""
    line1: str = ""
    city: str = ""
    district: str = ""
    ward: str = ""
    is_default: bool = False
    address_id: Optional[str] = None

    @property
    def fields(self) -> AddressFields:
        return AddressFields(**{name: getattr(self, name) for name in ADDRESS_FIELDS})

    def apply(self, fields: AddressFields) -> None:
        """Overwrite the mutable fields."""
        for name in ADDRESS_FIELDS:
            setattr(self, name, getattr(fields, name))

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Address":
        return cls(
            **{name: data.get(name) or "" for name in ADDRESS_FIELDS},
            is_default=bool(data.get("is_default", False)),
            address_id=data.get("address_id"),
        )


@dataclass(frozen=True)
class DefaultAddressSnapshot:
    """
    Denormalised copy of the default address stored on the user.

    This is a cache: the ``is_default`` flags of the address book are the
    source of truth.
    """

    full_name: str = ""
    phone: str = ""
    line1: str = ""
    city: str = ""
    district: str = ""
    ward: str = ""

    @classmethod
    def of(cls, address: Address) -> "DefaultAddressSnapshot":
        return cls(**asdict(address.fields))

    def matches(self, address: Address) -> bool:
        return self == DefaultAddressSnapshot.of(address)

    def to_dict(self) -> dict[str, Any]:
        return {**asdict(self), "is_default": True}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DefaultAddressSnapshot":
        return cls(**{name: data.get(name) or "" for name in ADDRESS_FIELDS})


class ResolutionKind(str, Enum):
    BY_ID = "by_id"
    BY_INDEX = "by_index"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class AddressResolution:
    """Outcome of resolving an external address identifier."""

    kind: ResolutionKind
    index: Optional[int] = None

    @property
    def found(self) -> bool:
        return self.kind != ResolutionKind.NOT_FOUND


# ═══════════════════════════════════════════════════════════════
# PASSWORD POLICY
# ═══════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class PasswordPolicy:
    """
    Rules a new password must satisfy before it is hashed.

    ``max_bytes`` is bcrypt's input limit; longer secrets would be
    rejected by the hasher.
    """

    min_length: int = 6
    max_bytes: int = 72

    def validate(self, new_password: Optional[str], confirmation: Optional[str]) -> str:
        """
        Check length and confirmation, in that order.

        Returns:
            The validated password

        Raises:
            PasswordTooShortError, PasswordTooLongError,
            PasswordConfirmationMismatchError
        """
        if not new_password or len(new_password) < self.min_length:
            raise PasswordTooShortError(self.min_length)
        if len(new_password.encode("utf-8")) > self.max_bytes:
            raise PasswordTooLongError(self.max_bytes)
        if new_password != confirmation:
            raise PasswordConfirmationMismatchError()
        return new_password
