"""
Account result types.

These represent the outcomes of account operations. Handlers never
raise domain errors to their callers; a failure is reported as a result
carrying the error code and message.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Any, TYPE_CHECKING

from storefront_account.domain.errors import StorefrontDomainError

if TYPE_CHECKING:
    from storefront_account.domain.aggregates import User


# Session key holding the logged-in user
SESSION_USER_KEY = "user"


class CredentialStatus(str, Enum):
    """Status of a credential workflow step."""

    OTP_SENT = "otp_sent"
    UPDATED = "updated"
    FAILED = "failed"


@dataclass
class CredentialResult:
    """
    Result of a password change or reset step.

    Use factory methods to create instances.
    """

    status: CredentialStatus
    message: str = ""
    email: Optional[str] = None  # obfuscated recipient for OTP_SENT
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def otp_sent(cls, email: str) -> "CredentialResult":
        return cls(
            status=CredentialStatus.OTP_SENT,
            message="A verification code has been sent to your email",
            email=email,
        )

    @classmethod
    def updated(cls, message: str = "Password updated successfully") -> "CredentialResult":
        return cls(status=CredentialStatus.UPDATED, message=message)

    @classmethod
    def failed(cls, error: StorefrontDomainError) -> "CredentialResult":
        return cls(
            status=CredentialStatus.FAILED,
            error_code=error.code,
            error_message=error.message,
        )

    @property
    def is_success(self) -> bool:
        return self.status != CredentialStatus.FAILED

    @property
    def otp_required(self) -> bool:
        return self.status == CredentialStatus.OTP_SENT


@dataclass
class SessionUser:
    """The identity kept in the session after login."""

    id: str
    full_name: str = ""
    role: str = "customer"

    @classmethod
    def of(cls, user: "User") -> "SessionUser":
        return cls(id=user.id, full_name=user.full_name, role=user.role.value)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "full_name": self.full_name, "role": self.role}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionUser":
        return cls(
            id=data["id"],
            full_name=data.get("full_name") or "",
            role=data.get("role") or "customer",
        )


@dataclass
class AccountResult:
    """Result of register and login."""

    success: bool
    user: Optional[SessionUser] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def signed_in(cls, user: SessionUser) -> "AccountResult":
        return cls(success=True, user=user)

    @classmethod
    def failed(cls, error: StorefrontDomainError) -> "AccountResult":
        return cls(success=False, error_code=error.code, error_message=error.message)


@dataclass
class LogoutResult:
    success: bool
    session_id: Optional[str] = None


@dataclass
class AddressBookResult:
    """
    Result of an address book mutation.

    On success it carries the whole address book after the change so a
    caller can re-render without another read.
    """

    success: bool
    user_id: Optional[str] = None
    address: Optional[dict[str, Any]] = None  # the address acted on
    addresses: list[dict[str, Any]] = field(default_factory=list)
    default_address: Optional[dict[str, Any]] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @classmethod
    def of(cls, user: "User", address: Optional[Any] = None) -> "AddressBookResult":
        default = user.effective_default_address
        return cls(
            success=True,
            user_id=user.id,
            address=address.to_dict() if address is not None else None,
            addresses=[a.to_dict() for a in user.addresses],
            default_address=default.to_dict() if default else None,
        )

    @classmethod
    def failed(
        cls, error: StorefrontDomainError, user_id: Optional[str] = None
    ) -> "AddressBookResult":
        return cls(
            success=False,
            user_id=user_id,
            error_code=error.code,
            error_message=error.message,
        )


@dataclass
class AccountProfileResult:
    """Read model for the profile page."""

    user_id: str
    email: str
    full_name: str
    role: str
    provider: str
    is_guest: bool
    has_local_password: bool
    addresses: list[dict[str, Any]] = field(default_factory=list)
    default_address: Optional[dict[str, Any]] = None

    @classmethod
    def of(cls, user: "User") -> "AccountProfileResult":
        default = user.effective_default_address
        return cls(
            user_id=user.id,
            email=user.email,
            full_name=user.full_name,
            role=user.role.value,
            provider=user.provider.value,
            is_guest=user.is_guest,
            has_local_password=user.has_local_password,
            addresses=[a.to_dict() for a in user.addresses],
            default_address=default.to_dict() if default else None,
        )


@dataclass
class PendingChallengeResult:
    """Whether a verify page has a challenge to verify against."""

    pending: bool
    purpose: str
    email: Optional[str] = None  # obfuscated
    expires_at: Optional[datetime] = None
    expired: bool = False


__all__ = [
    "SESSION_USER_KEY",
    "CredentialStatus",
    "CredentialResult",
    "SessionUser",
    "AccountResult",
    "LogoutResult",
    "AddressBookResult",
    "AccountProfileResult",
    "PendingChallengeResult",
]
