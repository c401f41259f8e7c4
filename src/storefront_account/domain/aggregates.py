"""
Domain aggregates for the storefront account.

``User`` is the aggregate root: it owns the address book and keeps the
denormalised default-address snapshot consistent with it.
``OTPChallenge`` is the short-lived record of an issued verification
code; it only ever lives in session storage.
"""

import hmac
import re
import uuid
from datetime import datetime, timedelta
from typing import Optional, Any

from storefront_account.ddd import AggregateRoot, Entity, utcnow
from storefront_account.domain.errors import AddressNotFoundError
from storefront_account.domain.events import (
    UserRegistered,
    PasswordChanged,
    AddressAdded,
    AddressUpdated,
    AddressDeleted,
    DefaultAddressChanged,
    DefaultAddressCleared,
)
from storefront_account.domain.value_objects import (
    Address,
    AddressFields,
    AddressResolution,
    AuthProvider,
    DefaultAddressSnapshot,
    OTPPurpose,
    ResolutionKind,
    UserRole,
)

_INDEX_PATTERN = re.compile(r"[0-9]+")


def _parse_datetime(value: Any) -> Optional[datetime]:
    if isinstance(value, str):
        return datetime.fromisoformat(value)
    return value


# ═══════════════════════════════════════════════════════════════
# USER AGGREGATE ROOT
# ═══════════════════════════════════════════════════════════════


class User(AggregateRoot):
    """
    Aggregate root for a storefront customer.

    The address book follows one rule: at most one address has
    ``is_default`` set, and ``default_address`` mirrors that address's
    fields (or is ``None``). Only ``_promote`` and ``_clear_default``
    write the snapshot.

    Usage:
        user = User.register(email="a@example.com", password_hash=h, full_name="A")
        user.add_address(AddressFields(full_name="A", line1="1 Main St"), is_default=True)
        user.set_default_address("0")
        events = user.collect_events()
    """

    def __init__(
        self,
        entity_id: Optional[str] = None,
        email: str = "",
        password_hash: Optional[str] = None,
        full_name: str = "",
        role: UserRole = UserRole.CUSTOMER,
        provider: AuthProvider = AuthProvider.LOCAL,
        provider_id: Optional[str] = None,
        is_guest: bool = False,
        addresses: Optional[list[Address]] = None,
        default_address: Optional[DefaultAddressSnapshot] = None,
        updated_at: Optional[datetime] = None,
        **kwargs,
    ):
        super().__init__(entity_id=entity_id, **kwargs)
        self.email = email
        self.password_hash = password_hash
        self.full_name = full_name
        self.role = UserRole(role)
        self.provider = AuthProvider(provider)
        self.provider_id = provider_id
        # A local credential always means a full account
        self.is_guest = is_guest and not password_hash
        self.addresses: list[Address] = list(addresses or [])
        self.default_address = default_address
        self.updated_at = updated_at or self.created_at

    @classmethod
    def register(
        cls,
        email: str,
        password_hash: str,
        full_name: str = "",
    ) -> "User":
        """Factory for a new local account."""
        user = cls(
            entity_id=uuid.uuid4().hex,
            email=email,
            password_hash=password_hash,
            full_name=full_name,
            provider=AuthProvider.LOCAL,
        )
        user.add_domain_event(UserRegistered(user_id=user.id, email=email))
        return user

    @property
    def has_local_password(self) -> bool:
        return bool(self.password_hash)

    def upgrade_guest(self, password_hash: str, full_name: str = "") -> None:
        """Turn a guest checkout record into a full local account."""
        self.password_hash = password_hash
        self.full_name = full_name or self.full_name
        self.is_guest = False
        self.provider = AuthProvider.LOCAL
        self._touch()
        self.add_domain_event(
            UserRegistered(user_id=self.id, email=self.email, upgraded_from_guest=True)
        )

    def set_password_hash(self, password_hash: str, purpose: OTPPurpose) -> None:
        """Replace the stored credential digest."""
        self.password_hash = password_hash
        self.is_guest = False
        self._touch()
        self.add_domain_event(
            PasswordChanged(user_id=self.id, email=self.email, purpose=purpose.value)
        )

    # ═══════════════════════════════════════════════════════════════
    # ADDRESS BOOK
    # ═══════════════════════════════════════════════════════════════

    def resolve_address(self, identifier: str) -> AddressResolution:
        """
        Resolve an external identifier to a position in the address book.

        The stable ``address_id`` is tried first; otherwise a string of
        digits is taken as a zero-based index.
        """
        identifier = (identifier or "").strip()
        if identifier:
            for index, address in enumerate(self.addresses):
                if address.address_id and address.address_id == identifier:
                    return AddressResolution(ResolutionKind.BY_ID, index)

        if _INDEX_PATTERN.fullmatch(identifier):
            index = int(identifier)
            if index < len(self.addresses):
                return AddressResolution(ResolutionKind.BY_INDEX, index)

        return AddressResolution(ResolutionKind.NOT_FOUND)

    def _require_index(self, identifier: str) -> int:
        resolution = self.resolve_address(identifier)
        if not resolution.found:
            raise AddressNotFoundError(identifier)
        return resolution.index

    def get_address(self, identifier: str) -> Address:
        return self.addresses[self._require_index(identifier)]

    def add_address(self, fields: AddressFields, is_default: bool = False) -> Address:
        """Append an address; a default one becomes the sole default."""
        address = Address(address_id=uuid.uuid4().hex)
        address.apply(fields)
        self.addresses.append(address)
        index = len(self.addresses) - 1

        self.add_domain_event(
            AddressAdded(user_id=self.id, index=index, address_id=address.address_id)
        )
        if is_default:
            self._promote(index)

        self._touch()
        return address

    def update_address(
        self,
        identifier: str,
        fields: AddressFields,
        is_default: bool = False,
    ) -> Address:
        """
        Overwrite an address's fields.

        ``is_default=True`` promotes the address. Otherwise no other flag
        changes; an address that already is the default keeps that status
        and its new fields are copied into the snapshot.
        """
        index = self._require_index(identifier)
        address = self.addresses[index]
        address.apply(fields)

        self.add_domain_event(
            AddressUpdated(user_id=self.id, index=index, address_id=address.address_id)
        )
        if is_default or address.is_default:
            self._promote(index)

        self._touch()
        return address

    def set_default_address(self, identifier: str) -> Address:
        index = self._require_index(identifier)
        self._promote(index)
        self._touch()
        return self.addresses[index]

    def delete_address(self, identifier: str) -> Address:
        """Remove an address. Deleting the default leaves no default."""
        index = self._require_index(identifier)
        address = self.addresses.pop(index)

        self.add_domain_event(
            AddressDeleted(
                user_id=self.id,
                index=index,
                address_id=address.address_id,
                was_default=address.is_default,
            )
        )
        if address.is_default:
            self._clear_default()

        self._touch()
        return address

    @property
    def effective_default_address(self) -> Optional[DefaultAddressSnapshot]:
        """Snapshot, or the flagged address when the snapshot is missing."""
        if self.default_address is not None:
            return self.default_address
        for address in self.addresses:
            if address.is_default:
                return DefaultAddressSnapshot.of(address)
        return None

    def default_invariant_holds(self) -> bool:
        defaults = [a for a in self.addresses if a.is_default]
        if not defaults:
            return self.default_address is None
        return len(defaults) == 1 and (
            self.default_address is not None
            and self.default_address.matches(defaults[0])
        )

    def _promote(self, index: int) -> None:
        winner = self.addresses[index]
        for address in self.addresses:
            address.is_default = False
        winner.is_default = True
        self.default_address = DefaultAddressSnapshot.of(winner)
        self.add_domain_event(
            DefaultAddressChanged(
                user_id=self.id, index=index, address_id=winner.address_id
            )
        )

    def _clear_default(self) -> None:
        self.default_address = None
        self.add_domain_event(DefaultAddressCleared(user_id=self.id))

    def _touch(self) -> None:
        self.updated_at = utcnow()
        self.increment_version()

    # ═══════════════════════════════════════════════════════════════
    # SERIALIZATION
    # ═══════════════════════════════════════════════════════════════

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.id,
            "email": self.email,
            "password_hash": self.password_hash,
            "full_name": self.full_name,
            "role": self.role.value,
            "provider": self.provider.value,
            "provider_id": self.provider_id,
            "is_guest": self.is_guest,
            "addresses": [a.to_dict() for a in self.addresses],
            "default_address": self.default_address.to_dict()
            if self.default_address
            else None,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "User":
        default_address = data.get("default_address")
        return cls(
            entity_id=data.get("user_id"),
            email=data.get("email", ""),
            password_hash=data.get("password_hash"),
            full_name=data.get("full_name") or "",
            role=data.get("role") or UserRole.CUSTOMER,
            provider=data.get("provider") or AuthProvider.LOCAL,
            provider_id=data.get("provider_id"),
            is_guest=data.get("is_guest", False),
            addresses=[Address.from_dict(a) for a in data.get("addresses") or []],
            default_address=DefaultAddressSnapshot.from_dict(default_address)
            if default_address
            else None,
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
            version=data.get("version", 0),
        )


# ═══════════════════════════════════════════════════════════════
# OTP CHALLENGE
# ═══════════════════════════════════════════════════════════════


class OTPChallenge(Entity):
    """
    Entity representing a verification code sent by email.

    Bound to one session and one purpose. ``payload`` carries the flow
    data: the pre-computed password hash for a change, the target user id
    for a reset.
    """

    def __init__(
        self,
        entity_id: Optional[str] = None,
        user_id: str = "",
        email: str = "",
        code: str = "",
        purpose: OTPPurpose = OTPPurpose.CHANGE_PASSWORD,
        expires_at: Optional[datetime] = None,
        payload: Optional[dict[str, Any]] = None,
        **kwargs,
    ):
        super().__init__(entity_id=entity_id, **kwargs)
        self.user_id = user_id
        self.email = email
        self.code = code
        self.purpose = OTPPurpose(purpose)
        self.expires_at = expires_at or (self.created_at + timedelta(seconds=60))
        self.payload = dict(payload or {})

    @classmethod
    def create(
        cls,
        purpose: OTPPurpose,
        user_id: str,
        email: str,
        code: str,
        ttl_seconds: int = 60,
        payload: Optional[dict[str, Any]] = None,
        now: Optional[datetime] = None,
    ) -> "OTPChallenge":
        """Factory method to create a new challenge."""
        created_at = now or utcnow()
        return cls(
            entity_id=uuid.uuid4().hex,
            user_id=user_id,
            email=email,
            code=code,
            purpose=purpose,
            created_at=created_at,
            expires_at=created_at + timedelta(seconds=ttl_seconds),
            payload=payload,
        )

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utcnow()) > self.expires_at

    def matches(self, code: Optional[str]) -> bool:
        """Exact comparison of the submitted code."""
        if not isinstance(code, str):
            return False
        return hmac.compare_digest(code.encode(), self.code.encode())

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict for the session store."""
        return {
            "challenge_id": self.id,
            "user_id": self.user_id,
            "email": self.email,
            "code": self.code,
            "purpose": self.purpose.value,
            "created_at": self.created_at.isoformat(),
            "expires_at": self.expires_at.isoformat(),
            "payload": self.payload,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OTPChallenge":
        return cls(
            entity_id=data.get("challenge_id"),
            user_id=data.get("user_id", ""),
            email=data.get("email", ""),
            code=data.get("code", ""),
            purpose=OTPPurpose(data.get("purpose", OTPPurpose.CHANGE_PASSWORD.value)),
            created_at=_parse_datetime(data.get("created_at")),
            expires_at=_parse_datetime(data.get("expires_at")),
            payload=data.get("payload") or {},
        )


__all__ = [
    "User",
    "OTPChallenge",
]
