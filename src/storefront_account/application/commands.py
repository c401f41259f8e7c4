"""
Account commands.

Commands represent intentions to change state. Each command
is handled by a corresponding handler.

Every command that touches session state carries the opaque
``session_id`` of the browser session it came from.
"""

from dataclasses import dataclass, field
from typing import Optional

from storefront_account.ddd import Command
from storefront_account.domain.value_objects import AddressFields


# ═══════════════════════════════════════════════════════════════
# ACCOUNT
# ═══════════════════════════════════════════════════════════════


@dataclass(kw_only=True)
class RegisterUser(Command):
    """
    Create a local account, or upgrade a guest checkout record.

    When any address field is given, the address is added to the
    address book as the default.
    """

    session_id: str
    email: str
    password: str
    confirm_password: Optional[str] = None
    full_name: str = ""
    line1: str = ""
    city: str = ""
    phone: str = ""


@dataclass(kw_only=True)
class Login(Command):
    session_id: str
    email: str
    password: str


@dataclass(kw_only=True)
class Logout(Command):
    session_id: str


# ═══════════════════════════════════════════════════════════════
# CREDENTIALS
# ═══════════════════════════════════════════════════════════════


@dataclass(kw_only=True)
class RequestPasswordChange(Command):
    """
    Step 1 of a password change by a logged-in user.

    Checks the current password and the new one, then emails a code.
    """

    session_id: str
    user_id: str
    current_password: str
    new_password: str
    confirm_password: str


@dataclass(kw_only=True)
class ConfirmPasswordChange(Command):
    """Step 2: commit the new password once the emailed code matches."""

    session_id: str
    code: str


@dataclass(kw_only=True)
class RequestPasswordReset(Command):
    """Step 1 of a forgotten-password reset: email a code."""

    session_id: str
    email: str


@dataclass(kw_only=True)
class ConfirmPasswordReset(Command):
    """Step 2: code and new password are submitted together."""

    session_id: str
    code: str
    new_password: str
    confirm_password: str


# ═══════════════════════════════════════════════════════════════
# ADDRESS BOOK
# ═══════════════════════════════════════════════════════════════


@dataclass(kw_only=True)
class AddAddress(Command):
    user_id: str
    address: AddressFields = field(default_factory=AddressFields)
    is_default: bool = False


@dataclass(kw_only=True)
class UpdateAddress(Command):
    """
    Overwrite an address.

    ``address_key`` is the stable address id or, for addresses without
    one, the zero-based position in the address book.
    """

    user_id: str
    address_key: str
    address: AddressFields = field(default_factory=AddressFields)
    is_default: bool = False


@dataclass(kw_only=True)
class SetDefaultAddress(Command):
    user_id: str
    address_key: str


@dataclass(kw_only=True)
class DeleteAddress(Command):
    user_id: str
    address_key: str
