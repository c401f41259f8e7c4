"""
storefront-account: customer accounts for a small storefront.

Session-scoped OTP verification, password change and reset workflows,
and an address book with a single default address.
"""

__version__ = "0.1.0"

from storefront_account.ddd import Mediator
from storefront_account.domain import (
    User,
    OTPChallenge,
    Address,
    AddressFields,
    OTPPurpose,
    PasswordPolicy,
    StorefrontDomainError,
)
from storefront_account.factory import create_container, config_from_env

__all__ = [
    "__version__",
    "Mediator",
    "User",
    "OTPChallenge",
    "Address",
    "AddressFields",
    "OTPPurpose",
    "PasswordPolicy",
    "StorefrontDomainError",
    "create_container",
    "config_from_env",
]
