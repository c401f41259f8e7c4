"""Domain layer for the storefront account."""

from storefront_account.domain.errors import (
    StorefrontDomainError,
    ValidationError,
    PasswordTooShortError,
    PasswordTooLongError,
    PasswordConfirmationMismatchError,
    AuthenticationError,
    WrongCurrentPasswordError,
    InvalidLoginError,
    NotLoggedInError,
    OTPError,
    OTPNotFoundError,
    OTPExpiredError,
    OTPMismatchError,
    NotEligibleError,
    AddressNotFoundError,
    DeliveryFailureError,
    PersistenceFailureError,
    UserManagementError,
    UserNotFoundError,
    EmailAlreadyRegisteredError,
)
from storefront_account.domain.value_objects import (
    UserRole,
    AuthProvider,
    OTPPurpose,
    AddressFields,
    Address,
    DefaultAddressSnapshot,
    AddressResolution,
    ResolutionKind,
    PasswordPolicy,
    obfuscate_email,
)
from storefront_account.domain.events import (
    UserRegistered,
    UserLoggedIn,
    PasswordChanged,
    OTPChallengeIssued,
    OTPValidated,
    OTPValidationFailed,
    AddressAdded,
    AddressUpdated,
    AddressDeleted,
    DefaultAddressChanged,
    DefaultAddressCleared,
)
from storefront_account.domain.aggregates import User, OTPChallenge

__all__ = [
    # Errors
    "StorefrontDomainError",
    "ValidationError",
    "PasswordTooShortError",
    "PasswordTooLongError",
    "PasswordConfirmationMismatchError",
    "AuthenticationError",
    "WrongCurrentPasswordError",
    "InvalidLoginError",
    "NotLoggedInError",
    "OTPError",
    "OTPNotFoundError",
    "OTPExpiredError",
    "OTPMismatchError",
    "NotEligibleError",
    "AddressNotFoundError",
    "DeliveryFailureError",
    "PersistenceFailureError",
    "UserManagementError",
    "UserNotFoundError",
    "EmailAlreadyRegisteredError",
    # Value Objects
    "UserRole",
    "AuthProvider",
    "OTPPurpose",
    "AddressFields",
    "Address",
    "DefaultAddressSnapshot",
    "AddressResolution",
    "ResolutionKind",
    "PasswordPolicy",
    "obfuscate_email",
    # Events
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
    # Aggregates & Entities
    "User",
    "OTPChallenge",
]
