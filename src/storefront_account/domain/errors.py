"""
Domain errors for the storefront account system.

These errors provide a consistent interface for reporting failures
across the credential workflows, the address book and the adapters.
Handlers turn them into failed results; the HTTP layer maps their
codes to status codes.
"""

from typing import Optional, Any


class StorefrontDomainError(Exception):
    """Base class for all account domain errors."""

    def __init__(
        self,
        message: str,
        code: str = "ACCOUNT_ERROR",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


# ═══════════════════════════════════════════════════════════════
# VALIDATION
# ═══════════════════════════════════════════════════════════════


class ValidationError(StorefrontDomainError):
    """Raised when submitted values violate a policy. The user may re-submit."""

    def __init__(
        self,
        message: str = "Invalid input",
        code: str = "VALIDATION_ERROR",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


class PasswordTooShortError(ValidationError):
    def __init__(self, min_length: int = 6):
        super().__init__(
            f"New password must be at least {min_length} characters",
            "PASSWORD_TOO_SHORT",
            {"min_length": min_length},
        )


class PasswordTooLongError(ValidationError):
    def __init__(self, max_bytes: int = 72):
        super().__init__(
            f"New password must not exceed {max_bytes} bytes",
            "PASSWORD_TOO_LONG",
            {"max_bytes": max_bytes},
        )


class PasswordConfirmationMismatchError(ValidationError):
    def __init__(self):
        super().__init__(
            "Password confirmation does not match", "PASSWORD_MISMATCH"
        )


# ═══════════════════════════════════════════════════════════════
# AUTHENTICATION
# ═══════════════════════════════════════════════════════════════


class AuthenticationError(StorefrontDomainError):
    """Raised when authentication fails (wrong password, not logged in, etc.)."""

    def __init__(
        self,
        message: str = "Authentication failed",
        code: str = "AUTHENTICATION_FAILED",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


class WrongCurrentPasswordError(AuthenticationError):
    def __init__(self):
        super().__init__("Current password is incorrect", "WRONG_CURRENT_PASSWORD")


class InvalidLoginError(AuthenticationError):
    """Same message for unknown email and wrong password."""

    def __init__(self):
        super().__init__("Invalid email or password", "INVALID_LOGIN")


class NotLoggedInError(AuthenticationError):
    def __init__(self):
        super().__init__("Login required", "NOT_LOGGED_IN")


# ═══════════════════════════════════════════════════════════════
# OTP
# ═══════════════════════════════════════════════════════════════


class OTPError(StorefrontDomainError):
    """Base class for OTP-related errors."""

    pass


class OTPNotFoundError(OTPError):
    """No pending challenge. The flow has to restart at the issuance step."""

    def __init__(
        self,
        message: str = "No pending verification code",
        code: str = "OTP_NOT_FOUND",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


class OTPExpiredError(OTPError):
    """The challenge expired and was discarded; a new code must be issued."""

    def __init__(
        self,
        message: str = "Verification code has expired, please try again",
        code: str = "OTP_EXPIRED",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


class OTPMismatchError(OTPError):
    """Wrong code. The challenge stays valid until it expires."""

    def __init__(
        self,
        message: str = "Verification code is incorrect",
        code: str = "OTP_MISMATCH",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


# ═══════════════════════════════════════════════════════════════
# ELIGIBILITY, ADDRESSES, INFRASTRUCTURE
# ═══════════════════════════════════════════════════════════════


class NotEligibleError(StorefrontDomainError):
    """
    Raised when no account with a local password matches a reset request.

    The message is deliberately generic so it does not reveal whether
    the email is registered.
    """

    def __init__(
        self,
        message: str = "Email not found or account is not eligible",
        code: str = "NOT_ELIGIBLE",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


class AddressNotFoundError(StorefrontDomainError):
    def __init__(self, identifier: str):
        super().__init__(
            "Address not found", "ADDRESS_NOT_FOUND", {"identifier": identifier}
        )
        self.identifier = identifier


class DeliveryFailureError(StorefrontDomainError):
    """Raised when the verification email could not be sent."""

    def __init__(
        self,
        message: str = "Could not send verification code, please try again",
        code: str = "DELIVERY_FAILED",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


class PersistenceFailureError(StorefrontDomainError):
    """Raised by repositories when a load or save fails."""

    def __init__(
        self,
        message: str = "An error occurred, please try again",
        code: str = "PERSISTENCE_FAILED",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


# ═══════════════════════════════════════════════════════════════
# USER MANAGEMENT
# ═══════════════════════════════════════════════════════════════


class UserManagementError(StorefrontDomainError):
    """Raised when a user management operation fails."""

    def __init__(
        self,
        message: str,
        code: str = "USER_MGMT_ERROR",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


class UserNotFoundError(UserManagementError):
    """Raised when a user is not found."""

    def __init__(
        self,
        message: str = "User not found",
        code: str = "USER_NOT_FOUND",
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)


class EmailAlreadyRegisteredError(UserManagementError):
    def __init__(self):
        super().__init__("Email is already in use", "EMAIL_ALREADY_REGISTERED")
