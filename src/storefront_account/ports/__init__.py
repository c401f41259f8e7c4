"""Port interfaces (Protocols) for infrastructure adapters."""

from storefront_account.ports.session import (
    SessionStore,
    SessionBackend,
)
from storefront_account.ports.persistence import (
    UserRepository,
)
from storefront_account.ports.hashing import (
    PasswordHasherPort,
)
from storefront_account.ports.communication import (
    EmailMessage,
    VerificationCodeEmail,
    PasswordChangedEmail,
    EmailSenderPort,
)
from storefront_account.ports.otp import (
    OTPServicePort,
)

__all__ = [
    # Session
    "SessionStore",
    "SessionBackend",
    # Persistence
    "UserRepository",
    # Hashing
    "PasswordHasherPort",
    # Communication
    "EmailMessage",
    "VerificationCodeEmail",
    "PasswordChangedEmail",
    "EmailSenderPort",
    # OTP
    "OTPServicePort",
]
