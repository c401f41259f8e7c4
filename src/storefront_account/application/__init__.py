"""Application layer for the storefront account - Commands, Queries, Handlers, Results."""

from storefront_account.ddd import CommandResponse, QueryResponse

from storefront_account.application.commands import (
    RegisterUser,
    Login,
    Logout,
    RequestPasswordChange,
    ConfirmPasswordChange,
    RequestPasswordReset,
    ConfirmPasswordReset,
    AddAddress,
    UpdateAddress,
    SetDefaultAddress,
    DeleteAddress,
)
from storefront_account.application.queries import (
    GetAccountProfile,
    GetPendingChallenge,
)
from storefront_account.application.results import (
    SESSION_USER_KEY,
    CredentialStatus,
    CredentialResult,
    SessionUser,
    AccountResult,
    LogoutResult,
    AddressBookResult,
    AccountProfileResult,
    PendingChallengeResult,
)
from storefront_account.application.handlers import (
    RegisterUserHandler,
    LoginHandler,
    LogoutHandler,
    RequestPasswordChangeHandler,
    ConfirmPasswordChangeHandler,
    RequestPasswordResetHandler,
    ConfirmPasswordResetHandler,
    AddAddressHandler,
    UpdateAddressHandler,
    SetDefaultAddressHandler,
    DeleteAddressHandler,
    GetAccountProfileHandler,
    GetPendingChallengeHandler,
)
from storefront_account.application.event_handlers import (
    AccountAuditHandler,
    PasswordChangedNotifier,
    register_account_event_handlers,
)

__all__ = [
    "CommandResponse",
    "QueryResponse",
    # Commands
    "RegisterUser",
    "Login",
    "Logout",
    "RequestPasswordChange",
    "ConfirmPasswordChange",
    "RequestPasswordReset",
    "ConfirmPasswordReset",
    "AddAddress",
    "UpdateAddress",
    "SetDefaultAddress",
    "DeleteAddress",
    # Queries
    "GetAccountProfile",
    "GetPendingChallenge",
    # Results
    "SESSION_USER_KEY",
    "CredentialStatus",
    "CredentialResult",
    "SessionUser",
    "AccountResult",
    "LogoutResult",
    "AddressBookResult",
    "AccountProfileResult",
    "PendingChallengeResult",
    # Handlers
    "RegisterUserHandler",
    "LoginHandler",
    "LogoutHandler",
    "RequestPasswordChangeHandler",
    "ConfirmPasswordChangeHandler",
    "RequestPasswordResetHandler",
    "ConfirmPasswordResetHandler",
    "AddAddressHandler",
    "UpdateAddressHandler",
    "SetDefaultAddressHandler",
    "DeleteAddressHandler",
    "GetAccountProfileHandler",
    "GetPendingChallengeHandler",
    # Event handlers
    "AccountAuditHandler",
    "PasswordChangedNotifier",
    "register_account_event_handlers",
]
