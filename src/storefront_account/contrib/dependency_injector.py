"""
Dependency Injector integration for storefront-account.

Provides an IoC Container with pre-configured account services. The
defaults are in-memory adapters; host applications override providers
for Redis sessions, SQLAlchemy persistence or SMTP delivery.

Usage:
    from storefront_account.contrib.dependency_injector import StorefrontContainer

    container = StorefrontContainer()
    container.config.from_dict({"otp": {"ttl_seconds": 120}})
    container.session_backend.override(
        providers.Singleton(RedisSessionBackend.from_url, "redis://localhost")
    )
"""

from typing import Optional

from dependency_injector import containers, providers

from storefront_account.ddd import DomainEvent, Mediator
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
)
from storefront_account.domain.events import PasswordChanged
from storefront_account.domain.value_objects import PasswordPolicy
from storefront_account.infrastructure.adapters.communication import (
    ConsoleEmailSender,
)
from storefront_account.infrastructure.adapters.hashing import BcryptPasswordHasher
from storefront_account.infrastructure.adapters.otp import SessionOTPService
from storefront_account.infrastructure.adapters.repositories import (
    InMemoryUserRepository,
)
from storefront_account.infrastructure.adapters.session import (
    InMemorySessionBackend,
)

DEFAULT_CONFIG = {
    "otp": {"ttl_seconds": 60, "code_length": 6},
    "password": {"min_length": 6, "bcrypt_rounds": 10},
    "mail": {
        "app_name": "HuongHan Store",
        "host": None,
        "port": 587,
        "user": None,
        "password": None,
        "use_starttls": True,
        "default_from": None,
    },
    "session": {"cookie_name": "storefront_session", "ttl_seconds": 86400},
    "redis": {"url": None},
    "database": {"url": None},
}


def build_mediator(
    command_handlers: dict,
    query_handlers: dict,
    event_handlers: Optional[dict] = None,
) -> Mediator:
    """Create a Mediator with every handler provider registered."""
    mediator = Mediator()
    mediator.register_all(command_handlers)
    mediator.register_all(query_handlers)
    mediator.register_event_handlers(event_handlers or {})
    return mediator


class StorefrontContainer(containers.DeclarativeContainer):
    """
    IoC Container for account services.

    External dependencies (can be overridden by host app):
    - session_backend: SessionBackend (default: InMemorySessionBackend)
    - user_repo: UserRepository (default: InMemoryUserRepository)
    - password_hasher: PasswordHasherPort (default: BcryptPasswordHasher)
    - email_sender: EmailSenderPort (default: ConsoleEmailSender)

    Config (see DEFAULT_CONFIG):
    - otp.ttl_seconds, otp.code_length
    - password.min_length, password.bcrypt_rounds
    - mail.*: app name and SMTP settings
    - session.cookie_name, session.ttl_seconds
    - redis.url, database.url
    """

    wiring_config = containers.WiringConfiguration(
        modules=[
            "storefront_account.contrib.fastapi.dependencies",
            "storefront_account.contrib.fastapi.router",
        ]
    )

    config = providers.Configuration(default=DEFAULT_CONFIG)

    # ═══════════════════════════════════════════════════════════════
    # DEFAULT ADAPTERS (can be overridden)
    # ═══════════════════════════════════════════════════════════════

    session_backend = providers.Singleton(InMemorySessionBackend)

    user_repo = providers.Singleton(InMemoryUserRepository)

    password_hasher = providers.Singleton(
        BcryptPasswordHasher,
        rounds=config.password.bcrypt_rounds,
    )

    email_sender = providers.Singleton(ConsoleEmailSender)

    password_policy = providers.Singleton(
        PasswordPolicy,
        min_length=config.password.min_length,
    )

    # ═══════════════════════════════════════════════════════════════
    # OTP SERVICE
    # ═══════════════════════════════════════════════════════════════

    otp_service = providers.Singleton(
        SessionOTPService,
        email_sender=email_sender,
        ttl_seconds=config.otp.ttl_seconds,
        code_length=config.otp.code_length,
        app_name=config.mail.app_name,
    )

    # ═══════════════════════════════════════════════════════════════
    # COMMAND HANDLERS
    # ═══════════════════════════════════════════════════════════════

    register_user_handler = providers.Factory(
        RegisterUserHandler,
        user_repo=user_repo,
        password_hasher=password_hasher,
        session_backend=session_backend,
        password_policy=password_policy,
    )

    login_handler = providers.Factory(
        LoginHandler,
        user_repo=user_repo,
        password_hasher=password_hasher,
        session_backend=session_backend,
    )

    logout_handler = providers.Factory(
        LogoutHandler,
        session_backend=session_backend,
    )

    request_password_change_handler = providers.Factory(
        RequestPasswordChangeHandler,
        user_repo=user_repo,
        password_hasher=password_hasher,
        otp_service=otp_service,
        session_backend=session_backend,
        password_policy=password_policy,
    )

    confirm_password_change_handler = providers.Factory(
        ConfirmPasswordChangeHandler,
        user_repo=user_repo,
        otp_service=otp_service,
        session_backend=session_backend,
    )

    request_password_reset_handler = providers.Factory(
        RequestPasswordResetHandler,
        user_repo=user_repo,
        otp_service=otp_service,
        session_backend=session_backend,
    )

    confirm_password_reset_handler = providers.Factory(
        ConfirmPasswordResetHandler,
        user_repo=user_repo,
        password_hasher=password_hasher,
        otp_service=otp_service,
        session_backend=session_backend,
        password_policy=password_policy,
    )

    add_address_handler = providers.Factory(AddAddressHandler, user_repo=user_repo)
    update_address_handler = providers.Factory(
        UpdateAddressHandler, user_repo=user_repo
    )
    set_default_address_handler = providers.Factory(
        SetDefaultAddressHandler, user_repo=user_repo
    )
    delete_address_handler = providers.Factory(
        DeleteAddressHandler, user_repo=user_repo
    )

    # ═══════════════════════════════════════════════════════════════
    # QUERY HANDLERS
    # ═══════════════════════════════════════════════════════════════

    get_account_profile_handler = providers.Factory(
        GetAccountProfileHandler,
        user_repo=user_repo,
    )

    get_pending_challenge_handler = providers.Factory(
        GetPendingChallengeHandler,
        otp_service=otp_service,
        session_backend=session_backend,
    )

    # ═══════════════════════════════════════════════════════════════
    # EVENT HANDLERS
    # ═══════════════════════════════════════════════════════════════

    account_audit_handler = providers.Factory(AccountAuditHandler)

    password_changed_notifier = providers.Factory(
        PasswordChangedNotifier,
        email_sender=email_sender,
        app_name=config.mail.app_name,
    )

    # ═══════════════════════════════════════════════════════════════
    # MEDIATOR
    # ═══════════════════════════════════════════════════════════════

    # Each dispatch builds a fresh handler from its provider
    command_handlers = providers.Dict(
        {
            RegisterUser: register_user_handler.provider,
            Login: login_handler.provider,
            Logout: logout_handler.provider,
            RequestPasswordChange: request_password_change_handler.provider,
            ConfirmPasswordChange: confirm_password_change_handler.provider,
            RequestPasswordReset: request_password_reset_handler.provider,
            ConfirmPasswordReset: confirm_password_reset_handler.provider,
            AddAddress: add_address_handler.provider,
            UpdateAddress: update_address_handler.provider,
            SetDefaultAddress: set_default_address_handler.provider,
            DeleteAddress: delete_address_handler.provider,
        }
    )

    query_handlers = providers.Dict(
        {
            GetAccountProfile: get_account_profile_handler.provider,
            GetPendingChallenge: get_pending_challenge_handler.provider,
        }
    )

    # A handler for DomainEvent receives every event
    event_handlers = providers.Dict(
        {
            DomainEvent: providers.List(account_audit_handler.provider),
            PasswordChanged: providers.List(password_changed_notifier.provider),
        }
    )

    mediator = providers.Singleton(
        build_mediator,
        command_handlers=command_handlers,
        query_handlers=query_handlers,
        event_handlers=event_handlers,
    )


__all__ = ["StorefrontContainer", "DEFAULT_CONFIG", "build_mediator"]
