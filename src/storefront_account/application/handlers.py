"""
Account command and query handlers.

Handlers orchestrate the credential workflows and the address book by
coordinating between the User aggregate and the infrastructure ports.

Credential workflows:
1. Change: current password + new password -> emailed code -> commit
2. Reset: email -> emailed code -> code + new password -> commit

Domain errors never escape a handler; they become failed results.
"""

import logging
from typing import Any, Optional

from storefront_account.ddd import (
    CommandHandler,
    CommandResponse,
    QueryHandler,
    QueryResponse,
)
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
    CredentialResult,
    SessionUser,
    AccountResult,
    LogoutResult,
    AddressBookResult,
    AccountProfileResult,
    PendingChallengeResult,
)
from storefront_account.domain.aggregates import User
from storefront_account.domain.errors import (
    StorefrontDomainError,
    OTPError,
    OTPNotFoundError,
    WrongCurrentPasswordError,
    InvalidLoginError,
    NotEligibleError,
    UserNotFoundError,
    EmailAlreadyRegisteredError,
)
from storefront_account.domain.events import (
    OTPChallengeIssued,
    OTPValidated,
    OTPValidationFailed,
    UserLoggedIn,
)
from storefront_account.domain.value_objects import (
    AddressFields,
    OTPPurpose,
    PasswordPolicy,
    obfuscate_email,
)
from storefront_account.ports.hashing import PasswordHasherPort
from storefront_account.ports.otp import OTPServicePort
from storefront_account.ports.persistence import UserRepository
from storefront_account.ports.session import SessionBackend

logger = logging.getLogger("storefront_account.application.handlers")


def _respond(command: Any, result: Any, events: Optional[list] = None) -> CommandResponse:
    return CommandResponse(
        result=result,
        events=events or [],
        correlation_id=command.correlation_id,
        causation_id=command.command_id,
    )


def _normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


# ═══════════════════════════════════════════════════════════════
# ACCOUNT
# ═══════════════════════════════════════════════════════════════


class RegisterUserHandler(CommandHandler[AccountResult]):
    """
    Create a local account and sign it in.

    An email that belongs to a guest checkout record upgrades that record
    instead of creating a second user.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        password_hasher: PasswordHasherPort,
        session_backend: SessionBackend,
        password_policy: Optional[PasswordPolicy] = None,
    ):
        super().__init__()
        self.user_repo = user_repo
        self.password_hasher = password_hasher
        self.session_backend = session_backend
        self.password_policy = password_policy or PasswordPolicy()

    async def handle(self, command: RegisterUser) -> CommandResponse[AccountResult]:
        email = _normalize_email(command.email)
        try:
            confirmation = (
                command.password
                if command.confirm_password is None
                else command.confirm_password
            )
            self.password_policy.validate(command.password, confirmation)

            user = await self.user_repo.get_by_email(email)
            if user is not None and not user.is_guest:
                raise EmailAlreadyRegisteredError()

            password_hash = await self.password_hasher.hash(command.password)
            if user is None:
                user = User.register(
                    email=email,
                    password_hash=password_hash,
                    full_name=command.full_name,
                )
            else:
                user.upgrade_guest(password_hash, full_name=command.full_name)

            if command.line1 or command.city or command.phone:
                user.add_address(
                    AddressFields(
                        full_name=command.full_name,
                        phone=command.phone,
                        line1=command.line1,
                        city=command.city,
                    ),
                    is_default=True,
                )

            await self.user_repo.save(user)
        except StorefrontDomainError as e:
            logger.info(f"Registration rejected: {e.code}")
            return _respond(command, AccountResult.failed(e))

        session_user = SessionUser.of(user)
        session = self.session_backend.scope(command.session_id)
        await session.set(SESSION_USER_KEY, session_user.to_dict())

        logger.info(f"Registered user {user.id}")
        return _respond(command, AccountResult.signed_in(session_user), user.collect_events())


class LoginHandler(CommandHandler[AccountResult]):
    """
    Check email and password and bind the user to the session.

    Unknown email, accounts without a local password and wrong passwords
    all fail with the same error.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        password_hasher: PasswordHasherPort,
        session_backend: SessionBackend,
    ):
        super().__init__()
        self.user_repo = user_repo
        self.password_hasher = password_hasher
        self.session_backend = session_backend

    async def handle(self, command: Login) -> CommandResponse[AccountResult]:
        try:
            user = await self.user_repo.get_by_email(_normalize_email(command.email))
            if user is None or not user.has_local_password:
                raise InvalidLoginError()
            if not await self.password_hasher.verify(
                command.password, user.password_hash
            ):
                raise InvalidLoginError()
        except StorefrontDomainError as e:
            return _respond(command, AccountResult.failed(e))

        session_user = SessionUser.of(user)
        session = self.session_backend.scope(command.session_id)
        await session.set(SESSION_USER_KEY, session_user.to_dict())

        logger.debug(f"User {user.id} logged in")
        return _respond(
            command,
            AccountResult.signed_in(session_user),
            [UserLoggedIn(user_id=user.id, correlation_id=command.correlation_id)],
        )


class LogoutHandler(CommandHandler[LogoutResult]):
    """Drop every key of the session, pending challenges included."""

    def __init__(self, session_backend: SessionBackend):
        super().__init__()
        self.session_backend = session_backend

    async def handle(self, command: Logout) -> CommandResponse[LogoutResult]:
        await self.session_backend.scope(command.session_id).clear()
        return _respond(
            command, LogoutResult(success=True, session_id=command.session_id)
        )


# ═══════════════════════════════════════════════════════════════
# PASSWORD CHANGE
# ═══════════════════════════════════════════════════════════════


class RequestPasswordChangeHandler(CommandHandler[CredentialResult]):
    """
    Issue a change-password challenge.

    The new password is validated and hashed up front; only its hash is
    kept in the challenge payload until the code is confirmed.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        password_hasher: PasswordHasherPort,
        otp_service: OTPServicePort,
        session_backend: SessionBackend,
        password_policy: Optional[PasswordPolicy] = None,
    ):
        super().__init__()
        self.user_repo = user_repo
        self.password_hasher = password_hasher
        self.otp_service = otp_service
        self.session_backend = session_backend
        self.password_policy = password_policy or PasswordPolicy()

    async def handle(
        self, command: RequestPasswordChange
    ) -> CommandResponse[CredentialResult]:
        purpose = OTPPurpose.CHANGE_PASSWORD
        try:
            user = await self.user_repo.get(command.user_id)
            if user is None:
                raise UserNotFoundError()

            if not user.has_local_password or not await self.password_hasher.verify(
                command.current_password, user.password_hash
            ):
                raise WrongCurrentPasswordError()

            self.password_policy.validate(
                command.new_password, command.confirm_password
            )
            new_hash = await self.password_hasher.hash(command.new_password)

            challenge = await self.otp_service.issue(
                self.session_backend.scope(command.session_id),
                purpose,
                user_id=user.id,
                email=user.email,
                payload={"new_password_hash": new_hash},
            )
        except StorefrontDomainError as e:
            logger.info(f"Password change request rejected: {e.code}")
            return _respond(command, CredentialResult.failed(e))

        return _respond(
            command,
            CredentialResult.otp_sent(obfuscate_email(user.email)),
            [
                OTPChallengeIssued(
                    user_id=user.id,
                    purpose=purpose.value,
                    expires_at=challenge.expires_at,
                    correlation_id=command.correlation_id,
                )
            ],
        )


class ConfirmPasswordChangeHandler(CommandHandler[CredentialResult]):
    """
    Commit a pending password change once the code matches.

    The challenge is removed only after the new hash is saved, so a
    failed save can be retried with the same code.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        otp_service: OTPServicePort,
        session_backend: SessionBackend,
    ):
        super().__init__()
        self.user_repo = user_repo
        self.otp_service = otp_service
        self.session_backend = session_backend

    async def handle(
        self, command: ConfirmPasswordChange
    ) -> CommandResponse[CredentialResult]:
        purpose = OTPPurpose.CHANGE_PASSWORD
        session = self.session_backend.scope(command.session_id)

        try:
            challenge = await self.otp_service.verify(
                session, purpose, command.code, consume=False
            )
        except OTPError as e:
            return _respond(
                command,
                CredentialResult.failed(e),
                [OTPValidationFailed(purpose=purpose.value, reason=e.code)],
            )

        try:
            new_hash = challenge.payload.get("new_password_hash")
            if not new_hash:
                await self.otp_service.discard(session, purpose)
                raise OTPNotFoundError()

            user = await self.user_repo.get(challenge.user_id)
            if user is None:
                await self.otp_service.discard(session, purpose)
                raise UserNotFoundError()

            user.set_password_hash(new_hash, purpose)
            await self.user_repo.save(user)
        except StorefrontDomainError as e:
            logger.warning(f"Password change not committed: {e.code}")
            return _respond(command, CredentialResult.failed(e))

        await self.otp_service.discard(session, purpose)
        logger.info(f"Password changed for user {user.id}")

        events = [OTPValidated(user_id=user.id, purpose=purpose.value)]
        events.extend(user.collect_events())
        return _respond(command, CredentialResult.updated(), events)


# ═══════════════════════════════════════════════════════════════
# PASSWORD RESET
# ═══════════════════════════════════════════════════════════════


class RequestPasswordResetHandler(CommandHandler[CredentialResult]):
    """
    Email a reset code to an account that has a local password.

    Unknown emails and accounts without a local password get the same
    generic error and no email is sent.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        otp_service: OTPServicePort,
        session_backend: SessionBackend,
    ):
        super().__init__()
        self.user_repo = user_repo
        self.otp_service = otp_service
        self.session_backend = session_backend

    async def handle(
        self, command: RequestPasswordReset
    ) -> CommandResponse[CredentialResult]:
        purpose = OTPPurpose.RESET_PASSWORD
        try:
            user = await self.user_repo.get_by_email(_normalize_email(command.email))
            if user is None or not user.has_local_password:
                raise NotEligibleError()

            challenge = await self.otp_service.issue(
                self.session_backend.scope(command.session_id),
                purpose,
                user_id=user.id,
                email=user.email,
                payload={"user_id": user.id},
            )
        except StorefrontDomainError as e:
            logger.info(f"Password reset request rejected: {e.code}")
            return _respond(command, CredentialResult.failed(e))

        return _respond(
            command,
            CredentialResult.otp_sent(obfuscate_email(user.email)),
            [
                OTPChallengeIssued(
                    user_id=user.id,
                    purpose=purpose.value,
                    expires_at=challenge.expires_at,
                    correlation_id=command.correlation_id,
                )
            ],
        )


class ConfirmPasswordResetHandler(CommandHandler[CredentialResult]):
    """
    Verify the reset code and set the new password in one step.

    A password that fails the policy keeps the challenge, so the user can
    re-submit with the same code until it expires.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        password_hasher: PasswordHasherPort,
        otp_service: OTPServicePort,
        session_backend: SessionBackend,
        password_policy: Optional[PasswordPolicy] = None,
    ):
        super().__init__()
        self.user_repo = user_repo
        self.password_hasher = password_hasher
        self.otp_service = otp_service
        self.session_backend = session_backend
        self.password_policy = password_policy or PasswordPolicy()

    async def handle(
        self, command: ConfirmPasswordReset
    ) -> CommandResponse[CredentialResult]:
        purpose = OTPPurpose.RESET_PASSWORD
        session = self.session_backend.scope(command.session_id)

        try:
            challenge = await self.otp_service.verify(
                session, purpose, command.code, consume=False
            )
        except OTPError as e:
            return _respond(
                command,
                CredentialResult.failed(e),
                [OTPValidationFailed(purpose=purpose.value, reason=e.code)],
            )

        try:
            self.password_policy.validate(
                command.new_password, command.confirm_password
            )

            user_id = challenge.payload.get("user_id") or challenge.user_id
            user = await self.user_repo.get(user_id)
            if user is None:
                await self.otp_service.discard(session, purpose)
                raise UserNotFoundError()

            new_hash = await self.password_hasher.hash(command.new_password)
            user.set_password_hash(new_hash, purpose)
            await self.user_repo.save(user)
        except StorefrontDomainError as e:
            logger.info(f"Password reset not committed: {e.code}")
            return _respond(command, CredentialResult.failed(e))

        await self.otp_service.discard(session, purpose)
        logger.info(f"Password reset for user {user.id}")

        events = [OTPValidated(user_id=user.id, purpose=purpose.value)]
        events.extend(user.collect_events())
        return _respond(
            command,
            CredentialResult.updated("Password reset successfully, please log in"),
            events,
        )


# ═══════════════════════════════════════════════════════════════
# ADDRESS BOOK
# ═══════════════════════════════════════════════════════════════


class _AddressBookHandler(CommandHandler[AddressBookResult]):
    """Load the user, apply one mutation, save. Nothing is saved on failure."""

    def __init__(self, user_repo: UserRepository):
        super().__init__()
        self.user_repo = user_repo

    def mutate(self, user: User, command: Any):
        raise NotImplementedError

    async def handle(self, command: Any) -> CommandResponse[AddressBookResult]:
        try:
            user = await self.user_repo.get(command.user_id)
            if user is None:
                raise UserNotFoundError()
            address = self.mutate(user, command)
            await self.user_repo.save(user)
        except StorefrontDomainError as e:
            logger.info(
                f"{type(command).__name__} failed for user {command.user_id}: {e.code}"
            )
            return _respond(
                command, AddressBookResult.failed(e, user_id=command.user_id)
            )

        return _respond(
            command, AddressBookResult.of(user, address), user.collect_events()
        )


class AddAddressHandler(_AddressBookHandler):
    def mutate(self, user: User, command: AddAddress):
        return user.add_address(command.address, is_default=command.is_default)


class UpdateAddressHandler(_AddressBookHandler):
    def mutate(self, user: User, command: UpdateAddress):
        return user.update_address(
            command.address_key, command.address, is_default=command.is_default
        )


class SetDefaultAddressHandler(_AddressBookHandler):
    def mutate(self, user: User, command: SetDefaultAddress):
        return user.set_default_address(command.address_key)


class DeleteAddressHandler(_AddressBookHandler):
    def mutate(self, user: User, command: DeleteAddress):
        return user.delete_address(command.address_key)


# ═══════════════════════════════════════════════════════════════
# QUERIES
# ═══════════════════════════════════════════════════════════════


class GetAccountProfileHandler(QueryHandler[Optional[AccountProfileResult]]):
    def __init__(self, user_repo: UserRepository):
        super().__init__()
        self.user_repo = user_repo

    async def handle(
        self, query: GetAccountProfile
    ) -> QueryResponse[Optional[AccountProfileResult]]:
        user = await self.user_repo.get(query.user_id)
        if user is None:
            return QueryResponse(result=None)
        return QueryResponse(result=AccountProfileResult.of(user))


class GetPendingChallengeHandler(QueryHandler[PendingChallengeResult]):
    """Report the challenge of a purpose without validating or removing it."""

    def __init__(self, otp_service: OTPServicePort, session_backend: SessionBackend):
        super().__init__()
        self.otp_service = otp_service
        self.session_backend = session_backend

    async def handle(
        self, query: GetPendingChallenge
    ) -> QueryResponse[PendingChallengeResult]:
        purpose = OTPPurpose(query.purpose)
        challenge = await self.otp_service.peek(
            self.session_backend.scope(query.session_id), purpose
        )
        if challenge is None:
            return QueryResponse(
                result=PendingChallengeResult(pending=False, purpose=purpose.value)
            )
        return QueryResponse(
            result=PendingChallengeResult(
                pending=True,
                purpose=purpose.value,
                email=obfuscate_email(challenge.email),
                expires_at=challenge.expires_at,
                expired=self.otp_service.is_expired(challenge),
            )
        )


__all__ = [
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
]
