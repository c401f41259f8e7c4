"""
OTP Service Adapter.

Session-scoped implementation of OTPServicePort. Codes are generated
with pyotp, stored in the caller's session under a purpose-scoped key
and delivered by email. Expiry is checked lazily when a code is
verified; there is no background sweep.
"""

import logging
from datetime import datetime
from typing import Optional, Any, Callable

import pyotp

from storefront_account.ddd import utcnow
from storefront_account.domain.aggregates import OTPChallenge
from storefront_account.domain.errors import (
    DeliveryFailureError,
    OTPNotFoundError,
    OTPExpiredError,
    OTPMismatchError,
)
from storefront_account.domain.value_objects import OTPPurpose, obfuscate_email
from storefront_account.ports.communication import (
    EmailSenderPort,
    VerificationCodeEmail,
)
from storefront_account.ports.otp import OTPServicePort
from storefront_account.ports.session import SessionStore

logger = logging.getLogger("storefront_account.infrastructure.adapters.otp")


class SessionOTPService(OTPServicePort):
    """
    Email OTP bound to a browser session.

    Usage:
        service = SessionOTPService(email_sender=ConsoleEmailSender())
        session = backend.scope(session_id)
        await service.issue(session, OTPPurpose.RESET_PASSWORD, user.id, user.email)
        challenge = await service.verify(session, OTPPurpose.RESET_PASSWORD, "042917")
    """

    def __init__(
        self,
        email_sender: EmailSenderPort,
        ttl_seconds: int = 60,
        code_length: int = 6,
        app_name: str = "HuongHan Store",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.email_sender = email_sender
        self.ttl_seconds = ttl_seconds
        self.code_length = code_length
        self.app_name = app_name
        self._clock = clock or utcnow

    def _generate_code(self) -> str:
        # Zero-padded to code_length by pyotp
        totp = pyotp.TOTP(pyotp.random_base32(), digits=self.code_length)
        return totp.now()

    def _build_email(self, challenge: OTPChallenge) -> VerificationCodeEmail:
        return VerificationCodeEmail(
            recipient=challenge.email,
            code=challenge.code,
            purpose=challenge.purpose,
            expires_at=challenge.expires_at,
            ttl_seconds=self.ttl_seconds,
            app_name=self.app_name,
        )

    def is_expired(self, challenge: OTPChallenge) -> bool:
        """Expiry as judged by this service's clock, the one verify uses."""
        return challenge.is_expired(self._clock())

    async def issue(
        self,
        session: SessionStore,
        purpose: OTPPurpose,
        user_id: str,
        email: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> OTPChallenge:
        challenge = OTPChallenge.create(
            purpose=purpose,
            user_id=user_id,
            email=email,
            code=self._generate_code(),
            ttl_seconds=self.ttl_seconds,
            payload=payload,
            now=self._clock(),
        )
        await session.set(purpose.session_key, challenge.to_dict())

        try:
            await self.email_sender.send(self._build_email(challenge).render())
        except Exception as e:
            await session.delete(purpose.session_key)
            logger.error(
                f"Failed to deliver {purpose.value} code to "
                f"{obfuscate_email(email)}: {e}"
            )
            raise DeliveryFailureError() from e

        logger.info(
            f"Issued {purpose.value} challenge {challenge.id} for user {user_id}"
        )
        return challenge

    async def verify(
        self,
        session: SessionStore,
        purpose: OTPPurpose,
        code: str,
        consume: bool = True,
    ) -> OTPChallenge:
        challenge = await self.peek(session, purpose)
        if challenge is None:
            raise OTPNotFoundError()

        if self.is_expired(challenge):
            await session.delete(purpose.session_key)
            logger.debug(f"Expired {purpose.value} challenge {challenge.id} removed")
            raise OTPExpiredError()

        if not challenge.matches(code):
            logger.warning(
                f"Wrong {purpose.value} code for challenge {challenge.id}"
            )
            raise OTPMismatchError()

        if consume:
            await session.delete(purpose.session_key)
        logger.debug(f"Validated {purpose.value} challenge {challenge.id}")
        return challenge

    async def peek(
        self, session: SessionStore, purpose: OTPPurpose
    ) -> Optional[OTPChallenge]:
        data = await session.get(purpose.session_key)
        if data is None:
            return None
        return OTPChallenge.from_dict(data)

    async def discard(self, session: SessionStore, purpose: OTPPurpose) -> None:
        await session.delete(purpose.session_key)


__all__ = [
    "SessionOTPService",
]
