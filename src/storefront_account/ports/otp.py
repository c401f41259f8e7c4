"""
OTP Service Port.

Defines the lifecycle of one-time verification codes that gate
password changes and resets.
"""

from typing import Protocol, Optional, Any

from storefront_account.domain.aggregates import OTPChallenge
from storefront_account.domain.value_objects import OTPPurpose
from storefront_account.ports.session import SessionStore


class OTPServicePort(Protocol):
    """
    Port for session-scoped OTP challenges.

    A session holds at most one challenge per purpose; issuing a new one
    replaces the previous challenge of that purpose.
    """

    async def issue(
        self,
        session: SessionStore,
        purpose: OTPPurpose,
        user_id: str,
        email: str,
        payload: Optional[dict[str, Any]] = None,
    ) -> OTPChallenge:
        """
        Generate a code, store the challenge and email the code.

        Raises:
            DeliveryFailureError: If the email could not be sent. No
                challenge is left in the session.
        """
        ...

    async def verify(
        self,
        session: SessionStore,
        purpose: OTPPurpose,
        code: str,
        consume: bool = True,
    ) -> OTPChallenge:
        """
        Validate a submitted code.

        Returns:
            The matched challenge (its payload carries the flow data)

        Raises:
            OTPNotFoundError: No challenge pending
            OTPExpiredError: Challenge expired (and was removed)
            OTPMismatchError: Wrong code (challenge kept)
        """
        ...

    async def peek(
        self, session: SessionStore, purpose: OTPPurpose
    ) -> Optional[OTPChallenge]:
        """Return the pending challenge without validating anything."""
        ...

    async def discard(self, session: SessionStore, purpose: OTPPurpose) -> None:
        """Remove the challenge of a purpose."""
        ...

    def is_expired(self, challenge: OTPChallenge) -> bool:
        """Whether a challenge is past its expiry by the service's clock."""
        ...
