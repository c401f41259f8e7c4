"""
Account Email Port.

The account sends two kinds of email: a verification code for a
password change or reset, and a notice once a password has changed.
Each is described by a small dataclass that renders an ``EmailMessage``;
senders only deliver rendered messages.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol, Optional

from storefront_account.domain.value_objects import OTPPurpose

_CODE_SUBJECTS = {
    OTPPurpose.CHANGE_PASSWORD: "Password change verification code",
    OTPPurpose.RESET_PASSWORD: "Password reset verification code",
}

_CHANGED_LINES = {
    OTPPurpose.CHANGE_PASSWORD: "The password of your account was changed.",
    OTPPurpose.RESET_PASSWORD: "The password of your account was reset.",
}


@dataclass
class EmailMessage:
    """
    A rendered email to one account owner.

    ``category`` names the account flow that produced the message; SMTP
    delivery sends it as the ``X-Storefront-Category`` header.
    """

    to: str
    subject: str
    body_text: str
    body_html: Optional[str] = None
    category: str = "account"
    from_email: Optional[str] = None


@dataclass(frozen=True)
class VerificationCodeEmail:
    """The email carrying a one-time code."""

    recipient: str
    code: str
    purpose: OTPPurpose
    expires_at: datetime
    ttl_seconds: int
    app_name: str

    def render(self) -> EmailMessage:
        expiry = f"This code expires in {self.ttl_seconds} seconds."
        return EmailMessage(
            to=self.recipient,
            subject=f"{self.app_name} - {_CODE_SUBJECTS[self.purpose]}",
            body_text=f"Your verification code is: {self.code}\n\n{expiry}",
            body_html=(
                f"<p>Your verification code is: <strong>{self.code}</strong></p>"
                f"<p>{expiry}</p>"
            ),
            category=self.purpose.value,
        )


@dataclass(frozen=True)
class PasswordChangedEmail:
    """Notice sent after a new password has been saved."""

    recipient: str
    purpose: OTPPurpose
    changed_at: datetime
    app_name: str

    def render(self) -> EmailMessage:
        when = self.changed_at.strftime("%Y-%m-%d %H:%M UTC")
        return EmailMessage(
            to=self.recipient,
            subject=f"{self.app_name} - Your password was changed",
            body_text=(
                f"{_CHANGED_LINES[self.purpose]} ({when})\n\n"
                "If this was not you, reset your password and contact us."
            ),
            category="password-changed",
        )


class EmailSenderPort(Protocol):
    """
    Port for delivering account emails.

    Implementations: SMTP (aiosmtplib), Console (dev).
    """

    async def send(self, message: EmailMessage) -> None:
        """
        Deliver a rendered message.

        Raises:
            Exception: If delivery fails
        """
        ...
