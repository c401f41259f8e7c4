"""
Event handlers for account events.

The mediator runs these after a command has completed:
- AccountAuditHandler writes every domain event to the
  ``storefront_account.audit`` logger.
- PasswordChangedNotifier emails the account owner once a password
  change or reset has been saved.
"""

import logging
from dataclasses import asdict
from typing import Callable, Any

from storefront_account.ddd import DomainEvent, EventHandler
from storefront_account.domain.events import PasswordChanged
from storefront_account.domain.value_objects import OTPPurpose, obfuscate_email
from storefront_account.ports.communication import (
    EmailSenderPort,
    PasswordChangedEmail,
)

logger = logging.getLogger("storefront_account.application.event_handlers")
audit_logger = logging.getLogger("storefront_account.audit")

# Never written to the audit log
_UNAUDITED_FIELDS = ("event_id", "occurred_at", "email")


class AccountAuditHandler(EventHandler):
    """
    Write one audit line per domain event.

    Register it for ``DomainEvent`` to receive every event. Email
    addresses are left out of the line.
    """

    async def handle(self, event: DomainEvent) -> None:
        fields = {
            name: value
            for name, value in asdict(event).items()
            if name not in _UNAUDITED_FIELDS and value is not None
        }
        details = " ".join(f"{name}={value}" for name, value in sorted(fields.items()))
        audit_logger.info(f"{event.event_type} {details}".rstrip())


class PasswordChangedNotifier(EventHandler):
    """Email the owner of an account whose password was just replaced."""

    def __init__(self, email_sender: EmailSenderPort, app_name: str = "HuongHan Store"):
        self.email_sender = email_sender
        self.app_name = app_name

    async def handle(self, event: PasswordChanged) -> None:
        if not event.email:
            logger.warning(f"No email on PasswordChanged for user {event.user_id}")
            return

        notice = PasswordChangedEmail(
            recipient=event.email,
            purpose=OTPPurpose(event.purpose),
            changed_at=event.occurred_at,
            app_name=self.app_name,
        )
        try:
            await self.email_sender.send(notice.render())
        except Exception as e:
            # The password is already saved
            logger.error(
                f"Password change notice to {obfuscate_email(event.email)} failed: {e}"
            )
            return

        logger.info(f"Sent password change notice for user {event.user_id}")


def register_account_event_handlers(
    mediator,
    email_sender: EmailSenderPort,
    app_name: str = "HuongHan Store",
) -> None:
    """
    Subscribe the account event handlers on a mediator.

    Containers that build handlers lazily register factories themselves;
    this is for a hand-assembled mediator.

    Example:
        mediator = Mediator()
        register_account_event_handlers(mediator, AsyncSMTPEmailSender(...))
    """
    factories: dict[type, Callable[[], Any]] = {
        DomainEvent: AccountAuditHandler,
        PasswordChanged: lambda: PasswordChangedNotifier(email_sender, app_name),
    }
    for event_type, factory in factories.items():
        mediator.register_event_handler(event_type, factory)

    logger.info(f"Registered account event handlers for {len(factories)} event types")


__all__ = [
    "AccountAuditHandler",
    "PasswordChangedNotifier",
    "register_account_event_handlers",
]
