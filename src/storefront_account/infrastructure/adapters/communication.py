"""
Console Email Adapter.

Development sender: the log line names the flow and a masked recipient,
and the full message, code included, is printed to stdout so it can be
read off the console while testing the account pages.
"""

import logging

from storefront_account.domain.value_objects import obfuscate_email
from storefront_account.ports.communication import EmailSenderPort, EmailMessage

logger = logging.getLogger("storefront_account.infrastructure.adapters.communication")


class ConsoleEmailSender(EmailSenderPort):
    def __init__(self, output_to_stdout: bool = True):
        self.output_to_stdout = output_to_stdout

    def render(self, message: EmailMessage) -> str:
        return "\n".join(
            [
                f"=== {message.category} email ===",
                f"To: {message.to}",
                f"Subject: {message.subject}",
                "",
                message.body_text,
                "=" * 40,
            ]
        )

    async def send(self, message: EmailMessage) -> None:
        logger.info(
            f"Console {message.category} email for {obfuscate_email(message.to)}"
        )
        if self.output_to_stdout:
            print(self.render(message))


__all__ = [
    "ConsoleEmailSender",
]
