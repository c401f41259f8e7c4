"""
Async SMTP Email Adapter for FastAPI.

Delivers account emails with aiosmtplib. Every message is marked as
automatic (``Auto-Submitted``) so mail servers do not send out-of-office
replies to verification codes, and carries its account flow in the
``X-Storefront-Category`` header for filtering on the mail side.
"""

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from email.utils import formataddr, formatdate, make_msgid
from typing import Optional

import aiosmtplib

from storefront_account.domain.value_objects import obfuscate_email
from storefront_account.ports.communication import EmailSenderPort, EmailMessage

logger = logging.getLogger("storefront_account.contrib.fastapi.mail")


class AsyncSMTPEmailSender(EmailSenderPort):
    """
    SMTP implementation of EmailSenderPort using aiosmtplib.

    Args:
        host, port: submission server (587 with STARTTLS by default)
        user, password: login, skipped when either is missing
        use_ssl: implicit TLS, usually port 465
        default_from: sender address when a message has none
        from_name: display name shown next to the sender address
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 587,
        user: Optional[str] = None,
        password: Optional[str] = None,
        use_ssl: bool = False,
        use_starttls: bool = True,
        timeout: int = 10,
        default_from: Optional[str] = None,
        from_name: Optional[str] = None,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.use_ssl = use_ssl
        self.use_starttls = use_starttls
        self.timeout = timeout
        self.default_from = default_from
        self.from_name = from_name

    def _from_address(self, message: EmailMessage) -> str:
        address = (
            message.from_email or self.default_from or self.user or f"noreply@{self.host}"
        )
        if self.from_name:
            return formataddr((self.from_name, address))
        return address

    def _build_mime(self, message: EmailMessage) -> MIMEMultipart:
        mime_msg = MIMEMultipart("alternative")
        mime_msg["Subject"] = message.subject
        mime_msg["From"] = self._from_address(message)
        mime_msg["To"] = message.to
        mime_msg["Date"] = formatdate(usegmt=True)
        mime_msg["Message-ID"] = make_msgid(domain=self.host)
        mime_msg["Auto-Submitted"] = "auto-generated"
        mime_msg["X-Storefront-Category"] = message.category

        mime_msg.attach(MIMEText(message.body_text, "plain"))
        if message.body_html:
            mime_msg.attach(MIMEText(message.body_html, "html"))
        return mime_msg

    async def send(self, message: EmailMessage) -> None:
        mime_msg = self._build_mime(message)
        smtp = aiosmtplib.SMTP(
            hostname=self.host,
            port=self.port,
            use_tls=self.use_ssl,
            start_tls=self.use_starttls and not self.use_ssl,
            timeout=self.timeout,
        )

        try:
            async with smtp:
                if self.user and self.password:
                    await smtp.login(self.user, self.password)
                await smtp.send_message(mime_msg, recipients=[message.to])
        except (aiosmtplib.SMTPException, OSError) as e:
            logger.error(
                f"SMTP delivery of {message.category} email to "
                f"{obfuscate_email(message.to)} failed: {e}"
            )
            raise

        logger.info(
            f"Sent {message.category} email to {obfuscate_email(message.to)} "
            f"via {self.host}"
        )
