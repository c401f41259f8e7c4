"""
Tests for AsyncSMTPEmailSender.
"""

import pytest
from unittest.mock import AsyncMock, patch

import aiosmtplib

from storefront_account.contrib.fastapi.mail import AsyncSMTPEmailSender
from storefront_account.ports.communication import EmailMessage

SMTP = "storefront_account.contrib.fastapi.mail.aiosmtplib.SMTP"


def _message(**kwargs):
    return EmailMessage(
        to="recipient@example.com",
        subject="HuongHan Store - Password reset verification code",
        body_text="Your verification code is: 123456",
        body_html="<p>123456</p>",
        category="reset-password",
        **kwargs,
    )


@pytest.mark.asyncio
async def test_async_smtp_send_success():
    with patch(SMTP) as mock_smtp_class:
        mock_smtp_instance = AsyncMock()
        mock_smtp_class.return_value = mock_smtp_instance

        sender = AsyncSMTPEmailSender(
            host="mail.example.com",
            port=587,
            user="user",
            password="password",
            use_starttls=True,
        )

        await sender.send(_message(from_email="noreply@example.com"))

        mock_smtp_class.assert_called_with(
            hostname="mail.example.com",
            port=587,
            use_tls=False,
            start_tls=True,
            timeout=10,
        )

        assert mock_smtp_instance.__aenter__.called
        mock_smtp_instance.login.assert_awaited_once_with("user", "password")

        sent_msg = mock_smtp_instance.send_message.call_args[0][0]
        assert sent_msg["Subject"].startswith("HuongHan Store")
        assert sent_msg["To"] == "recipient@example.com"
        assert sent_msg["From"] == "noreply@example.com"
        recipients = mock_smtp_instance.send_message.call_args.kwargs["recipients"]
        assert recipients == ["recipient@example.com"]


@pytest.mark.asyncio
async def test_async_smtp_implicit_tls_without_login():
    with patch(SMTP) as mock_smtp_class:
        mock_smtp_instance = AsyncMock()
        mock_smtp_class.return_value = mock_smtp_instance

        sender = AsyncSMTPEmailSender(host="smtp.example.com", port=465, use_ssl=True)
        await sender.send(_message())

        kwargs = mock_smtp_class.call_args.kwargs
        assert kwargs["use_tls"] is True
        assert kwargs["start_tls"] is False
        assert not mock_smtp_instance.login.called


def test_account_headers():
    sender = AsyncSMTPEmailSender(
        host="smtp.example.com",
        default_from="shop@example.com",
        from_name="HuongHan Store",
    )
    mime = sender._build_mime(_message())

    assert mime["From"] == "HuongHan Store <shop@example.com>"
    assert mime["Auto-Submitted"] == "auto-generated"
    assert mime["X-Storefront-Category"] == "reset-password"
    assert mime["Message-ID"].endswith("@smtp.example.com>")
    assert mime["Date"]
    assert len(mime.get_payload()) == 2


def test_from_falls_back_to_host():
    sender = AsyncSMTPEmailSender(host="smtp.example.com")
    mime = sender._build_mime(_message())
    assert mime["From"] == "noreply@smtp.example.com"


@pytest.mark.asyncio
async def test_async_smtp_failure_propagates(caplog):
    with patch(SMTP) as mock_smtp_class:
        mock_smtp_instance = AsyncMock()
        mock_smtp_instance.send_message.side_effect = aiosmtplib.SMTPException(
            "refused"
        )
        mock_smtp_instance.__aexit__.return_value = False
        mock_smtp_class.return_value = mock_smtp_instance

        sender = AsyncSMTPEmailSender(host="smtp.example.com")

        with pytest.raises(aiosmtplib.SMTPException), caplog.at_level("ERROR"):
            await sender.send(_message())

    assert "r****@example.com" in caplog.text


@pytest.mark.asyncio
async def test_async_smtp_connection_error_propagates():
    with patch(SMTP) as mock_smtp_class:
        mock_smtp_instance = AsyncMock()
        mock_smtp_instance.__aenter__.side_effect = ConnectionRefusedError()
        mock_smtp_class.return_value = mock_smtp_instance

        with pytest.raises(ConnectionRefusedError):
            await AsyncSMTPEmailSender(host="smtp.example.com").send(_message())
