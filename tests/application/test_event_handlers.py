"""
Tests for the account event handlers.
"""

import pytest
from unittest.mock import AsyncMock

from storefront_account.application.event_handlers import (
    AccountAuditHandler,
    PasswordChangedNotifier,
    register_account_event_handlers,
)
from storefront_account.ddd import Mediator
from storefront_account.domain.events import (
    DefaultAddressChanged,
    PasswordChanged,
)


@pytest.mark.asyncio
async def test_audit_line_leaves_out_email(caplog):
    event = PasswordChanged(
        user_id="u1", purpose="reset-password", email="lan@example.com"
    )

    with caplog.at_level("INFO", logger="storefront_account.audit"):
        await AccountAuditHandler().handle(event)

    (record,) = caplog.records
    assert record.getMessage() == "PasswordChanged purpose=reset-password user_id=u1"


@pytest.mark.asyncio
async def test_audit_line_for_address_event(caplog):
    event = DefaultAddressChanged(user_id="u1", index=2, address_id="a2")

    with caplog.at_level("INFO", logger="storefront_account.audit"):
        await AccountAuditHandler().handle(event)

    assert "DefaultAddressChanged address_id=a2 index=2 user_id=u1" in caplog.text


@pytest.mark.asyncio
async def test_notifier_sends_password_changed_notice(email_sender):
    notifier = PasswordChangedNotifier(email_sender, app_name="HuongHan Store")

    await notifier.handle(
        PasswordChanged(user_id="u1", purpose="change-password", email="lan@example.com")
    )

    (message,) = email_sender.sent
    assert message.to == "lan@example.com"
    assert message.category == "password-changed"
    assert message.subject == "HuongHan Store - Your password was changed"
    assert "was changed" in message.body_text


@pytest.mark.asyncio
async def test_notifier_reset_wording(email_sender):
    await PasswordChangedNotifier(email_sender).handle(
        PasswordChanged(user_id="u1", purpose="reset-password", email="lan@example.com")
    )
    assert "was reset" in email_sender.sent[0].body_text


@pytest.mark.asyncio
async def test_notifier_skips_event_without_email(email_sender):
    await PasswordChangedNotifier(email_sender).handle(
        PasswordChanged(user_id="u1", purpose="change-password")
    )
    assert email_sender.sent == []


@pytest.mark.asyncio
async def test_notifier_delivery_failure_is_logged(caplog):
    sender = AsyncMock()
    sender.send.side_effect = ConnectionError("smtp down")

    with caplog.at_level("ERROR"):
        await PasswordChangedNotifier(sender).handle(
            PasswordChanged(
                user_id="u1", purpose="change-password", email="lan@example.com"
            )
        )

    assert "l****@example.com" in caplog.text
    assert "lan@example.com" not in caplog.text


@pytest.mark.asyncio
async def test_register_on_mediator(email_sender, caplog):
    mediator = Mediator()
    register_account_event_handlers(mediator, email_sender)

    with caplog.at_level("INFO", logger="storefront_account.audit"):
        await mediator.publish(
            [
                PasswordChanged(
                    user_id="u1", purpose="change-password", email="lan@example.com"
                ),
                DefaultAddressChanged(user_id="u1", index=0),
            ]
        )

    assert [m.category for m in email_sender.sent] == ["password-changed"]
    assert "DefaultAddressChanged" in caplog.text
