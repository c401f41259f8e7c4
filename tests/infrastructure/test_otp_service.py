"""
Tests for the session-scoped OTP service.
"""

import pytest
from unittest.mock import AsyncMock

from storefront_account.domain.errors import (
    DeliveryFailureError,
    OTPExpiredError,
    OTPMismatchError,
    OTPNotFoundError,
)
from storefront_account.domain.value_objects import OTPPurpose
from storefront_account.infrastructure.adapters.otp import SessionOTPService

CHANGE = OTPPurpose.CHANGE_PASSWORD
RESET = OTPPurpose.RESET_PASSWORD


@pytest.fixture
def service(email_sender, clock):
    return SessionOTPService(email_sender=email_sender, ttl_seconds=60, clock=clock)


@pytest.fixture
def session(session_backend):
    return session_backend.scope("s1")


async def _issue(service, session, purpose=CHANGE, **kwargs):
    return await service.issue(
        session, purpose, user_id="u1", email="lan@example.com", **kwargs
    )


@pytest.mark.asyncio
async def test_issue_stores_challenge_and_sends_code(service, session, email_sender):
    challenge = await _issue(service, session, payload={"new_password_hash": "h"})

    assert len(challenge.code) == 6
    assert challenge.code.isdigit()
    assert (await session.get("otp:change-password"))["code"] == challenge.code

    (message,) = email_sender.sent
    assert message.to == "lan@example.com"
    assert message.category == "change-password"
    assert message.subject.startswith("HuongHan Store - ")
    assert challenge.code in message.body_text
    assert challenge.code in message.body_html


@pytest.mark.asyncio
async def test_code_length_is_configurable(email_sender, session):
    service = SessionOTPService(email_sender=email_sender, code_length=8)
    challenge = await _issue(service, session)
    assert len(challenge.code) == 8


@pytest.mark.asyncio
async def test_verify_succeeds_exactly_once(service, session, email_sender):
    await _issue(service, session, payload={"new_password_hash": "h"})
    code = email_sender.last_code

    challenge = await service.verify(session, CHANGE, code)
    assert challenge.payload == {"new_password_hash": "h"}

    with pytest.raises(OTPNotFoundError):
        await service.verify(session, CHANGE, code)


@pytest.mark.asyncio
async def test_verify_without_consume_keeps_challenge(service, session, email_sender):
    await _issue(service, session)
    code = email_sender.last_code

    await service.verify(session, CHANGE, code, consume=False)
    assert await service.peek(session, CHANGE) is not None

    await service.discard(session, CHANGE)
    assert await service.peek(session, CHANGE) is None


@pytest.mark.asyncio
async def test_expired_challenge_is_deleted(service, session, email_sender, clock):
    await _issue(service, session)
    code = email_sender.last_code

    clock.advance(61)

    with pytest.raises(OTPExpiredError):
        await service.verify(session, CHANGE, code)
    with pytest.raises(OTPNotFoundError):
        await service.verify(session, CHANGE, code)


@pytest.mark.asyncio
async def test_code_valid_at_end_of_window(service, session, email_sender, clock):
    await _issue(service, session)
    clock.advance(60)
    assert await service.verify(session, CHANGE, email_sender.last_code)


@pytest.mark.asyncio
async def test_mismatch_keeps_challenge(service, session, email_sender):
    await _issue(service, session)
    code = email_sender.last_code
    wrong = "000000" if code != "000000" else "111111"

    with pytest.raises(OTPMismatchError):
        await service.verify(session, CHANGE, wrong)

    assert await service.verify(session, CHANGE, code)


@pytest.mark.asyncio
async def test_second_issue_invalidates_first(service, session, email_sender):
    first = await _issue(service, session)
    second = await _issue(service, session)

    if first.code != second.code:
        with pytest.raises(OTPMismatchError):
            await service.verify(session, CHANGE, first.code)
    assert (await service.peek(session, CHANGE)).id == second.id


@pytest.mark.asyncio
async def test_purposes_do_not_collide(service, session, email_sender):
    change = await _issue(service, session, CHANGE)
    reset = await _issue(service, session, RESET)

    assert (await service.peek(session, CHANGE)).id == change.id
    assert (await service.peek(session, RESET)).id == reset.id


@pytest.mark.asyncio
async def test_sessions_are_isolated(service, session_backend, email_sender):
    await _issue(service, session_backend.scope("s1"))

    with pytest.raises(OTPNotFoundError):
        await service.verify(session_backend.scope("s2"), CHANGE, email_sender.last_code)


@pytest.mark.asyncio
async def test_delivery_failure_leaves_no_challenge(session):
    sender = AsyncMock()
    sender.send.side_effect = ConnectionError("smtp down")
    service = SessionOTPService(email_sender=sender)

    with pytest.raises(DeliveryFailureError) as exc:
        await _issue(service, session)

    assert isinstance(exc.value.__cause__, ConnectionError)
    assert await session.get(CHANGE.session_key) is None


@pytest.mark.asyncio
async def test_peek_without_challenge(service, session):
    assert await service.peek(session, RESET) is None


@pytest.mark.asyncio
async def test_is_expired_follows_service_clock(service, session, clock):
    challenge = await _issue(service, session)

    assert not service.is_expired(challenge)
    clock.advance(61)
    assert service.is_expired(challenge)
