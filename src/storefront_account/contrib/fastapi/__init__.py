"""
FastAPI integration for storefront-account.

Provides the account router, session dependencies, exception handlers
and an aiosmtplib email sender.
"""

from .dependencies import (
    get_session_id,
    get_session_user,
    require_login,
)
from .exception_handlers import register_exception_handlers, status_for_code
from .mail import AsyncSMTPEmailSender
from .router import create_account_router

__all__ = [
    "get_session_id",
    "get_session_user",
    "require_login",
    "register_exception_handlers",
    "status_for_code",
    "AsyncSMTPEmailSender",
    "create_account_router",
]
