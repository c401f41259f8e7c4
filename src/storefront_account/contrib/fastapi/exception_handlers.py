"""
Exception handlers for FastAPI.

Maps domain errors, and the error codes carried by failed results, to
HTTP status codes.
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from storefront_account.domain.errors import (
    StorefrontDomainError,
    AuthenticationError,
    UserNotFoundError,
    AddressNotFoundError,
)

ERROR_STATUS_CODES = {
    # Validation & OTP
    "VALIDATION_ERROR": status.HTTP_400_BAD_REQUEST,
    "PASSWORD_TOO_SHORT": status.HTTP_400_BAD_REQUEST,
    "PASSWORD_TOO_LONG": status.HTTP_400_BAD_REQUEST,
    "PASSWORD_MISMATCH": status.HTTP_400_BAD_REQUEST,
    "OTP_NOT_FOUND": status.HTTP_400_BAD_REQUEST,
    "OTP_EXPIRED": status.HTTP_400_BAD_REQUEST,
    "OTP_MISMATCH": status.HTTP_400_BAD_REQUEST,
    "NOT_ELIGIBLE": status.HTTP_400_BAD_REQUEST,
    # Authentication
    "AUTHENTICATION_FAILED": status.HTTP_401_UNAUTHORIZED,
    "WRONG_CURRENT_PASSWORD": status.HTTP_401_UNAUTHORIZED,
    "INVALID_LOGIN": status.HTTP_401_UNAUTHORIZED,
    "NOT_LOGGED_IN": status.HTTP_401_UNAUTHORIZED,
    # Lookup
    "USER_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "ADDRESS_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "EMAIL_ALREADY_REGISTERED": status.HTTP_409_CONFLICT,
    # Infrastructure
    "DELIVERY_FAILED": status.HTTP_502_BAD_GATEWAY,
    "PERSISTENCE_FAILED": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for_code(code: str) -> int:
    """HTTP status for a domain error code (400 when unknown)."""
    return ERROR_STATUS_CODES.get(code, status.HTTP_400_BAD_REQUEST)


def _error_content(exc: StorefrontDomainError) -> dict:
    return {"error": exc.code, "message": exc.message, "details": exc.details}


async def authentication_error_handler(request: Request, exc: AuthenticationError):
    """Handle AuthenticationError (401)."""
    return JSONResponse(
        status_code=status.HTTP_401_UNAUTHORIZED,
        content=_error_content(exc),
    )


async def not_found_error_handler(request: Request, exc: StorefrontDomainError):
    """Handle UserNotFoundError and AddressNotFoundError (404)."""
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content=_error_content(exc),
    )


async def domain_error_handler(request: Request, exc: StorefrontDomainError):
    """Handle any other domain error by its code."""
    return JSONResponse(
        status_code=status_for_code(exc.code),
        content=_error_content(exc),
    )


def register_exception_handlers(app):
    """
    Register uniform exception handlers for the FastAPI app.

    Args:
        app: The FastAPI application instance
    """
    app.add_exception_handler(AuthenticationError, authentication_error_handler)
    app.add_exception_handler(UserNotFoundError, not_found_error_handler)
    app.add_exception_handler(AddressNotFoundError, not_found_error_handler)
    app.add_exception_handler(StorefrontDomainError, domain_error_handler)
