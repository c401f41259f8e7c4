"""
FastAPI dependencies for the browser session.

The session id travels in an HTTP-only cookie. A request without one
gets a fresh id, and the cookie is set on the response.
"""

import logging
import uuid
from typing import Any, Optional

from fastapi import Depends, Request, Response
from dependency_injector.wiring import inject, Provide

from storefront_account.application.results import SESSION_USER_KEY, SessionUser
from storefront_account.contrib.dependency_injector import StorefrontContainer
from storefront_account.domain.errors import NotLoggedInError

logger = logging.getLogger("storefront_account.contrib.fastapi.dependencies")


@inject
async def get_session_id(
    request: Request,
    response: Response,
    cookie_name: str = Depends(Provide[StorefrontContainer.config.session.cookie_name]),
    max_age: Optional[int] = Depends(
        Provide[StorefrontContainer.config.session.ttl_seconds]
    ),
) -> str:
    """Dependency that returns the session id, issuing one if absent."""
    session_id = request.cookies.get(cookie_name)
    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(
            cookie_name,
            session_id,
            httponly=True,
            samesite="lax",
            max_age=max_age,
        )
        logger.debug(f"Started session {session_id}")
    return session_id


@inject
async def get_session_user(
    session_id: str = Depends(get_session_id),
    session_backend: Any = Depends(Provide[StorefrontContainer.session_backend]),
) -> Optional[SessionUser]:
    """Dependency that returns the logged-in user, or None."""
    data = await session_backend.scope(session_id).get(SESSION_USER_KEY)
    if not data:
        return None
    return SessionUser.from_dict(data)


def require_login(user: Optional[SessionUser] = Depends(get_session_user)) -> SessionUser:
    """Dependency that requires a logged-in user (401 otherwise)."""
    if user is None:
        raise NotLoggedInError()
    return user
