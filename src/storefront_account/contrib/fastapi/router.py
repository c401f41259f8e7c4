"""
FastAPI router for the account pages.

Failed results are returned with the status mapped from their error
code; the body is the result itself.
"""

from typing import Any, Optional

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from dependency_injector.wiring import inject, Provide

from storefront_account.application.commands import (
    RegisterUser,
    Login,
    Logout,
    RequestPasswordChange,
    ConfirmPasswordChange,
    RequestPasswordReset,
    ConfirmPasswordReset,
    AddAddress,
    UpdateAddress,
    SetDefaultAddress,
    DeleteAddress,
)
from storefront_account.application.queries import (
    GetAccountProfile,
    GetPendingChallenge,
)
from storefront_account.application.results import SessionUser
from storefront_account.contrib.dependency_injector import StorefrontContainer
from storefront_account.domain.errors import UserNotFoundError
from storefront_account.domain.value_objects import AddressFields, OTPPurpose
from .dependencies import get_session_id, require_login
from .exception_handlers import status_for_code


class RegisterRequest(BaseModel):
    email: str
    password: str
    confirm_password: Optional[str] = None
    full_name: str = ""
    line1: str = ""
    city: str = ""
    phone: str = ""


class LoginRequest(BaseModel):
    email: str
    password: str


class AddressRequest(BaseModel):
    full_name: str = ""
    phone: str = ""
    line1: str = ""
    city: str = ""
    district: str = ""
    ward: str = ""
    is_default: bool = False

    def to_fields(self) -> AddressFields:
        return AddressFields.from_dict(self.model_dump())


class ChangePasswordRequest(BaseModel):
    current_password: str
    new_password: str
    confirm_password: str


class VerifyCodeRequest(BaseModel):
    code: str


class ForgotPasswordRequest(BaseModel):
    email: str


class ResetPasswordRequest(BaseModel):
    code: str
    new_password: str
    confirm_password: str


def _respond(response: Response, result: Any) -> Any:
    error_code = getattr(result, "error_code", None)
    if error_code:
        response.status_code = status_for_code(error_code)
    return result


# -----------------------------------------------------------------------------
# Module-level handlers (required for dependency-injector wiring)
# -----------------------------------------------------------------------------


@inject
async def register(
    data: RegisterRequest,
    response: Response,
    session_id: str = Depends(get_session_id),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    cmd = RegisterUser(session_id=session_id, **data.model_dump())
    return _respond(response, await mediator.send(cmd))


@inject
async def login(
    data: LoginRequest,
    response: Response,
    session_id: str = Depends(get_session_id),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    cmd = Login(session_id=session_id, email=data.email, password=data.password)
    return _respond(response, await mediator.send(cmd))


@inject
async def logout(
    session_id: str = Depends(get_session_id),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    return await mediator.send(Logout(session_id=session_id))


@inject
async def profile(
    user: SessionUser = Depends(require_login),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    result = await mediator.query(GetAccountProfile(user_id=user.id))
    if result is None:
        raise UserNotFoundError()
    return result


# -----------------------------------------------------------------------------
# Address book
# -----------------------------------------------------------------------------


@inject
async def add_address(
    data: AddressRequest,
    response: Response,
    user: SessionUser = Depends(require_login),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    cmd = AddAddress(
        user_id=user.id, address=data.to_fields(), is_default=data.is_default
    )
    return _respond(response, await mediator.send(cmd))


@inject
async def update_address(
    address_key: str,
    data: AddressRequest,
    response: Response,
    user: SessionUser = Depends(require_login),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    cmd = UpdateAddress(
        user_id=user.id,
        address_key=address_key,
        address=data.to_fields(),
        is_default=data.is_default,
    )
    return _respond(response, await mediator.send(cmd))


@inject
async def set_default_address(
    address_key: str,
    response: Response,
    user: SessionUser = Depends(require_login),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    cmd = SetDefaultAddress(user_id=user.id, address_key=address_key)
    return _respond(response, await mediator.send(cmd))


@inject
async def delete_address(
    address_key: str,
    response: Response,
    user: SessionUser = Depends(require_login),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    cmd = DeleteAddress(user_id=user.id, address_key=address_key)
    return _respond(response, await mediator.send(cmd))


# -----------------------------------------------------------------------------
# Password change (logged in)
# -----------------------------------------------------------------------------


@inject
async def change_password(
    data: ChangePasswordRequest,
    response: Response,
    session_id: str = Depends(get_session_id),
    user: SessionUser = Depends(require_login),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    cmd = RequestPasswordChange(
        session_id=session_id,
        user_id=user.id,
        current_password=data.current_password,
        new_password=data.new_password,
        confirm_password=data.confirm_password,
    )
    return _respond(response, await mediator.send(cmd))


@inject
async def change_password_pending(
    session_id: str = Depends(get_session_id),
    user: SessionUser = Depends(require_login),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    query = GetPendingChallenge(
        session_id=session_id, purpose=OTPPurpose.CHANGE_PASSWORD
    )
    return await mediator.query(query)


@inject
async def change_password_verify(
    data: VerifyCodeRequest,
    response: Response,
    session_id: str = Depends(get_session_id),
    user: SessionUser = Depends(require_login),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    cmd = ConfirmPasswordChange(session_id=session_id, code=data.code)
    return _respond(response, await mediator.send(cmd))


# -----------------------------------------------------------------------------
# Password reset (anonymous)
# -----------------------------------------------------------------------------


@inject
async def forgot_password(
    data: ForgotPasswordRequest,
    response: Response,
    session_id: str = Depends(get_session_id),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    cmd = RequestPasswordReset(session_id=session_id, email=data.email)
    return _respond(response, await mediator.send(cmd))


@inject
async def reset_password_pending(
    session_id: str = Depends(get_session_id),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    query = GetPendingChallenge(
        session_id=session_id, purpose=OTPPurpose.RESET_PASSWORD
    )
    return await mediator.query(query)


@inject
async def reset_password(
    data: ResetPasswordRequest,
    response: Response,
    session_id: str = Depends(get_session_id),
    mediator: Any = Depends(Provide[StorefrontContainer.mediator]),
):
    cmd = ConfirmPasswordReset(
        session_id=session_id,
        code=data.code,
        new_password=data.new_password,
        confirm_password=data.confirm_password,
    )
    return _respond(response, await mediator.send(cmd))


# -----------------------------------------------------------------------------
# Router Factory
# -----------------------------------------------------------------------------


def create_account_router(prefix: str = "/auth") -> APIRouter:
    """
    Factory to create a FastAPI router with the account endpoints.
    """
    router = APIRouter(prefix=prefix, tags=["account"])

    router.add_api_route(
        "/register", register, methods=["POST"], status_code=status.HTTP_201_CREATED
    )
    router.add_api_route("/login", login, methods=["POST"])
    router.add_api_route("/logout", logout, methods=["POST"])
    router.add_api_route("/profile", profile, methods=["GET"])

    router.add_api_route(
        "/addresses/add",
        add_address,
        methods=["POST"],
        status_code=status.HTTP_201_CREATED,
    )
    router.add_api_route(
        "/addresses/{address_key}/update", update_address, methods=["POST"]
    )
    router.add_api_route(
        "/addresses/{address_key}/default", set_default_address, methods=["POST"]
    )
    router.add_api_route(
        "/addresses/{address_key}/delete", delete_address, methods=["POST"]
    )

    router.add_api_route("/change-password", change_password, methods=["POST"])
    router.add_api_route(
        "/change-password/verify", change_password_pending, methods=["GET"]
    )
    router.add_api_route(
        "/change-password/verify", change_password_verify, methods=["POST"]
    )

    router.add_api_route("/forgot-password", forgot_password, methods=["POST"])
    router.add_api_route("/reset-password", reset_password_pending, methods=["GET"])
    router.add_api_route("/reset-password", reset_password, methods=["POST"])

    return router
