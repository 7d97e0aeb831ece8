from fastapi import APIRouter, Depends, Response

from storefront.config import settings
from storefront.dependencies import get_auth_service
from storefront.schemas import (
    RequestResetRequest,
    ResetPasswordRequest,
    SigninRequest,
    SignupRequest,
    SuccessMessage,
    UserResponse,
)
from storefront.security import clear_session_cookie, set_session_cookie
from storefront.services.auth_service import AuthResult, AuthService

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


def _sign_in(response: Response, result: AuthResult) -> UserResponse:
    set_session_cookie(
        response, result.token, settings.SESSION_COOKIE_NAME, settings.SESSION_MAX_AGE
    )
    return UserResponse.model_validate(result.user)


@router.post("/signup", status_code=201, response_model=UserResponse)
async def signup(
    data: SignupRequest, response: Response, auth: AuthService = Depends(get_auth_service)
):
    return _sign_in(response, await auth.signup(data.email, data.password, data.name))


@router.post("/signin", response_model=UserResponse)
async def signin(
    data: SigninRequest, response: Response, auth: AuthService = Depends(get_auth_service)
):
    return _sign_in(response, await auth.signin(data.email, data.password))


@router.post("/signout", response_model=SuccessMessage)
async def signout(response: Response):
    clear_session_cookie(response, settings.SESSION_COOKIE_NAME)
    return SuccessMessage(message="Goodbye!")


@router.post("/request-reset", response_model=SuccessMessage)
async def request_reset(data: RequestResetRequest, auth: AuthService = Depends(get_auth_service)):
    await auth.request_reset(data.email)
    return SuccessMessage(message="Thanks!")


@router.post("/reset-password", response_model=UserResponse)
async def reset_password(
    data: ResetPasswordRequest, response: Response, auth: AuthService = Depends(get_auth_service)
):
    result = await auth.reset_password(data.reset_token, data.password, data.confirm_password)
    return _sign_in(response, result)
