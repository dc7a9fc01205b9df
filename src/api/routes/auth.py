"""
Admin session endpoints.

Login trades the admin password for a signed, http-only cookie; logout
clears it; verify tells the browser whether its cookie is still good.
"""

import logging

from fastapi import APIRouter, Response, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ...core.auth.session import SESSION_COOKIE_NAME, AuthorizationError
from ..dependencies import SessionGateDep, SessionTokenDep, SettingsDep
from ..schemas import SuccessResponse

logger = logging.getLogger(__name__)

router = APIRouter()


class LoginRequest(BaseModel):
    password: str = Field(description="Admin password")


class VerifyResponse(BaseModel):
    authenticated: bool


@router.post(
    "/login",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in",
    description="Exchange the admin password for a session cookie",
)
async def login(
    request: LoginRequest,
    response: Response,
    gate: SessionGateDep,
    settings: SettingsDep,
) -> SuccessResponse:
    try:
        token = gate.login(request.password)
    except AuthorizationError:
        logger.warning("Rejected login attempt")
        raise

    response.set_cookie(
        SESSION_COOKIE_NAME,
        token,
        max_age=gate.max_age_seconds,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    logger.info("Admin logged in")
    return SuccessResponse(message="Login successful")


@router.post(
    "/logout",
    response_model=SuccessResponse,
    status_code=status.HTTP_200_OK,
    summary="Log out",
)
async def logout(response: Response, settings: SettingsDep) -> SuccessResponse:
    response.delete_cookie(
        SESSION_COOKIE_NAME,
        path="/",
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
    )
    return SuccessResponse(message="Logout successful")


@router.get(
    "/verify",
    response_model=VerifyResponse,
    summary="Check session",
    description="Returns 200 with authenticated=true for a valid session, 401 otherwise",
    responses={401: {"model": VerifyResponse}},
)
async def verify(gate: SessionGateDep, token: SessionTokenDep) -> JSONResponse:
    authenticated = gate.is_authenticated(token)
    return JSONResponse(
        status_code=status.HTTP_200_OK if authenticated else status.HTTP_401_UNAUTHORIZED,
        content={"authenticated": authenticated},
    )
