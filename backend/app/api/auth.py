"""User authentication endpoints: register, login, logout, profile removal"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from fastapi.responses import PlainTextResponse

from app.api.deps import get_auth_flow, get_session_token, require_admin, require_user
from app.config import settings
from app.middleware.monitoring import record_auth_event, record_auth_failure
from app.middleware.rate_limit import get_rate_limit, limiter
from app.models.user import User
from app.schemas.user import AuthResponse, LoginRequest, RegisterRequest, UserResponse
from app.services.auth_flow import AuthFlow
from app.utils.errors import (
    AuthenticationError,
    CodeCoachError,
    PersistenceError,
    ValidationError,
)
from app.utils.logger import logger

router = APIRouter(prefix="/user", tags=["authentication"])

LOGIN_MESSAGE = "Logged in successfully"


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=token,
        max_age=settings.JWT_EXPIRE_SECONDS,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
    )


def _clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.SESSION_COOKIE_NAME,
        httponly=True,
        secure=settings.is_production,
        samesite="none" if settings.is_production else "lax",
    )


# ---------------------------------------------------------------------------
# POST /user/register
# ---------------------------------------------------------------------------

@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("register"))
def register(
    request: Request,
    data: RegisterRequest,
    response: Response,
    flow: AuthFlow = Depends(get_auth_flow),
) -> AuthResponse:
    """
    Create a standard user account and start a session.

    Sets an HTTP-only ``token`` cookie valid for one hour. Validation
    failures and duplicate emails return 400.
    """
    try:
        user, token = flow.register(data.to_record())
    except (ValidationError, PersistenceError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Error: {exc.message}")

    _set_session_cookie(response, token)
    record_auth_event("register")
    return AuthResponse(user=UserResponse.from_user(user), message=LOGIN_MESSAGE)


# ---------------------------------------------------------------------------
# POST /user/admin/register
# ---------------------------------------------------------------------------

@router.post("/admin/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def admin_register(
    data: RegisterRequest,
    response: Response,
    flow: AuthFlow = Depends(get_auth_flow),
    admin: User = Depends(require_admin),
) -> AuthResponse:
    """
    Create an administrator account (admins only).

    Same contract as ``/user/register`` but the new account always gets the
    ``admin`` role.
    """
    try:
        user, token = flow.admin_register(data.to_record())
    except (ValidationError, PersistenceError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Error: {exc.message}")

    logger.info(
        f"Admin {admin.user_id} registered admin {user.user_id}",
        extra={"user_id": admin.user_id, "action": "admin_register"},
    )
    _set_session_cookie(response, token)
    record_auth_event("admin_register")
    return AuthResponse(user=UserResponse.from_user(user), message=LOGIN_MESSAGE)


# ---------------------------------------------------------------------------
# POST /user/login
# ---------------------------------------------------------------------------

@router.post("/login", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(get_rate_limit("login"))
def login(
    request: Request,
    data: LoginRequest,
    response: Response,
    flow: AuthFlow = Depends(get_auth_flow),
) -> AuthResponse:
    """
    Exchange email and password for a session cookie.

    Missing or wrong credentials return 401.
    """
    try:
        user, token = flow.login(data.email_id, data.password)
    except AuthenticationError as exc:
        record_auth_failure("login")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=f"Error: {exc.message}")

    _set_session_cookie(response, token)
    record_auth_event("login")
    return AuthResponse(user=UserResponse.from_user(user), message=LOGIN_MESSAGE)


# ---------------------------------------------------------------------------
# POST /user/logout
# ---------------------------------------------------------------------------

@router.post("/logout", response_class=PlainTextResponse)
def logout(
    token: Optional[str] = Depends(get_session_token),
    flow: AuthFlow = Depends(get_auth_flow),
):
    """
    Revoke the current session token and clear the cookie.

    The token stays on the blocklist until it would have expired anyway.
    A missing or unreadable token, or an unavailable blocklist, returns 503.
    """
    try:
        previous_state = flow.session_state(token)
        flow.logout(token)
    except CodeCoachError as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=f"Error: {exc.message}")

    logger.info(
        f"Session logged out from state {previous_state.value}",
        extra={"action": "logout", "session_state": previous_state.value},
    )

    response = PlainTextResponse("Logged out successfully", status_code=status.HTTP_200_OK)
    _clear_session_cookie(response)
    record_auth_event("logout")
    return response


# ---------------------------------------------------------------------------
# DELETE /user/deleteProfile
# ---------------------------------------------------------------------------

@router.delete("/deleteProfile", response_class=PlainTextResponse)
def delete_profile(
    user: User = Depends(require_user),
    flow: AuthFlow = Depends(get_auth_flow),
):
    """Delete the authenticated user's account."""
    try:
        flow.delete_profile(user)
    except CodeCoachError as exc:
        logger.error(f"Profile deletion failed: {exc.message}", extra={"user_id": user.user_id})
        return PlainTextResponse("Internal Server Error", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)

    record_auth_event("delete_profile")
    return PlainTextResponse("Deleted Successfully", status_code=status.HTTP_200_OK)


# ---------------------------------------------------------------------------
# GET /user/check
# ---------------------------------------------------------------------------

@router.get("/check", response_model=AuthResponse)
def check(user: User = Depends(require_user)) -> AuthResponse:
    """Return the user behind the current session token."""
    return AuthResponse(user=UserResponse.from_user(user), message="Valid User")
