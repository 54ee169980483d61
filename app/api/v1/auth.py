"""Auth routes (register, login, refresh, logout, profile) and auth dependencies (get_current_user, require_admin)."""

from typing import Annotated

from fastapi import APIRouter, Cookie, Depends, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from app.api.deps import SettingsDep, get_auth_service, get_codec
from app.api.responses import ok
from app.core.config import Settings
from app.core.database import get_db
from app.core.errors import error_response
from app.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    InvalidAccessTokenError,
    InvalidRefreshTokenError,
)
from app.core.security import TokenCodec
from app.models.user import ROLE_ADMIN, User
from app.schemas.auth import (
    AuthResult,
    ChangePasswordRequest,
    CurrentUser,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
    UpdateProfileRequest,
    UserResponse,
)
from app.schemas.common import ApiResponse, MessageResponse
from app.services.auth import AuthService, IssuedRefreshToken

router = APIRouter()
security = HTTPBearer(auto_error=False)

REFRESH_COOKIE = "refresh_token"

AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def set_refresh_cookie(response: Response, issued: IssuedRefreshToken, settings: Settings) -> None:
    response.set_cookie(
        key=REFRESH_COOKIE,
        value=issued.token,
        max_age=issued.max_age_seconds,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.COOKIE_SAMESITE,
    )


def clear_refresh_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=REFRESH_COOKIE,
        path="/",
        httponly=True,
        secure=settings.cookie_secure,
        samesite=settings.COOKIE_SAMESITE,
    )


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    codec: Annotated[TokenCodec, Depends(get_codec)],
    db: Annotated[Session, Depends(get_db)],
) -> CurrentUser:
    """Dependency: require a valid Bearer access token and return the current user. Raises 401 otherwise."""
    if credentials is None:
        raise AuthenticationError("Not authenticated")
    claims = codec.verify(credentials.credentials)
    user = (
        db.query(User)
        .filter(User.id == claims.user_id, User.deleted_at.is_(None))
        .first()
    )
    if user is None or not user.is_active:
        raise InvalidAccessTokenError("User not found")
    return CurrentUser(id=user.id, email=user.email, role=user.role)


def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Dependency: require authenticated user with role 'admin'. Raises 403 for non-admin."""
    if current_user.role != ROLE_ADMIN:
        raise AuthorizationError()
    return current_user


CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]


@router.post("/register", response_model=ApiResponse[AuthResult], status_code=status.HTTP_201_CREATED)
def register(
    request: Request,
    response: Response,
    body: RegisterRequest,
    service: AuthServiceDep,
    settings: SettingsDep,
) -> ApiResponse[AuthResult]:
    """Create an account; returns the user and an access token and sets the refresh cookie."""
    result = service.register(body)
    set_refresh_cookie(response, service.create_refresh_token(result.user.id), settings)
    return ok(request, result)


@router.post("/login", response_model=ApiResponse[AuthResult])
def login(
    request: Request,
    response: Response,
    body: LoginRequest,
    service: AuthServiceDep,
    settings: SettingsDep,
) -> ApiResponse[AuthResult]:
    """
    Authenticate with email and password.
    Include the access token in the Authorization header as: Bearer <accessToken>
    """
    result = service.login(body)
    set_refresh_cookie(response, service.create_refresh_token(result.user.id), settings)
    return ok(request, result)


@router.post("/refresh", response_model=ApiResponse[TokenResponse])
def refresh(
    request: Request,
    service: AuthServiceDep,
    settings: SettingsDep,
    refresh_token: Annotated[str | None, Cookie(alias=REFRESH_COOKIE)] = None,
):
    """Exchange the refresh cookie for a new access token. The cookie is cleared on failure."""
    if not refresh_token:
        return error_response(
            request, 401, "NO_REFRESH_TOKEN", "No refresh token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )
    try:
        tokens = service.refresh_access_token(refresh_token)
    except InvalidRefreshTokenError:
        failed = error_response(
            request, 401, "INVALID_REFRESH_TOKEN", "Invalid or expired refresh token",
            headers={"WWW-Authenticate": "Bearer"},
        )
        clear_refresh_cookie(failed, settings)
        return failed
    return ok(request, tokens)


@router.post("/logout", response_model=ApiResponse[MessageResponse])
def logout(
    request: Request,
    response: Response,
    service: AuthServiceDep,
    settings: SettingsDep,
    refresh_token: Annotated[str | None, Cookie(alias=REFRESH_COOKIE)] = None,
) -> ApiResponse[MessageResponse]:
    """Revoke the refresh token (if any) and clear the cookie. Always succeeds."""
    if refresh_token:
        service.revoke_refresh_token(refresh_token)
    clear_refresh_cookie(response, settings)
    return ok(request, MessageResponse(message="Logged out successfully"))


@router.get("/me", response_model=ApiResponse[UserResponse])
def me(
    request: Request,
    current_user: CurrentUserDep,
    service: AuthServiceDep,
) -> ApiResponse[UserResponse]:
    user = service.get_user(current_user.id)
    return ok(request, UserResponse.model_validate(user))


@router.put("/profile", response_model=ApiResponse[UserResponse])
def update_profile(
    request: Request,
    body: UpdateProfileRequest,
    current_user: CurrentUserDep,
    service: AuthServiceDep,
) -> ApiResponse[UserResponse]:
    user = service.update_profile(current_user.id, body)
    return ok(request, UserResponse.model_validate(user))


@router.put("/change-password", response_model=ApiResponse[MessageResponse])
def change_password(
    request: Request,
    body: ChangePasswordRequest,
    current_user: CurrentUserDep,
    service: AuthServiceDep,
) -> ApiResponse[MessageResponse]:
    """Change password after verifying the current one. Other sessions stay logged in."""
    service.change_password(current_user.id, body)
    return ok(request, MessageResponse(message="Password changed successfully"))
