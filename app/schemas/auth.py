"""Request/response schemas for auth and password reset endpoints."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import Field

from app.schemas.common import CamelModel, EmailAddress


@dataclass(frozen=True)
class TokenClaims:
    """Identity carried inside an access token."""

    user_id: str
    email: str


class RegisterRequest(CamelModel):
    """Credentials and optional display name for self-registration."""

    email: EmailAddress
    password: str = Field(..., min_length=8, max_length=128, description="Password (8-128 characters)")
    name: str | None = Field(default=None, max_length=100)


class LoginRequest(CamelModel):
    email: EmailAddress
    password: str = Field(..., min_length=1, max_length=128)


class UpdateProfileRequest(CamelModel):
    name: str | None = Field(default=None, max_length=100)


class ChangePasswordRequest(CamelModel):
    current_password: str = Field(..., min_length=1, max_length=128)
    new_password: str = Field(..., min_length=8, max_length=128)


class ForgotPasswordRequest(CamelModel):
    email: EmailAddress


class ValidateResetTokenRequest(CamelModel):
    token: str = Field(..., min_length=1, max_length=255)


class ResetPasswordRequest(CamelModel):
    token: str = Field(..., min_length=1, max_length=255)
    new_password: str = Field(..., min_length=8, max_length=128)


class UserResponse(CamelModel):
    """Public view of a user (never includes the password hash)."""

    id: str
    email: str
    name: str | None = None
    role: str
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class AuthResult(CamelModel):
    """Returned by register and login."""

    user: UserResponse
    access_token: str
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class TokenResponse(CamelModel):
    """Returned by refresh."""

    access_token: str
    expires_in: int


class ResetTokenStatus(CamelModel):
    valid: bool
    email: str


class CurrentUser(CamelModel):
    """Authenticated user (id, email, role) for dependency injection."""

    id: str
    email: str
    role: str
