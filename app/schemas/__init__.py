"""Pydantic request/response schemas."""

from app.schemas.admin import (
    CreateUserRequest,
    DashboardStats,
    FileListing,
    SettingResponse,
    UpdateSettingsBatchRequest,
    UpdateUserRequest,
    UserList,
    UserListParams,
)
from app.schemas.auth import (
    AuthResult,
    ChangePasswordRequest,
    CurrentUser,
    ForgotPasswordRequest,
    LoginRequest,
    RegisterRequest,
    ResetPasswordRequest,
    TokenClaims,
    TokenResponse,
    UserResponse,
)
from app.schemas.common import ApiResponse, ErrorResponse, MessageResponse, Meta
from app.schemas.health import HealthResponse, ReadinessResponse
from app.schemas.upload import MultiUploadResponse, StoredFile, UploadResponse

__all__ = [
    "ApiResponse",
    "AuthResult",
    "ChangePasswordRequest",
    "CreateUserRequest",
    "CurrentUser",
    "DashboardStats",
    "ErrorResponse",
    "FileListing",
    "ForgotPasswordRequest",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "Meta",
    "MultiUploadResponse",
    "ReadinessResponse",
    "RegisterRequest",
    "ResetPasswordRequest",
    "SettingResponse",
    "StoredFile",
    "TokenClaims",
    "TokenResponse",
    "UpdateSettingsBatchRequest",
    "UpdateUserRequest",
    "UploadResponse",
    "UserList",
    "UserListParams",
    "UserResponse",
]
