"""Application error taxonomy. Services raise these; app.core.errors maps them to HTTP."""

from typing import Any


class AppError(Exception):
    """Base class for errors that carry an HTTP status and a stable error code."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: str | None = None,
        *,
        code: str | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message or self.default_message
        if code is not None:
            self.code = code
        self.details = details
        super().__init__(self.message)


class ValidationError(AppError):
    """Malformed or missing input; details carry one {field, message} per problem."""

    status_code = 400
    code = "VALIDATION_ERROR"
    default_message = "Validation failed"


class AuthenticationError(AppError):
    """Bad credentials or token. Messages stay generic."""

    status_code = 401
    code = "UNAUTHORIZED"
    default_message = "Authentication required"


class AuthorizationError(AppError):
    status_code = 403
    code = "FORBIDDEN"
    default_message = "Admin access required"


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(AppError):
    status_code = 409
    code = "CONFLICT"
    default_message = "Resource already exists"


class InternalError(AppError):
    """Unexpected store or crypto failure. Detail is logged, not returned outside dev."""

    status_code = 500
    code = "INTERNAL_ERROR"
    default_message = "Internal server error"


class InvalidCredentialsError(AuthenticationError):
    code = "INVALID_CREDENTIALS"
    default_message = "invalid credentials"


class InvalidAccessTokenError(AuthenticationError):
    default_message = "Invalid or expired token"


class InvalidRefreshTokenError(AuthenticationError):
    code = "INVALID_REFRESH_TOKEN"
    default_message = "invalid refresh token"


class RefreshTokenExpiredError(InvalidRefreshTokenError):
    default_message = "refresh token expired"


class InvalidResetTokenError(AuthenticationError):
    """Reset token missing, used or expired. The three cases are never distinguished."""

    status_code = 400
    code = "INVALID_TOKEN"
    default_message = "Invalid or expired reset token"


class IncorrectPasswordError(ValidationError):
    code = "INVALID_PASSWORD"
    default_message = "current password is incorrect"


class UploadError(ValidationError):
    code = "UPLOAD_ERROR"
    default_message = "Upload rejected"


class StorageError(InternalError):
    """Storage backend failure (disk or object store)."""

    code = "STORAGE_ERROR"
    default_message = "Storage operation failed"


class EmailDeliveryError(InternalError):
    """Mail transport failure (connection, auth or rejected recipients)."""

    code = "EMAIL_ERROR"
    default_message = "Email delivery failed"
