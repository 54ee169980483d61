"""Password reset routes, mounted under /auth."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from app.api.deps import get_password_reset_service
from app.api.responses import ok
from app.schemas.auth import (
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ResetTokenStatus,
    ValidateResetTokenRequest,
)
from app.schemas.common import ApiResponse, MessageResponse
from app.services.password_reset import PasswordResetService

router = APIRouter()

ResetServiceDep = Annotated[PasswordResetService, Depends(get_password_reset_service)]

FORGOT_PASSWORD_MESSAGE = "If an account with that email exists, a password reset link has been sent."
RESET_DONE_MESSAGE = "Password has been reset successfully. Please login with your new password."


@router.post("/forgot-password", response_model=ApiResponse[MessageResponse])
def forgot_password(
    request: Request,
    body: ForgotPasswordRequest,
    service: ResetServiceDep,
) -> ApiResponse[MessageResponse]:
    """Send a reset link. The response is identical whether or not the account exists."""
    service.request_reset(body.email)
    return ok(request, MessageResponse(message=FORGOT_PASSWORD_MESSAGE))


@router.post("/validate-reset-token", response_model=ApiResponse[ResetTokenStatus])
def validate_reset_token(
    request: Request,
    body: ValidateResetTokenRequest,
    service: ResetServiceDep,
) -> ApiResponse[ResetTokenStatus]:
    user = service.validate_token(body.token)
    return ok(request, ResetTokenStatus(valid=True, email=user.email))


@router.post("/reset-password", response_model=ApiResponse[MessageResponse])
def reset_password(
    request: Request,
    body: ResetPasswordRequest,
    service: ResetServiceDep,
) -> ApiResponse[MessageResponse]:
    """Set a new password; every existing session of the user is logged out."""
    service.reset_password(body.token, body.new_password)
    return ok(request, MessageResponse(message=RESET_DONE_MESSAGE))
