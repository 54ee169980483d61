"""FastAPI dependencies that build services from app.state and the request's DB session."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.core.config import Settings
from app.core.database import get_db
from app.core.security import TokenCodec
from app.services.admin import DashboardService, FilesService, SettingsService, UsersService
from app.services.auth import AuthService
from app.services.email import EmailSender
from app.services.password_reset import PasswordResetService
from app.services.storage import Storage
from app.services.upload import UploadService


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_codec(request: Request) -> TokenCodec:
    return request.app.state.codec


def get_email_sender(request: Request) -> EmailSender:
    return request.app.state.email_sender


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


SettingsDep = Annotated[Settings, Depends(get_app_settings)]
DbDep = Annotated[Session, Depends(get_db)]


def get_auth_service(
    db: DbDep,
    settings: SettingsDep,
    codec: Annotated[TokenCodec, Depends(get_codec)],
) -> AuthService:
    return AuthService(db, settings, codec)


def get_password_reset_service(
    db: DbDep,
    settings: SettingsDep,
    email_sender: Annotated[EmailSender, Depends(get_email_sender)],
) -> PasswordResetService:
    return PasswordResetService(db, settings, email_sender)


def get_upload_service(request: Request) -> UploadService:
    return request.app.state.upload_service


def get_users_service(db: DbDep) -> UsersService:
    return UsersService(db)


def get_settings_service(db: DbDep) -> SettingsService:
    return SettingsService(db)


def get_dashboard_service(db: DbDep) -> DashboardService:
    return DashboardService(db)


def get_files_service(settings: SettingsDep) -> FilesService:
    return FilesService(settings.UPLOAD_DIR)
