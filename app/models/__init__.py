"""SQLAlchemy ORM models."""

from app.models.base import Base, new_id
from app.models.setting import AppSetting
from app.models.token import PasswordResetToken, RefreshToken
from app.models.user import User

__all__ = ["AppSetting", "Base", "PasswordResetToken", "RefreshToken", "User", "new_id"]
