"""ORM model for admin-editable application settings."""

from sqlalchemy import Column, DateTime, String, Text

from app.core.clock import utcnow
from app.models.base import Base

SETTING_TYPES = ("string", "number", "boolean", "json")


class AppSetting(Base):
    """Key/value setting with a declared type tag and UI grouping."""

    __tablename__ = "app_settings"

    id = Column(String(36), primary_key=True)
    key = Column(String(255), nullable=False, unique=True, index=True)
    value = Column(Text, nullable=False, default="")
    type = Column(String(16), nullable=False, default="string")
    label = Column(String(255), nullable=False, default="")
    setting_group = Column(String(64), nullable=False, default="general", index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


# (key, value, type, label, group) seeded on first boot.
DEFAULT_SETTINGS: tuple[tuple[str, str, str, str, str], ...] = (
    ("app_name", "My App", "string", "Application Name", "general"),
    ("app_description", "A FastAPI + SvelteKit application", "string", "Description", "general"),
    ("maintenance_mode", "false", "boolean", "Maintenance Mode", "general"),
    ("allow_registration", "true", "boolean", "Allow Registration", "auth"),
    ("max_login_attempts", "5", "number", "Max Login Attempts", "auth"),
)
