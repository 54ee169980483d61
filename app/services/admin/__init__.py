"""Admin panel services."""

from app.services.admin.dashboard import DashboardService
from app.services.admin.files import FilesService
from app.services.admin.settings import SettingsService
from app.services.admin.users import UsersService

__all__ = ["DashboardService", "FilesService", "SettingsService", "UsersService"]
