"""Schemas for admin endpoints: users, settings, dashboard, files."""

from datetime import datetime
from typing import Literal

from pydantic import Field

from app.schemas.auth import UserResponse
from app.schemas.common import CamelModel, EmailAddress

Role = Literal["user", "admin"]
SettingType = Literal["string", "number", "boolean", "json"]

# Columns admins may sort the user list by.
USER_SORT_COLUMNS = ("created_at", "updated_at", "email", "name", "role", "last_login_at")


class UserListParams(CamelModel):
    """Pagination and filters for the admin user list. Out-of-range values fall back to defaults."""

    page: int = 1
    page_size: int = 10
    search: str = ""
    sort_by: str = "created_at"
    sort_dir: str = "desc"
    role: str | None = None
    is_active: bool | None = None


class UserList(CamelModel):
    items: list[UserResponse]
    total: int
    page: int
    page_size: int
    total_pages: int


class CreateUserRequest(CamelModel):
    email: EmailAddress
    password: str = Field(..., min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=100)
    role: Role = "user"
    is_active: bool = True


class UpdateUserRequest(CamelModel):
    """Partial update; omitted fields are left unchanged."""

    email: EmailAddress | None = None
    password: str | None = Field(default=None, min_length=8, max_length=128)
    name: str | None = Field(default=None, max_length=100)
    role: Role | None = None
    is_active: bool | None = None


class SettingResponse(CamelModel):
    id: str
    key: str
    value: str
    type: SettingType
    label: str
    group: str = Field(validation_alias="setting_group")
    updated_at: datetime


class UpdateSettingRequest(CamelModel):
    value: str


class SettingUpdate(CamelModel):
    key: str = Field(..., min_length=1, max_length=255)
    value: str


class UpdateSettingsBatchRequest(CamelModel):
    settings: list[SettingUpdate] = Field(..., min_length=1)


class RecentUser(CamelModel):
    id: str
    email: str
    name: str | None = None
    created_at: datetime


class ActivityLogEntry(CamelModel):
    type: str
    message: str
    timestamp: datetime


class DashboardStats(CamelModel):
    total_users: int
    active_users: int
    admin_users: int
    new_users_today: int
    new_users_this_week: int
    new_users_this_month: int
    recent_users: list[RecentUser]
    recent_activity: list[ActivityLogEntry]


class FileEntry(CamelModel):
    name: str
    path: str
    size: int
    is_dir: bool
    mod_time: datetime
    extension: str
    mime_type: str


class FileListing(CamelModel):
    files: list[FileEntry]
    total: int
    total_size: int
    current_dir: str
