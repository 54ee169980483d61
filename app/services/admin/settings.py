"""Admin-editable application settings (typed key/value rows grouped for the UI)."""

import json
import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.clock import Clock, utcnow
from app.core.exceptions import ConflictError, NotFoundError, ValidationError
from app.models import AppSetting, new_id
from app.models.setting import DEFAULT_SETTINGS, SETTING_TYPES
from app.schemas.admin import SettingUpdate

logger = logging.getLogger(__name__)

BOOLEAN_VALUES = ("true", "false")


def check_value(setting_type: str, value: str, *, field: str = "value") -> None:
    """Raise ValidationError if value does not parse as setting_type."""
    problem = None
    if setting_type == "number":
        try:
            float(value)
        except ValueError:
            problem = "must be a number"
    elif setting_type == "boolean":
        if value not in BOOLEAN_VALUES:
            problem = "must be 'true' or 'false'"
    elif setting_type == "json":
        try:
            json.loads(value)
        except ValueError:
            problem = "must be valid JSON"
    if problem:
        raise ValidationError(details=[{"field": field, "message": problem}])


class SettingsService:
    def __init__(self, db: Session, *, clock: Clock = utcnow) -> None:
        self.db = db
        self._clock = clock

    def get_all(self) -> list[AppSetting]:
        return (
            self.db.query(AppSetting)
            .order_by(AppSetting.setting_group.asc(), AppSetting.key.asc())
            .all()
        )

    def get_by_group(self, group: str) -> list[AppSetting]:
        return (
            self.db.query(AppSetting)
            .filter(AppSetting.setting_group == group)
            .order_by(AppSetting.key.asc())
            .all()
        )

    def get_by_key(self, key: str) -> AppSetting:
        setting = self.db.query(AppSetting).filter(AppSetting.key == key).first()
        if setting is None:
            raise NotFoundError("Setting not found")
        return setting

    def update(self, key: str, value: str) -> AppSetting:
        setting = self.get_by_key(key)
        check_value(setting.type, value)
        setting.value = value
        setting.updated_at = self._clock()
        self.db.commit()
        self.db.refresh(setting)
        return setting

    def update_batch(self, updates: list[SettingUpdate]) -> list[AppSetting]:
        """All-or-nothing: an unknown key or bad value leaves every setting unchanged."""
        now = self._clock()
        for i, item in enumerate(updates):
            setting = self.db.query(AppSetting).filter(AppSetting.key == item.key).first()
            if setting is None:
                self.db.rollback()
                raise NotFoundError(f"Setting not found: {item.key}")
            try:
                check_value(setting.type, item.value, field=f"settings.{i}.value")
            except ValidationError:
                self.db.rollback()
                raise
            setting.value = item.value
            setting.updated_at = now
        self.db.commit()
        return self.get_all()

    def create(
        self,
        key: str,
        value: str,
        setting_type: str = "string",
        label: str = "",
        group: str = "general",
    ) -> AppSetting:
        if setting_type not in SETTING_TYPES:
            raise ValidationError(details=[{"field": "type", "message": "unknown setting type"}])
        check_value(setting_type, value)
        now = self._clock()
        setting = AppSetting(
            id=new_id(),
            key=key,
            value=value,
            type=setting_type,
            label=label,
            setting_group=group,
            created_at=now,
            updated_at=now,
        )
        self.db.add(setting)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ConflictError("setting already exists", code="SETTING_EXISTS") from e
        self.db.refresh(setting)
        return setting

    def delete(self, key: str) -> None:
        self.db.query(AppSetting).filter(AppSetting.key == key).delete(synchronize_session=False)
        self.db.commit()

    def seed_defaults(self) -> int:
        """Insert the default settings when the table is empty. Returns rows inserted."""
        if self.db.query(AppSetting.id).first() is not None:
            return 0
        now = self._clock()
        for key, value, setting_type, label, group in DEFAULT_SETTINGS:
            self.db.add(
                AppSetting(
                    id=new_id(),
                    key=key,
                    value=value,
                    type=setting_type,
                    label=label,
                    setting_group=group,
                    created_at=now,
                    updated_at=now,
                )
            )
        self.db.commit()
        logger.info("Seeded default settings", extra={"count": len(DEFAULT_SETTINGS)})
        return len(DEFAULT_SETTINGS)
