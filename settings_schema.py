import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

BOOL_KEYS = {
    "weekly_summary_enabled",
    "motivation_reminder_enabled",
    "notification_permission",
}


class SettingsSchema(BaseModel):
    weekly_summary_enabled: bool = True
    motivation_reminder_enabled: bool = True
    notification_permission: bool = True
    last_login_date: Optional[str] = ""
    notifications_initialized_date: Optional[str] = ""
    language: str = "en"
    push_token: Optional[str | bool] = None

    @field_validator("language")
    @classmethod
    def _known_language(cls, value: str) -> str:
        if value not in {"en", "tr"}:
            raise ValueError(f"unsupported language: {value}")
        return value

    @field_validator("last_login_date", "notifications_initialized_date", mode="before")
    @classmethod
    def _iso_date(cls, value):
        if isinstance(value, datetime.date):
            return value.isoformat()
        if value:
            datetime.date.fromisoformat(str(value)[:10])
        return value


def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))


class NotificationScheduleState(BaseModel):
    """Persisted notification preferences plus the last recorded login."""

    model_config = ConfigDict(populate_by_name=True)

    weekly_summary_enabled: bool = Field(True, alias="weeklySummary")
    motivation_reminder_enabled: bool = Field(True, alias="motivationReminder")
    last_login_date: Optional[datetime.date] = Field(None, exclude=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_json(cls, raw: str) -> "NotificationScheduleState":
        return cls.model_validate_json(raw)
