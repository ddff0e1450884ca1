"""User notification preferences."""
from pydantic import BaseModel, Field, field_validator

LEAD_MINUTE_CHOICES = (5, 10, 15, 30)

DEFAULT_PRAYERS = {
    "fajr": True,
    "dhuhr": True,
    "asr": True,
    "maghrib": True,
    "isha": True,
}


class NotificationSettings(BaseModel):
    enabled: bool = False
    prayers: dict[str, bool] = Field(default_factory=lambda: dict(DEFAULT_PRAYERS))
    lead_minutes: int = 10
    sound: bool = True

    @field_validator("lead_minutes")
    @classmethod
    def check_lead_minutes(cls, value: int) -> int:
        if value not in LEAD_MINUTE_CHOICES:
            raise ValueError(f"lead_minutes must be one of {LEAD_MINUTE_CHOICES}")
        return value

    @field_validator("prayers")
    @classmethod
    def lowercase_names(cls, value: dict[str, bool]) -> dict[str, bool]:
        return {name.lower(): enabled for name, enabled in value.items()}

    def is_event_enabled(self, name: str) -> bool:
        """Events missing from `prayers` are disabled."""
        return self.prayers.get(name.lower(), False)

    def enabled_names(self, events) -> set[str]:
        return {event.name for event in events if self.is_event_enabled(event.name)}

    def to_bytes(self) -> bytes:
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, raw: bytes) -> "NotificationSettings":
        return cls.model_validate_json(raw)
