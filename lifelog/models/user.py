import re
from typing import Optional

from pydantic import BaseModel, field_validator

from lifelog.config import DEFAULT_REMINDER_TIME

TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _check_time(v: Optional[str]) -> Optional[str]:
    if v is not None and not TIME_RE.match(v):
        raise ValueError("time must be HH:MM (24-hour)")
    return v


class Identity(BaseModel):
    """Read-only projection of the auth provider's user."""

    uid: str
    email: Optional[str] = None
    display_name: Optional[str] = None
    email_verified: bool = False
    created_at: Optional[str] = None


class QuietHours(BaseModel):
    enabled: bool = False
    start: str = "22:00"
    end: str = "08:00"


class NotificationPreferences(BaseModel):
    daily_reminders: bool = False
    reminder_time: str = DEFAULT_REMINDER_TIME
    weekly_digest: Optional[bool] = None
    achievements: Optional[bool] = None
    quiet_hours: Optional[QuietHours] = None


class ReminderSchedule(BaseModel):
    user_id: str
    fcm_token: str
    reminder_time: str


def default_profile_preferences() -> dict:
    """Preferences block written to a fresh profile at sign-up."""
    return {
        "theme": "light",
        "notifications": {
            "enabled": False,
            "daily_reminders": False,
            "weekly_digest": False,
            "achievements": False,
            "quiet_hours": {"enabled": False, "start": "22:00", "end": "07:00"},
        },
    }


# ── Request bodies ────────────────────────────────────────────────
class SignUpRequest(BaseModel):
    email: str
    password: str
    name: str


class SignInRequest(BaseModel):
    email: str
    password: str


class ResetPasswordRequest(BaseModel):
    email: str


class VerifyEmailRequest(BaseModel):
    code: str


class EnableRemindersRequest(BaseModel):
    token: str
    reminder_time: str = DEFAULT_REMINDER_TIME

    @field_validator("reminder_time")
    @classmethod
    def reminder_time_format(cls, v: Optional[str]) -> Optional[str]:
        return _check_time(v)


class PreferencesUpdate(BaseModel):
    daily_reminders: Optional[bool] = None
    reminder_time: Optional[str] = None
    weekly_digest: Optional[bool] = None
    achievements: Optional[bool] = None
    quiet_hours: Optional[QuietHours] = None

    @field_validator("reminder_time")
    @classmethod
    def reminder_time_format(cls, v: Optional[str]) -> Optional[str]:
        return _check_time(v)
