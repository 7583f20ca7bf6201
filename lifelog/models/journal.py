import re
from datetime import date as calendar_date
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator


MOOD_LEVELS = ("1", "2", "3", "4", "5")
DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class NewJournalEntry(BaseModel):
    """Input shape for EntryRepository.add_entry; no id or timestamps yet."""

    user_id: str
    content: str
    mood: str
    date: str  # YYYY-MM-DD, local calendar day


class JournalEntry(NewJournalEntry):
    id: Optional[str] = None
    created_at: str
    updated_at: Optional[str] = None

    @classmethod
    def from_row(cls, row: dict, default_ts: str) -> "JournalEntry":
        """Build from a store row; unresolved timestamps fall back to default_ts."""
        return cls(
            id=str(row["id"]) if row.get("id") is not None else None,
            user_id=str(row.get("user_id", "")),
            content=row.get("content") or "",
            mood=str(row.get("mood", "")),
            date=str(row.get("date", "")),
            created_at=str(row.get("created_at") or default_ts),
            updated_at=str(row.get("updated_at") or default_ts),
        )


class JournalEntryCreate(BaseModel):
    """Request body for the journal endpoint; enforces the entry form contract."""

    content: str = Field(min_length=1)
    mood: str
    date: str

    @field_validator("mood")
    @classmethod
    def mood_is_level(cls, v: str) -> str:
        if v not in MOOD_LEVELS:
            raise ValueError("mood must be one of 1..5")
        return v

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("content must not be empty")
        return v

    @field_validator("date")
    @classmethod
    def date_is_calendar_day(cls, v: str) -> str:
        if not DATE_RE.match(v):
            raise ValueError("date must be YYYY-MM-DD")
        calendar_date.fromisoformat(v)
        return v


class MoodStats(BaseModel):
    total: int = 0
    by_mood: dict[str, int] = {}
    average_mood: float = 0.0


class MoodPoint(BaseModel):
    date: str
    label: str
    mood: Optional[float] = None
    entries: list[JournalEntry] = []


class WordFrequency(BaseModel):
    text: str
    value: int


class BackupEnvelope(BaseModel):
    version: str
    userId: str
    timestamp: str
    data: dict[str, Any] = {}
