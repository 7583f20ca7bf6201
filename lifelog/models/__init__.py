from lifelog.models.journal import (
    MOOD_LEVELS,
    BackupEnvelope,
    JournalEntry,
    JournalEntryCreate,
    MoodPoint,
    MoodStats,
    NewJournalEntry,
    WordFrequency,
)
from lifelog.models.user import Identity, NotificationPreferences, QuietHours, ReminderSchedule

__all__ = [
    "MOOD_LEVELS",
    "BackupEnvelope",
    "JournalEntry",
    "JournalEntryCreate",
    "MoodPoint",
    "MoodStats",
    "NewJournalEntry",
    "WordFrequency",
    "Identity",
    "NotificationPreferences",
    "QuietHours",
    "ReminderSchedule",
]
