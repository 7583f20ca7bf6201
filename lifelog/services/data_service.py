"""
data_service.py — Backup export/import
Wraps a user's entries and notification preferences in the versioned backup
envelope {version, userId, timestamp, data} and restores them.
"""

import logging
import math
from datetime import datetime, timezone

from lifelog.config import DATA_VERSION
from lifelog.errors import PermissionDenied, ValidationError
from lifelog.models.journal import BackupEnvelope, NewJournalEntry
from lifelog.services.journal_service import EntryRepository
from lifelog.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


def validate_backup_data(data) -> bool:
    return isinstance(data, dict) and "version" in data and "userId" in data


def backup_filename(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return f"lifelog-backup-{now.isoformat()}.json"


def format_storage_size(size: int) -> str:
    if size == 0:
        return "0 Bytes"
    k = 1024
    sizes = ["Bytes", "KB", "MB", "GB"]
    i = min(int(math.floor(math.log(size) / math.log(k))), len(sizes) - 1)
    return f"{round(size / k ** i, 2):g} {sizes[i]}"


class DataService:
    def __init__(self, repository: EntryRepository, notifications: NotificationService):
        self.repository = repository
        self.notifications = notifications

    async def export_user_data(self, user_id: str) -> BackupEnvelope:
        entries = await self.repository.fetch_entries(user_id)
        prefs = await self.notifications.get_preferences(user_id)
        return BackupEnvelope(
            version=DATA_VERSION,
            userId=user_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
            data={
                "entries": [e.model_dump() for e in entries],
                "notificationPreferences": prefs.model_dump(exclude_none=True),
            },
        )

    async def import_user_data(self, user_id: str, envelope: dict) -> int:
        """Re-add every backed-up entry under user_id; returns how many were imported."""
        if not validate_backup_data(envelope):
            raise ValidationError("Invalid backup file.")
        if str(envelope["userId"]) != str(user_id):
            raise PermissionDenied("This backup belongs to a different account.")

        entries = (envelope.get("data") or {}).get("entries") or []
        imported = 0
        for raw in entries:
            if not isinstance(raw, dict) or not raw.get("content"):
                logger.warning("Skipping malformed backup entry")
                continue
            await self.repository.add_entry(NewJournalEntry(
                user_id=user_id,
                content=raw["content"],
                mood=str(raw.get("mood", "")),
                date=str(raw.get("date", "")),
            ))
            imported += 1
        logger.info(f"Imported {imported} entries for {user_id}")
        return imported
