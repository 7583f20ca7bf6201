"""
journal_service.py — Entry Repository
Append-only access to a user's journal entries. Keeps the last fetched set in
memory (most recent first); entries are never edited or deleted here.
"""

import logging
from datetime import datetime, timezone

from lifelog.config import ENTRIES_TABLE
from lifelog.errors import RepositoryError
from lifelog.models.journal import JournalEntry, MoodStats, NewJournalEntry
from lifelog.providers.base import SERVER_TIMESTAMP, DocumentStore
from lifelog.services.analytics_service import mood_stats

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class EntryRepository:
    def __init__(self, store: DocumentStore, collection: str = ENTRIES_TABLE):
        self.store = store
        self.collection = collection
        self.entries: list[JournalEntry] = []
        self.loading = False
        self.error: str | None = None

    async def add_entry(self, entry: NewJournalEntry | dict) -> JournalEntry:
        if isinstance(entry, dict):
            entry = NewJournalEntry(**entry)

        self.loading = True
        self.error = None
        try:
            logger.info(f"Adding journal entry for user {entry.user_id} on {entry.date}")
            row = await self.store.add(self.collection, {
                **entry.model_dump(),
                "created_at": SERVER_TIMESTAMP,
                "updated_at": SERVER_TIMESTAMP,
            })
        except Exception as e:
            logger.error(f"Error adding journal entry: {e}")
            self.error = str(e) or "Failed to add journal entry"
            raise RepositoryError(self.error) from e
        finally:
            self.loading = False

        now = _now_iso()
        new_entry = JournalEntry(
            **entry.model_dump(),
            id=str(row["id"]) if row.get("id") is not None else None,
            created_at=now,
            updated_at=now,
        )
        self.entries = [new_entry, *self.entries]
        return new_entry

    async def fetch_entries(self, user_id: str) -> list[JournalEntry]:
        self.loading = True
        self.error = None
        try:
            logger.info(f"Fetching journal entries for user: {user_id}")
            rows = await self.store.query(
                self.collection,
                filters=[("user_id", "==", user_id)],
                order_by="date",
                descending=True,
            )
        except Exception as e:
            logger.error(f"Error fetching journal entries: {e}")
            self.error = str(e) or "Failed to fetch journal entries"
            raise RepositoryError(self.error) from e
        finally:
            self.loading = False

        now = _now_iso()
        self.entries = [JournalEntry.from_row(row, now) for row in rows]
        return self.entries

    def clear_entries(self) -> None:
        self.entries = []

    def mood_stats(self) -> MoodStats:
        return mood_stats(self.entries)
