from typing import Any

from lifelog.providers.base import DocumentStore
from lifelog.supabase_rest import sb_insert, sb_select, sb_update, sb_upsert


class SupabaseDocumentStore(DocumentStore):
    """DocumentStore over PostgREST tables; the key column is `id`."""

    async def get(self, collection: str, key: str) -> dict | None:
        rows = await sb_select(collection, filters=[("id", "==", key)])
        return rows[0] if rows else None

    async def set(self, collection: str, key: str, data: dict, merge: bool = False) -> dict:
        row = {**data, "id": key}
        if merge:
            return await sb_upsert(collection, row)
        return await sb_insert(collection, row)

    async def update(self, collection: str, key: str, data: dict) -> dict:
        return await sb_update(collection, "id", key, data)

    async def add(self, collection: str, data: dict) -> dict:
        return await sb_insert(collection, data)

    async def query(
        self,
        collection: str,
        filters: list[tuple[str, str, Any]] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        return await sb_select(collection, filters=filters, order_by=order_by, descending=descending)
