"""
supabase_rest.py — HTTP-based document client using Supabase's PostgREST API.
Async httpx calls authenticated with the service role key.
"""
import logging
from datetime import datetime, timezone
from urllib.parse import quote

import httpx

from lifelog.config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, REQUEST_TIMEOUT
from lifelog.providers.base import SERVER_TIMESTAMP, ProviderError

logger = logging.getLogger(__name__)

_OPS = {"==": "eq", "!=": "neq"}


def _headers(prefer: str = "return=representation") -> dict:
    return {
        "apikey": SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {SUPABASE_SERVICE_ROLE_KEY}",
        "Content-Type": "application/json",
        "Prefer": prefer,
    }


def _column(field: str) -> str:
    """notification_preferences.daily_reminders → notification_preferences->>daily_reminders"""
    parts = field.split(".")
    if len(parts) == 1:
        return field
    return "->".join(parts[:-1]) + "->>" + parts[-1]


def _encode_filter(field: str, op: str, value) -> str:
    if op not in _OPS:
        raise ValueError(f"Unsupported filter operator: {op}")
    column = _column(field)
    if value is None:
        return f"{column}=is.null" if op == "==" else f"{column}=not.is.null"
    if isinstance(value, bool):
        value = "true" if value else "false"
    return f"{column}={_OPS[op]}.{quote(str(value))}"


def resolve_timestamps(data: dict) -> dict:
    """Substitute SERVER_TIMESTAMP sentinels with the UTC write time."""
    now = datetime.now(timezone.utc).isoformat()
    resolved = {}
    for key, value in data.items():
        if value is SERVER_TIMESTAMP:
            resolved[key] = now
        elif isinstance(value, dict):
            resolved[key] = resolve_timestamps(value)
        else:
            resolved[key] = value
    return resolved


def _first(result):
    return result[0] if isinstance(result, list) and result else {}


async def _request(method: str, url: str, prefer: str = "return=representation", json=None):
    try:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            resp = await client.request(method, url, headers=_headers(prefer), json=json)
            resp.raise_for_status()
            return resp.json() if resp.content else []
    except httpx.HTTPStatusError as e:
        logger.error(f"PostgREST {method} {url} failed: {e.response.status_code} {e.response.text}")
        code = "permission-denied" if e.response.status_code in (401, 403) else str(e.response.status_code)
        raise ProviderError(code, e.response.text or str(e)) from e
    except httpx.TransportError as e:
        logger.error(f"PostgREST {method} {url} transport error: {e}")
        raise ProviderError("network-request-failed", str(e)) from e


async def sb_select(
    table: str,
    filters: list[tuple] | None = None,
    columns: str = "*",
    order_by: str | None = None,
    descending: bool = False,
) -> list:
    """Select rows from a table with optional filters and single-column ordering."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?select={columns}"
    for field, op, value in filters or []:
        url += "&" + _encode_filter(field, op, value)
    if order_by:
        url += f"&order={order_by}.{'desc' if descending else 'asc'}"
    return await _request("GET", url)


async def sb_insert(table: str, data: dict) -> dict:
    """Insert a row and return the created record."""
    url = f"{SUPABASE_URL}/rest/v1/{table}"
    return _first(await _request("POST", url, json=resolve_timestamps(data)))


async def sb_upsert(table: str, data: dict, on_conflict: str = "id") -> dict:
    """Insert or merge into the row sharing the on_conflict column."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?on_conflict={on_conflict}"
    prefer = "resolution=merge-duplicates,return=representation"
    return _first(await _request("POST", url, prefer=prefer, json=resolve_timestamps(data)))


async def sb_update(table: str, filter_col: str, filter_val, data: dict) -> dict:
    """Update rows where filter_col = filter_val."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?{filter_col}=eq.{quote(str(filter_val))}"
    result = await _request("PATCH", url, json=resolve_timestamps(data))
    if not result:
        raise ProviderError("not-found", f"No {table} row with {filter_col}={filter_val}")
    return _first(result)
