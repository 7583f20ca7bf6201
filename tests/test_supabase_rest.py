"""Tests for PostgREST query encoding and timestamp resolution."""

import pytest

from lifelog.providers.base import SERVER_TIMESTAMP
from lifelog.supabase_rest import _column, _encode_filter, resolve_timestamps


def test_column_turns_dotted_path_into_json_arrow():
    assert _column("user_id") == "user_id"
    assert _column("notification_preferences.daily_reminders") == "notification_preferences->>daily_reminders"


def test_encode_filter():
    assert _encode_filter("user_id", "==", "abc") == "user_id=eq.abc"
    assert _encode_filter("fcm_token", "!=", None) == "fcm_token=not.is.null"
    assert _encode_filter("fcm_token", "==", None) == "fcm_token=is.null"
    assert _encode_filter("active", "==", True) == "active=eq.true"


def test_encode_filter_rejects_unknown_operator():
    with pytest.raises(ValueError):
        _encode_filter("mood", ">", "3")


def test_resolve_timestamps_replaces_nested_sentinels():
    resolved = resolve_timestamps({"a": SERVER_TIMESTAMP, "b": {"c": SERVER_TIMESTAMP}, "d": 1})
    assert isinstance(resolved["a"], str)
    assert resolved["b"]["c"] == resolved["a"]
    assert resolved["d"] == 1
