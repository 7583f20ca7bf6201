"""Tests for reminder registration and delivery."""

import asyncio
from datetime import datetime, timezone

import pytest

from lifelog.errors import NotificationError
from lifelog.services.notification_service import (
    REMINDER_LINK,
    REMINDER_TITLE,
    NotificationService,
    current_reminder_time,
)


def run(coro):
    return asyncio.run(coro)


@pytest.fixture()
def service(store, push):
    for uid in ("u1", "u2", "u3"):
        run(store.set("profiles", uid, {"email": f"{uid}@example.com"}))
    return NotificationService(store, push)


def test_preferences_default_when_unset(service):
    prefs = run(service.get_preferences("u1"))
    assert prefs.daily_reminders is False


def test_enable_stores_token_and_preferences(service, store):
    prefs = run(service.enable_daily_reminders("u1", "token-1", "09:30"))
    profile = store.collections["profiles"]["u1"]
    assert profile["fcm_token"] == "token-1"
    assert profile["notification_preferences"]["reminder_time"] == "09:30"
    assert prefs.daily_reminders is True
    assert run(service.get_preferences("u1")).daily_reminders is True


def test_enable_requires_token(service):
    with pytest.raises(NotificationError):
        run(service.enable_daily_reminders("u1", ""))


def test_enable_for_missing_profile_fails(service):
    with pytest.raises(NotificationError):
        run(service.enable_daily_reminders("ghost", "token"))


def test_disable_clears_token(service, store):
    run(service.enable_daily_reminders("u1", "token-1"))
    run(service.disable_daily_reminders("u1"))
    profile = store.collections["profiles"]["u1"]
    assert profile["fcm_token"] is None
    assert profile["notification_preferences"]["daily_reminders"] is False


def test_update_preferences_merges_quiet_hours(service):
    prefs = run(service.update_preferences("u1", quiet_hours={"start": "23:00"}))
    assert prefs.daily_reminders is True
    assert prefs.weekly_digest is True
    assert prefs.quiet_hours.start == "23:00"
    assert prefs.quiet_hours.end == "08:00"

    prefs = run(service.update_preferences("u1", weekly_digest=False))
    assert prefs.weekly_digest is False
    assert prefs.quiet_hours.start == "23:00"


def test_update_preferences_missing_profile(service):
    with pytest.raises(NotificationError) as excinfo:
        run(service.update_preferences("ghost", daily_reminders=True))
    assert excinfo.value.message == "User document not found"


def test_due_reminders_only_match_current_time(service, push):
    run(service.enable_daily_reminders("u1", "token-1", "09:00"))
    run(service.enable_daily_reminders("u2", "token-2", "10:00"))

    result = run(service.send_due_reminders("09:00"))

    assert result["total"] == 1
    assert result["successful"] == 1
    assert result["current_time"] == "09:00"
    assert [m["token"] for m in push.sent] == ["token-1"]
    assert push.sent[0]["title"] == REMINDER_TITLE
    assert push.sent[0]["link"] == REMINDER_LINK
    assert push.sent[0]["data"]["type"] == "daily_reminder"


def test_one_failed_send_does_not_abort_batch(service, push):
    run(service.enable_daily_reminders("u1", "bad-token"))
    run(service.enable_daily_reminders("u2", "token-2"))
    push.fail_tokens.add("bad-token")

    result = run(service.send_all_reminders())

    assert result["successful"] == 1
    assert result["failed"] == 1
    assert result["failed_details"][0]["user_id"] == "u1"


def test_users_with_reminders_off_are_skipped(service, store):
    run(service.enable_daily_reminders("u1", "token-1"))
    run(store.update("profiles", "u3", {"fcm_token": "token-3", "notification_preferences": {"daily_reminders": False}}))
    schedules = run(service.list_reminder_schedules())
    assert [s.user_id for s in schedules] == ["u1"]


def test_without_push_provider_every_send_fails(store):
    run(store.set("profiles", "u1", {}))
    service = NotificationService(store, None)
    run(service.enable_daily_reminders("u1", "token-1"))
    result = run(service.send_all_reminders())
    assert result["failed"] == 1


def test_test_notification_needs_token(service, push):
    with pytest.raises(NotificationError):
        run(service.send_test_notification("u1"))
    run(service.enable_daily_reminders("u1", "token-1"))
    assert run(service.send_test_notification("u1")) == "msg-1"
    assert push.sent[0]["data"]["type"] == "test"


def test_current_reminder_time_uses_reminder_timezone():
    now = datetime(2024, 1, 1, 0, 0, tzinfo=timezone.utc)
    assert current_reminder_time(now, "Asia/Kolkata") == "05:30"
    assert current_reminder_time(now, "UTC") == "00:00"
