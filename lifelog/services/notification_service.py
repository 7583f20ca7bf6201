"""
notification_service.py — Reminder Registration & Delivery
Stores the push token and notification preferences on the profile document,
and sends the daily journaling reminder to opted-in users. Delivery is
fire-and-forget: one failed send never aborts a batch.
"""

import logging
from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from lifelog.config import PROFILES_TABLE, REMINDER_TIMEZONE, DEFAULT_REMINDER_TIME
from lifelog.errors import NotificationError
from lifelog.models.user import NotificationPreferences, QuietHours, ReminderSchedule
from lifelog.providers.base import SERVER_TIMESTAMP, DocumentStore, PushProvider

logger = logging.getLogger(__name__)

REMINDER_TITLE = "Daily Journal Reminder"
REMINDER_BODY = "Time to write in your journal! Take a moment to reflect on your day."
REMINDER_LINK = "/journal/new"


def current_reminder_time(now: datetime | None = None, tz: str = REMINDER_TIMEZONE) -> str:
    """HH:MM wall-clock time in the reminder timezone."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(ZoneInfo(tz)).strftime("%H:%M")


def _mask(token: str) -> str:
    return token[:10] + "..."


class NotificationService:
    def __init__(self, store: DocumentStore, push: PushProvider | None, profiles_table: str = PROFILES_TABLE):
        self.store = store
        self.push = push
        self.profiles_table = profiles_table

    # ------------------------------------------------------------------
    # Preferences
    # ------------------------------------------------------------------
    async def get_preferences(self, user_id: str) -> NotificationPreferences:
        profile = await self.store.get(self.profiles_table, user_id)
        if not profile or not profile.get("notification_preferences"):
            return NotificationPreferences()
        return NotificationPreferences(**profile["notification_preferences"])

    async def enable_daily_reminders(
        self, user_id: str, token: str, reminder_time: str = DEFAULT_REMINDER_TIME
    ) -> NotificationPreferences:
        if not token:
            raise NotificationError("Failed to register for notifications")
        prefs = NotificationPreferences(daily_reminders=True, reminder_time=reminder_time)
        await self._write(user_id, {
            "fcm_token": token,
            "notification_preferences": prefs.model_dump(exclude_none=True),
            "updated_at": SERVER_TIMESTAMP,
        })
        logger.info(f"Daily reminders enabled for {user_id}")
        return prefs

    async def disable_daily_reminders(self, user_id: str) -> NotificationPreferences:
        prefs = NotificationPreferences(daily_reminders=False)
        await self._write(user_id, {
            "fcm_token": None,
            "notification_preferences": prefs.model_dump(exclude_none=True),
            "updated_at": SERVER_TIMESTAMP,
        })
        logger.info(f"Daily reminders disabled for {user_id}")
        return prefs

    async def update_preferences(self, user_id: str, **changes) -> NotificationPreferences:
        """Merge changes over the stored preferences; quiet_hours merges key by key."""
        profile = await self.store.get(self.profiles_table, user_id)
        if not profile:
            raise NotificationError("User document not found")

        current = NotificationPreferences(**(profile.get("notification_preferences") or {
            "daily_reminders": True,
            "weekly_digest": True,
            "achievements": True,
        }))
        updates = {k: v for k, v in changes.items() if v is not None}

        quiet = (current.quiet_hours or QuietHours()).model_dump()
        new_quiet = updates.pop("quiet_hours", None)
        if isinstance(new_quiet, QuietHours):
            new_quiet = new_quiet.model_dump()
        quiet.update(new_quiet or {})

        merged = NotificationPreferences(**{**current.model_dump(), **updates, "quiet_hours": quiet})
        await self._write(user_id, {
            "notification_preferences": merged.model_dump(exclude_none=True),
            "updated_at": SERVER_TIMESTAMP,
        })
        return merged

    async def _write(self, user_id: str, data: dict) -> None:
        try:
            await self.store.update(self.profiles_table, user_id, data)
        except Exception as e:
            logger.error(f"Error updating notification preferences for {user_id}: {e}")
            raise NotificationError() from e

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------
    async def list_reminder_schedules(self) -> list[ReminderSchedule]:
        """Profiles with a push token and daily reminders switched on."""
        profiles = await self.store.query(self.profiles_table, filters=[("fcm_token", "!=", None)])
        logger.info(f"[Scheduler] Found {len(profiles)} users with FCM tokens")

        schedules = []
        for profile in profiles:
            prefs = profile.get("notification_preferences") or {}
            if not profile.get("fcm_token") or not prefs.get("daily_reminders"):
                continue
            schedules.append(ReminderSchedule(
                user_id=str(profile["id"]),
                fcm_token=profile["fcm_token"],
                reminder_time=prefs.get("reminder_time") or DEFAULT_REMINDER_TIME,
            ))
        logger.info(f"[Scheduler] Found {len(schedules)} users with daily reminders enabled")
        return schedules

    async def send_daily_reminder(self, schedule: ReminderSchedule) -> str:
        if self.push is None:
            raise NotificationError("Push messaging is not configured")
        logger.info(f"[Scheduler] Sending daily reminder to user {schedule.user_id} ({_mask(schedule.fcm_token)})")
        return await self.push.send(
            schedule.fcm_token,
            REMINDER_TITLE,
            REMINDER_BODY,
            data={
                "type": "daily_reminder",
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "click_action": REMINDER_LINK,
            },
            link=REMINDER_LINK,
        )

    async def _send_batch(self, schedules: list[ReminderSchedule]) -> dict:
        successful = 0
        failed_details = []
        for schedule in schedules:
            try:
                await self.send_daily_reminder(schedule)
                successful += 1
            except Exception as e:
                logger.error(f"[Scheduler] Failed to send to user {schedule.user_id}: {e}")
                failed_details.append({
                    "user_id": schedule.user_id,
                    "code": getattr(e, "code", None),
                    "message": str(e),
                })
        return {
            "total": len(schedules),
            "successful": successful,
            "failed": len(failed_details),
            "failed_details": failed_details,
        }

    async def send_due_reminders(self, current_time: str | None = None) -> dict:
        """Remind users whose reminder_time equals the current HH:MM."""
        current_time = current_time or current_reminder_time()
        schedules = await self.list_reminder_schedules()
        due = [s for s in schedules if s.reminder_time == current_time]
        logger.info(f"[Scheduler] {len(due)} users to notify at {current_time}")
        result = await self._send_batch(due)
        result["current_time"] = current_time
        return result

    async def send_all_reminders(self) -> dict:
        return await self._send_batch(await self.list_reminder_schedules())

    async def send_test_notification(self, user_id: str) -> str:
        profile = await self.store.get(self.profiles_table, user_id)
        token = (profile or {}).get("fcm_token")
        if not token:
            raise NotificationError("No push token registered. Enable daily reminders first.")
        if self.push is None:
            raise NotificationError("Push messaging is not configured")
        return await self.push.send(
            token,
            "Test Notification",
            "Notifications are working!",
            data={"type": "test", "timestamp": datetime.now(timezone.utc).isoformat()},
        )
