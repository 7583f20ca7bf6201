import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from lifelog.auth import get_context, get_current_user, require_cron_secret
from lifelog.config import REMINDER_TIMEZONE
from lifelog.context import AppContext
from lifelog.errors import LifelogError
from lifelog.models.user import EnableRemindersRequest, PreferencesUpdate
from lifelog.services.notification_service import current_reminder_time

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/notifications", tags=["Notifications"])
cron_router = APIRouter(prefix="/api/notifications", tags=["Scheduler"])


# ── User preferences ──────────────────────────────────────────────
@router.get("/preferences")
async def get_preferences(user_id: str = Depends(get_current_user), ctx: AppContext = Depends(get_context)):
    try:
        prefs = await ctx.notifications.get_preferences(user_id)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"status": "success", "data": prefs.model_dump(exclude_none=True)}


@router.put("/preferences")
async def update_preferences(
    body: PreferencesUpdate,
    user_id: str = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    try:
        prefs = await ctx.notifications.update_preferences(user_id, **body.model_dump(exclude_unset=True))
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"status": "success", "data": prefs.model_dump(exclude_none=True)}


@router.post("/daily-reminders")
async def enable_daily_reminders(
    body: EnableRemindersRequest,
    user_id: str = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    """Register the browser's push token and switch daily reminders on."""
    try:
        prefs = await ctx.notifications.enable_daily_reminders(user_id, body.token, body.reminder_time)
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"status": "success", "message": "Daily reminders enabled successfully", "data": prefs.model_dump(exclude_none=True)}


@router.delete("/daily-reminders")
async def disable_daily_reminders(user_id: str = Depends(get_current_user), ctx: AppContext = Depends(get_context)):
    try:
        prefs = await ctx.notifications.disable_daily_reminders(user_id)
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"status": "success", "message": "Daily reminders disabled successfully", "data": prefs.model_dump(exclude_none=True)}


# ── Scheduler (cron) ──────────────────────────────────────────────
@cron_router.post("/schedule", dependencies=[Depends(require_cron_secret)])
async def schedule(ctx: AppContext = Depends(get_context)):
    """Send reminders to users whose reminder time is the current minute."""
    try:
        results = await ctx.notifications.send_due_reminders()
    except Exception as e:
        logger.error(f"[API] Error processing scheduled notifications: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to process scheduled notifications: {e}")
    return {
        "success": True,
        "message": f"Processed {results['total']} notifications",
        "results": {
            "successful": results["successful"],
            "failed": results["failed"],
            "currentTime": results["current_time"],
            "timezone": REMINDER_TIMEZONE,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        },
    }


@cron_router.get("/daily-reminder", dependencies=[Depends(require_cron_secret)])
async def daily_reminder(ctx: AppContext = Depends(get_context)):
    """Send the reminder to every opted-in user regardless of their time."""
    try:
        results = await ctx.notifications.send_all_reminders()
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    if results["total"] == 0:
        return {"message": "No users to notify."}
    return {
        "message": f"Sent reminders to {results['successful']} users, failed for {results['failed']}",
        "failedDetails": results["failed_details"],
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@cron_router.get("/health")
async def health(ctx: AppContext = Depends(get_context)):
    now = datetime.now(timezone.utc)
    return {
        "status": "healthy",
        "timestamp": {
            "utc": now.isoformat(),
            "formatted": current_reminder_time(now),
            "timezone": REMINDER_TIMEZONE,
        },
        "cronEnabled": bool(ctx.cron_secret),
    }


@cron_router.post("/test")
async def test_notification(user_id: str = Depends(get_current_user), ctx: AppContext = Depends(get_context)):
    """Push a test message to the caller's registered token."""
    try:
        message_id = await ctx.notifications.send_test_notification(user_id)
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    except Exception as e:
        raise HTTPException(status_code=500, detail=str(e))
    return {"success": True, "messageId": message_id}
