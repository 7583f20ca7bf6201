from fastapi import APIRouter, Depends, HTTPException, Query

from lifelog.auth import get_context, get_current_user
from lifelog.context import AppContext
from lifelog.errors import LifelogError
from lifelog.models.journal import MOOD_LEVELS, JournalEntryCreate, NewJournalEntry
from lifelog.services import analytics_service
from lifelog.services.analytics_service import TIME_WINDOWS
from lifelog.services.journal_service import EntryRepository

router = APIRouter(prefix="/api/v1/journal", tags=["Journal"])

WINDOW_PATTERN = "^(" + "|".join(TIME_WINDOWS) + ")$"
MOOD_PATTERN = "^(all|" + "|".join(MOOD_LEVELS) + ")$"


async def _load(ctx: AppContext, user_id: str) -> EntryRepository:
    repo = ctx.entry_repository()
    try:
        await repo.fetch_entries(user_id)
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return repo


@router.get("")
async def list_journal_entries(
    window: str = Query("all", pattern=WINDOW_PATTERN),
    mood: str = Query("all", pattern=MOOD_PATTERN),
    user_id: str = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    repo = await _load(ctx, user_id)
    entries = analytics_service.filter_by_time_range(repo.entries, window)
    entries = analytics_service.filter_by_mood(entries, mood)
    return {"status": "success", "data": [e.model_dump() for e in entries]}


@router.post("")
async def add_journal_entry(
    entry_data: JournalEntryCreate,
    user_id: str = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    repo = ctx.entry_repository()
    try:
        entry = await repo.add_entry(NewJournalEntry(user_id=user_id, **entry_data.model_dump()))
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"status": "success", "data": entry.model_dump()}


@router.get("/stats")
async def journal_stats(
    window: str = Query("all", pattern=WINDOW_PATTERN),
    user_id: str = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    repo = await _load(ctx, user_id)
    entries = analytics_service.filter_by_time_range(repo.entries, window)
    return {"status": "success", "data": analytics_service.mood_stats(entries).model_dump()}


@router.get("/mood-trend")
async def mood_trend(
    window: str = Query("week", pattern=WINDOW_PATTERN),
    user_id: str = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    """Average mood per calendar day, for line charting."""
    repo = await _load(ctx, user_id)
    points = analytics_service.daily_mood_series(repo.entries, window)
    return {
        "status": "success",
        "data": [p.model_dump(exclude={"entries"}) | {"count": len(p.entries)} for p in points],
    }


@router.get("/word-cloud")
async def word_cloud(
    window: str = Query("all", pattern=WINDOW_PATTERN),
    user_id: str = Depends(get_current_user),
    ctx: AppContext = Depends(get_context),
):
    repo = await _load(ctx, user_id)
    entries = analytics_service.filter_by_time_range(repo.entries, window)
    try:
        words = analytics_service.extract_word_frequencies(entries, tagger=ctx.tagger)
    except LifelogError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    return {"status": "success", "data": [w.model_dump() for w in words]}
