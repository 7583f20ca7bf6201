"""
analytics_service.py — Mood & Text Aggregations
Pure helpers over an in-memory entry list: mood statistics, time-window and
mood filters, the per-day mood series behind the trend chart, and the word
frequencies behind the word cloud. Only the default tagger touches disk or
network, to fetch NLTK data on first use.
"""

import calendar
import logging
from collections import Counter
from datetime import date, datetime, timedelta
from typing import Callable, Iterable

import nltk
from textblob import TextBlob
from textblob.exceptions import MissingCorpusError

from lifelog.errors import AnalyticsError
from lifelog.models.journal import MOOD_LEVELS, JournalEntry, MoodPoint, MoodStats, WordFrequency

logger = logging.getLogger(__name__)

TIME_WINDOWS = ("day", "week", "month", "year", "all")

# Words excluded from the word cloud
STOP_WORDS = frozenset([
    "the", "be", "to", "of", "and", "a", "in", "that", "have", "i",
    "it", "for", "not", "on", "with", "he", "as", "you", "do", "at",
    "this", "but", "his", "by", "from", "they", "we", "say", "her", "she",
    "or", "an", "will", "my", "one", "all", "would", "there", "their", "what",
    "so", "up", "out", "if", "about", "who", "get", "which", "go", "me",
    "when", "make", "can", "like", "time", "no", "just", "him", "know", "take",
    "people", "into", "year", "your", "good", "some", "could", "them", "see", "other",
    "than", "then", "now", "look", "only", "come", "its", "over", "think", "also",
    "back", "after", "use", "two", "how", "our", "work", "first", "well", "way",
    "even", "new", "want", "because", "any", "these", "give", "day", "most", "us",
    "is", "was", "are", "were", "been", "being", "am", "has", "had",
    "does", "did", "doing", "should", "might", "must",
    "shall", "may", "need", "ought", "dare", "used",
])

MAX_WORDS = 100

# Penn Treebank tag prefixes kept for the word cloud, in output order
_WORD_CLASSES = ("NN", "VB", "JJ")

# NLTK resources behind TextBlob(...).tags; the _tab/_eng names are newer NLTK releases
_TAGGER_CORPORA = (
    "tokenizers/punkt",
    "tokenizers/punkt_tab",
    "taggers/averaged_perceptron_tagger",
    "taggers/averaged_perceptron_tagger_eng",
)
_corpora_ready = False

Tagger = Callable[[str], Iterable[tuple[str, str]]]


def mood_level(value) -> int | None:
    """Parse a stored mood into its 1..5 level; anything else is None."""
    text = str(value).strip()
    return int(text) if text in MOOD_LEVELS else None


def mood_stats(entries: list[JournalEntry]) -> MoodStats:
    """
    total counts every entry; by_mood and average_mood only consider entries
    whose mood is a valid 1..5 level.
    """
    by_mood: dict[str, int] = {}
    mood_sum = 0
    rated = 0
    for entry in entries:
        level = mood_level(entry.mood)
        if level is None:
            continue
        key = str(level)
        by_mood[key] = by_mood.get(key, 0) + 1
        mood_sum += level
        rated += 1

    return MoodStats(
        total=len(entries),
        by_mood=by_mood,
        average_mood=mood_sum / rated if rated else 0.0,
    )


def _subtract_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def window_cutoff(window: str, now: datetime | None = None) -> datetime | None:
    """Instant one calendar unit before now; None for "all"."""
    if window not in TIME_WINDOWS:
        raise ValueError(f"Unknown time window: {window}")
    now = now or datetime.now()
    if window == "day":
        return now - timedelta(days=1)
    if window == "week":
        return now - timedelta(weeks=1)
    if window == "month":
        return _subtract_months(now, 1)
    if window == "year":
        return _subtract_months(now, 12)
    return None


def _entry_day(entry: JournalEntry) -> date | None:
    try:
        return date.fromisoformat(entry.date[:10])
    except ValueError:
        return None


def filter_by_time_range(
    entries: list[JournalEntry], window: str, now: datetime | None = None
) -> list[JournalEntry]:
    """Keep entries dated on or after the window's cutoff day."""
    cutoff = window_cutoff(window, now)
    if cutoff is None:
        return list(entries)
    cutoff_day = cutoff.date()
    kept = []
    for entry in entries:
        day = _entry_day(entry)
        if day is not None and day >= cutoff_day:
            kept.append(entry)
    return kept


def filter_by_mood(entries: list[JournalEntry], mood: str) -> list[JournalEntry]:
    if mood == "all":
        return list(entries)
    return [e for e in entries if e.mood == mood]


def daily_mood_series(
    entries: list[JournalEntry], window: str = "week", now: datetime | None = None
) -> list[MoodPoint]:
    """One point per calendar day from the window's cutoff through today."""
    now = now or datetime.now()
    cutoff = window_cutoff(window, now)
    if cutoff is None:
        days = [d for d in (_entry_day(e) for e in entries) if d is not None]
        start = min(days) if days else now.date()
    else:
        start = cutoff.date()

    by_day: dict[date, list[JournalEntry]] = {}
    for entry in entries:
        day = _entry_day(entry)
        if day is not None:
            by_day.setdefault(day, []).append(entry)

    points = []
    day = start
    while day <= now.date():
        day_entries = by_day.get(day, [])
        levels = [lvl for lvl in (mood_level(e.mood) for e in day_entries) if lvl is not None]
        points.append(MoodPoint(
            date=day.isoformat(),
            label=day.strftime("%b %d"),
            mood=sum(levels) / len(levels) if levels else None,
            entries=day_entries,
        ))
        day += timedelta(days=1)
    return points


def ensure_tagger_corpora() -> None:
    """Download the NLTK tokenizer and tagger data TextBlob needs, once."""
    global _corpora_ready
    if _corpora_ready:
        return
    for path in _TAGGER_CORPORA:
        try:
            nltk.data.find(path)
        except LookupError:
            logger.info(f"Downloading NLTK data: {path}")
            nltk.download(path.split("/")[-1], quiet=True)
    _corpora_ready = True


def textblob_tagger(text: str) -> list[tuple[str, str]]:
    ensure_tagger_corpora()
    try:
        return list(TextBlob(text).tags)
    except (MissingCorpusError, LookupError) as e:
        logger.error(f"TextBlob tagging failed: {e}")
        raise AnalyticsError() from e


def extract_word_frequencies(
    source: str | list[JournalEntry],
    tagger: Tagger | None = None,
    limit: int = MAX_WORDS,
) -> list[WordFrequency]:
    """
    Count nouns, verbs and adjectives across the text, most frequent first.

    Tokens are lower-cased and trimmed; stop words and tokens of two
    characters or fewer are dropped. Ties keep encounter order (nouns, then
    verbs, then adjectives).
    """
    text = source if isinstance(source, str) else " ".join(e.content for e in source)
    tagged = list((tagger or textblob_tagger)(text))

    words = []
    for prefix in _WORD_CLASSES:
        words.extend(word for word, tag in tagged if tag.startswith(prefix))

    counts: Counter[str] = Counter()
    for word in words:
        clean = word.lower().strip()
        if len(clean) > 2 and clean not in STOP_WORDS:
            counts[clean] += 1

    # Counter preserves insertion order, sorted() is stable
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    return [WordFrequency(text=word, value=count) for word, count in ranked[:limit]]
