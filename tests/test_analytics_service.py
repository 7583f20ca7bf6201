"""Tests for mood aggregation, filtering and word frequencies."""

from datetime import datetime

import pytest

from lifelog.errors import AnalyticsError
from lifelog.models.journal import JournalEntry
from lifelog.services import analytics_service
from lifelog.services.analytics_service import (
    daily_mood_series,
    extract_word_frequencies,
    filter_by_mood,
    filter_by_time_range,
    mood_stats,
    window_cutoff,
)

NOW = datetime(2024, 5, 15, 12, 0)


def make(mood="3", date="2024-05-15", content="text"):
    return JournalEntry(
        user_id="u1", content=content, mood=mood, date=date, created_at="2024-05-15T12:00:00"
    )


# ---- mood_stats ----


def test_mood_stats_two_entries():
    stats = mood_stats([make("5"), make("1")])
    assert stats.total == 2
    assert stats.by_mood == {"5": 1, "1": 1}
    assert stats.average_mood == 3.0


def test_mood_stats_empty():
    stats = mood_stats([])
    assert stats.total == 0
    assert stats.by_mood == {}
    assert stats.average_mood == 0.0


def test_mood_stats_ignores_invalid_levels_except_in_total():
    stats = mood_stats([make("4"), make("happy"), make("9")])
    assert stats.total == 3
    assert stats.by_mood == {"4": 1}
    assert stats.average_mood == 4.0


# ---- filters ----


def test_filter_by_mood():
    entries = [make("5"), make("1"), make("5")]
    assert len(filter_by_mood(entries, "5")) == 2
    assert len(filter_by_mood(entries, "all")) == 3


def test_filter_by_mood_is_idempotent():
    entries = [make("5"), make("1")]
    once = filter_by_mood(entries, "1")
    assert filter_by_mood(once, "1") == once


def test_filter_week_keeps_recent_days():
    entries = [make(date="2024-05-12"), make(date="2024-05-08"), make(date="2024-05-01")]
    kept = filter_by_time_range(entries, "week", NOW)
    assert [e.date for e in kept] == ["2024-05-12", "2024-05-08"]


def test_filter_by_time_range_is_idempotent():
    entries = [make(date="2024-05-12"), make(date="2024-05-08"), make(date="2024-04-20")]
    once = filter_by_time_range(entries, "week", NOW)
    assert filter_by_time_range(once, "week", NOW) == once


def test_filter_all_keeps_everything():
    entries = [make(date="1999-01-01"), make(date="2024-05-15")]
    assert filter_by_time_range(entries, "all", NOW) == entries


def test_filter_skips_undated_entries():
    assert filter_by_time_range([make(date="")], "year", NOW) == []


def test_unknown_window_raises():
    with pytest.raises(ValueError):
        window_cutoff("decade", NOW)


def test_month_cutoff_clamps_to_month_end():
    assert window_cutoff("month", datetime(2024, 3, 31)) == datetime(2024, 2, 29)
    assert window_cutoff("year", datetime(2024, 5, 15)) == datetime(2023, 5, 15)


def test_daily_series_covers_window():
    entries = [make("4", "2024-05-14"), make("2", "2024-05-14"), make("5", "2024-05-10")]
    points = daily_mood_series(entries, "week", NOW)

    assert len(points) == 8
    assert points[0].date == "2024-05-08"
    assert points[-1].label == "May 15"
    by_date = {p.date: p for p in points}
    assert by_date["2024-05-14"].mood == 3.0
    assert by_date["2024-05-10"].mood == 5.0
    assert by_date["2024-05-11"].mood is None


# ---- word frequencies ----


def grateful_tagger(text):
    tags = {"I": "PRP", "am": "VBP", "grateful": "JJ", "for": "IN", "my": "PRP$", "family": "NN"}
    return [(word, tags[word]) for word in text.split()]


def test_word_frequencies_ranks_by_count():
    words = extract_word_frequencies("I am grateful for my grateful family", tagger=grateful_tagger)
    assert [(w.text, w.value) for w in words] == [("grateful", 2), ("family", 1)]


def test_word_frequencies_drops_stop_words_and_short_tokens():
    tagger = lambda text: [(w, "NN") for w in text.split()]
    words = extract_word_frequencies("the ox ran Time river", tagger=tagger)
    assert [w.text for w in words] == ["ran", "river"]


def test_word_frequencies_from_entries_and_limit():
    tagger = lambda text: [(w, "NN") for w in text.split()]
    entries = [make(content="river river mountain"), make(content="forest river")]
    words = extract_word_frequencies(entries, tagger=tagger, limit=2)
    assert [(w.text, w.value) for w in words] == [("river", 3), ("mountain", 1)]


def test_word_frequencies_empty_text():
    assert extract_word_frequencies("", tagger=lambda text: []) == []


def test_word_frequencies_with_default_tagger():
    try:
        words = extract_word_frequencies("I am grateful for my grateful family")
    except AnalyticsError:
        pytest.skip("NLTK tagger data could not be downloaded")
    assert (words[0].text, words[0].value) == ("grateful", 2)
    assert "family" in [w.text for w in words]


def test_missing_tagger_data_raises_analytics_error(monkeypatch):
    from textblob.exceptions import MissingCorpusError

    class NoCorpusBlob:
        def __init__(self, text):
            pass

        @property
        def tags(self):
            raise MissingCorpusError()

    monkeypatch.setattr(analytics_service, "_corpora_ready", True)
    monkeypatch.setattr(analytics_service, "TextBlob", NoCorpusBlob)

    with pytest.raises(AnalyticsError) as excinfo:
        extract_word_frequencies("I am grateful for my grateful family")
    assert excinfo.value.status_code == 503
