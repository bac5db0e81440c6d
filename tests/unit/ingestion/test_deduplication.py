"""
Unit tests for the deduplication module.

Tests the dedup key and all deduplication strategies:
- ExactMatchDeduplicator
- FuzzyMatchDeduplicator
- CompositeDeduplicator
- get_deduplicator factory function
"""

from datetime import date

import pytest

from showlist.ingestion.deduplication import (
    CompositeDeduplicator,
    DeduplicationStrategy,
    ExactMatchDeduplicator,
    FuzzyMatchDeduplicator,
    InMemoryDedupeStore,
    generate_event_key,
    get_deduplicator,
    levenshtein_distance,
    string_similarity,
)
from showlist.ingestion.normalization.hashing import artist_id


@pytest.fixture
def sample_events(create_event):
    return [
        create_event(headliner="Strfkr", venue="Fox Theater", line=1),
        create_event(headliner="Tim Cohen", venue="Knockout", city="San Francisco", line=4),
        create_event(headliner="Strfkr", venue="Fox Theater", day=date(2025, 8, 16), line=7),
    ]


class TestGenerateEventKey:
    """Tests for the (date, venue, headliner) key."""

    def test_key_layout(self):
        assert generate_event_key("2025-08-15", "Fox Theater", "Strfkr") == "2025-08-15:fox theater:strfkr"

    def test_spelling_noise_collapses(self):
        """Records differing only in case and articles share a key."""
        assert generate_event_key("2025-08-15", "the Fox Theater", "STRFKR") == generate_event_key(
            "2025-08-15", "Fox Theater", "Strfkr"
        )

    def test_date_matters(self):
        assert generate_event_key("2025-08-15", "Fox Theater", "Strfkr") != generate_event_key(
            "2025-08-16", "Fox Theater", "Strfkr"
        )


class TestSimilarity:
    def test_levenshtein(self):
        assert levenshtein_distance("kitten", "sitting") == 3
        assert levenshtein_distance("", "abc") == 3
        assert levenshtein_distance("same", "same") == 0

    def test_similarity_ignores_case_and_punctuation(self):
        assert string_similarity("STR-FKR", "strfkr") == 1.0
        assert string_similarity("Mamalarky", "Mamalarkey") == pytest.approx(0.9)
        assert string_similarity("abc", "xyz") == 0.0


class TestInMemoryDedupeStore:
    def test_seen_and_add(self):
        store = InMemoryDedupeStore()
        assert not store.seen("k")
        store.add("k")
        assert store.seen("k")
        assert len(store) == 1


class TestExactMatchDeduplicator:
    """Tests for ExactMatchDeduplicator."""

    def test_deduplicate_no_duplicates(self, sample_events):
        """All unique events should pass through unchanged."""
        result = ExactMatchDeduplicator().deduplicate(sample_events)
        assert result.kept == sample_events
        assert result.dropped == []

    def test_deduplicate_with_duplicates(self, sample_events, create_event):
        """Duplicates should be removed, keeping the first occurrence."""
        repeat = create_event(headliner="Strfkr", venue="Fox Theater", line=20)
        result = ExactMatchDeduplicator().deduplicate(sample_events + [repeat])

        assert len(result.kept) == 3
        assert result.dropped == [repeat]
        assert result.kept[0].source_line_number == 1
        assert result.stats == {"input": 4, "kept": 3, "dropped": 1}

    def test_deduplicate_empty_list(self):
        result = ExactMatchDeduplicator().deduplicate([])
        assert result.kept == []


class TestFuzzyMatchDeduplicator:
    """Tests for FuzzyMatchDeduplicator."""

    def test_near_identical_headliners(self, create_event):
        """A one-letter typo at the same show is a duplicate."""
        events = [
            create_event(headliner="Mamalarky", venue="Fox Theater"),
            create_event(headliner="Mamalarkey", venue="Fox Theater", line=9),
        ]
        names = {artist_id("Mamalarky"): "Mamalarky", artist_id("Mamalarkey"): "Mamalarkey"}
        result = FuzzyMatchDeduplicator(threshold=0.85, artist_names=names).deduplicate(events)
        assert len(result.kept) == 1
        assert result.dropped[0].source_line_number == 9

    def test_different_venues_not_merged(self, create_event):
        events = [
            create_event(headliner="Strfkr", venue="Fox Theater"),
            create_event(headliner="Strfkr", venue="Ivy Room", city="Albany"),
        ]
        names = {artist_id("Strfkr"): "Strfkr"}
        assert len(FuzzyMatchDeduplicator(artist_names=names).deduplicate(events).kept) == 2


class TestCompositeDeduplicator:
    def test_runs_both(self, sample_events, create_event):
        repeat = create_event(headliner="Strfkr", venue="Fox Theater", line=20)
        result = CompositeDeduplicator().deduplicate(sample_events + [repeat])
        assert len(result.kept) == 3
        assert result.stats["dropped"] == 1


class TestGetDeduplicator:
    def test_factory(self):
        assert isinstance(get_deduplicator(DeduplicationStrategy.EXACT), ExactMatchDeduplicator)
        assert isinstance(get_deduplicator("fuzzy"), FuzzyMatchDeduplicator)
        assert isinstance(get_deduplicator("composite"), CompositeDeduplicator)

    def test_unknown_strategy(self):
        with pytest.raises(ValueError):
            get_deduplicator("metadata")
