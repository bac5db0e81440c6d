"""
Module for event deduplication.

Two layers:
- ``generate_event_key`` + ``DedupeStore``: catches repeated records while
  they are being normalized, before any entity is touched.
- ``EventDeduplicator`` strategies: a final pass over finished events.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Mapping, Optional, Set, Tuple
import re

from showlist.ingestion.normalization.strings import StringNormalizer
from showlist.schemas.event import Event


class DeduplicationStrategy(str, Enum):
    """Available deduplication strategies."""

    EXACT = "exact"
    FUZZY = "fuzzy"
    COMPOSITE = "composite"


def generate_event_key(date: str, venue: str, headliner: str) -> str:
    """
    Canonical (date, venue, headliner) key for duplicate detection.

    Returns:
        ``"<date>:<normalized venue>:<normalized headliner>"``
    """
    normalized_venue = StringNormalizer.normalize_name(venue)
    normalized_headliner = StringNormalizer.normalize_name(headliner)
    return f"{date}:{normalized_venue}:{normalized_headliner}"


def levenshtein_distance(a: str, b: str) -> int:
    """Edit distance between two strings (insert, delete, substitute)."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        current = [i]
        for j, cb in enumerate(b, start=1):
            cost = 0 if ca == cb else 1
            current.append(min(previous[j] + 1, current[j - 1] + 1, previous[j - 1] + cost))
        previous = current
    return previous[-1]


def string_similarity(a: str, b: str) -> float:
    """
    Similarity in [0, 1] over lowercase alphanumerics.

    ``(len(longer) - distance) / len(longer)``; two empty strings are equal.
    """
    s1 = re.sub(r"[^a-z0-9]", "", (a or "").lower())
    s2 = re.sub(r"[^a-z0-9]", "", (b or "").lower())
    if s1 == s2:
        return 1.0
    longer = max(len(s1), len(s2))
    return (longer - levenshtein_distance(s1, s2)) / longer


# ============================================================================
# DEDUPE STATE
# ============================================================================


class DedupeStore:
    """
    Interface for dedupe state.

    Only an in-memory store exists; a run never outlives its process.
    """

    def seen(self, key: str) -> bool:
        """Check if the key has already been seen."""
        raise NotImplementedError

    def add(self, key: str) -> None:
        """Add a key to the store."""
        raise NotImplementedError


class InMemoryDedupeStore(DedupeStore):
    """In-memory implementation of the dedupe store."""

    def __init__(self) -> None:
        self._seen: Set[str] = set()

    def seen(self, key: str) -> bool:
        return key in self._seen

    def add(self, key: str) -> None:
        self._seen.add(key)

    def __len__(self) -> int:
        return len(self._seen)


@dataclass
class DedupeResult:
    """Hold the result of deduplication."""

    kept: List[Event]
    dropped: List[Event] = field(default_factory=list)
    stats: Dict[str, int] = field(default_factory=dict)


# ============================================================================
# STRATEGIES
# ============================================================================


class EventDeduplicator(ABC):
    """
    Abstract base for deduplication strategies.

    Strategies keep the first occurrence in input order.
    """

    @abstractmethod
    def deduplicate(self, events: List[Event]) -> DedupeResult:
        """
        Deduplicate events and return unique set
        """
        pass

    @staticmethod
    def _result(events: List[Event], kept: List[Event], dropped: List[Event]) -> DedupeResult:
        return DedupeResult(
            kept=kept,
            dropped=dropped,
            stats={"input": len(events), "kept": len(kept), "dropped": len(dropped)},
        )


class ExactMatchDeduplicator(EventDeduplicator):
    """
    Match by date + venue + headliner (exact ids)
    """

    def deduplicate(self, events: List[Event]) -> DedupeResult:
        seen: Set[Tuple[str, str, str]] = set()
        kept: List[Event] = []
        dropped: List[Event] = []

        for event in events:
            key = (event.date, event.venue_id, event.headliner_artist_id)
            if key in seen:
                dropped.append(event)
                continue
            seen.add(key)
            kept.append(event)

        return self._result(events, kept, dropped)


class FuzzyMatchDeduplicator(EventDeduplicator):
    """
    Fuzzy match for typos/variations in headliner names.

    Two events on the same date at the same venue are duplicates when their
    headliner names are at least ``threshold`` similar.
    """

    def __init__(self, threshold: float = 0.85, artist_names: Optional[Mapping[str, str]] = None):
        """
        Initialize the fuzzy matcher.

        Args:
            threshold: Minimum similarity (0-1) to call two headliners equal
            artist_names: Artist id -> display name; ids are compared when
                a name is missing
        """
        self.threshold = threshold
        self.artist_names = dict(artist_names or {})

    def _name(self, artist_id: str) -> str:
        return self.artist_names.get(artist_id, artist_id)

    def deduplicate(self, events: List[Event]) -> DedupeResult:
        slots: Dict[Tuple[str, str], List[str]] = {}
        kept: List[Event] = []
        dropped: List[Event] = []

        for event in events:
            slot = (event.date, event.venue_id)
            name = self._name(event.headliner_artist_id)
            others = slots.setdefault(slot, [])
            if any(string_similarity(name, other) >= self.threshold for other in others):
                dropped.append(event)
                continue
            others.append(name)
            kept.append(event)

        return self._result(events, kept, dropped)


class CompositeDeduplicator(EventDeduplicator):
    """
    Combine multiple strategies with fallback logic

    Runs the primary strategy, then the secondary on what survived.
    """

    def __init__(
        self,
        primary: Optional[EventDeduplicator] = None,
        secondary: Optional[EventDeduplicator] = None,
    ):
        self.primary = primary or ExactMatchDeduplicator()
        self.secondary = secondary or FuzzyMatchDeduplicator()

    def deduplicate(self, events: List[Event]) -> DedupeResult:
        first = self.primary.deduplicate(events)
        second = self.secondary.deduplicate(first.kept)
        return self._result(events, second.kept, first.dropped + second.dropped)


def get_deduplicator(
    strategy: DeduplicationStrategy = DeduplicationStrategy.EXACT,
    threshold: float = 0.85,
    artist_names: Optional[Mapping[str, str]] = None,
) -> EventDeduplicator:
    """
    Factory function to get a deduplicator by strategy.

    Args:
        strategy: Deduplication strategy name or enum
        threshold: Similarity threshold for fuzzy matching
        artist_names: Artist id -> name, used by fuzzy matching

    Returns:
        EventDeduplicator instance
    """
    strategy = DeduplicationStrategy(strategy)
    if strategy == DeduplicationStrategy.EXACT:
        return ExactMatchDeduplicator()
    fuzzy = FuzzyMatchDeduplicator(threshold=threshold, artist_names=artist_names)
    if strategy == DeduplicationStrategy.FUZZY:
        return fuzzy
    return CompositeDeduplicator(primary=ExactMatchDeduplicator(), secondary=fuzzy)
