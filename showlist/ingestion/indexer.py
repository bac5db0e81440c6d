"""
Indexing and chunking of normalized entities.

- ``DataChunker`` partitions events into month chunks (``YYYY-MM`` in the
  listing timezone), one output file each.
- ``DataIndexer`` builds the id cross-reference maps and the aggregates the
  front end filters on (cities, age restrictions, price buckets).
- ``SearchIndexBuilder`` builds a flat document list and an inverted term
  index over events, artists and venues.
"""

import logging
import re
import time
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from showlist.ingestion.normalization.dates import DEFAULT_TIMEZONE, DateParser
from showlist.ingestion.normalization.strings import StringNormalizer
from showlist.schemas.data import (
    ChunkInfo,
    CityInfo,
    DataIndexes,
    PriceBuckets,
    PriceRangeInfo,
    SearchDocument,
    SearchIndexInfo,
)
from showlist.schemas.event import Artist, DateRange, Event, EventChunk, Venue
from showlist.storage.layouts import Layout
from showlist.storage.writers import file_info

logger = logging.getLogger(__name__)

SEARCH_FIELDS = ["name", "description", "city", "tags"]
# bytes per document, used for the search index size estimate
ESTIMATED_DOCUMENT_SIZE = 200
MIN_TERM_LENGTH = 3


# ============================================================================
# CHUNKING
# ============================================================================


class DataChunker:
    """
    Split events into monthly chunks for incremental loading.
    """

    @staticmethod
    def sort_events(events: Iterable[Event]) -> List[Event]:
        return sorted(events, key=lambda e: (e.date_epoch_ms, e.source_line_number))

    @classmethod
    def chunk_events_by_month(
        cls, events: Iterable[Event], tz: str = DEFAULT_TIMEZONE
    ) -> Tuple[List[EventChunk], List[ChunkInfo]]:
        """
        Group events by local year-month.

        Every event lands in exactly one chunk. Chunks come back sorted by
        their first event; events inside a chunk by date, then source line.

        Returns:
            Tuple of (chunks, chunk_infos) in matching order
        """
        groups: Dict[str, List[Event]] = defaultdict(list)
        for event in cls.sort_events(events):
            groups[DateParser.month_key(event.date_epoch_ms, tz)].append(event)

        chunks: List[EventChunk] = []
        infos: List[ChunkInfo] = []
        for chunk_id in sorted(groups, key=lambda k: groups[k][0].date_epoch_ms):
            month_events = groups[chunk_id]
            date_range = DateRange(
                start_epoch_ms=month_events[0].date_epoch_ms,
                end_epoch_ms=month_events[-1].date_epoch_ms,
            )
            chunk = EventChunk(chunk_id=chunk_id, date_range=date_range, events=month_events)
            described = file_info(Layout.chunk_filename(chunk_id), chunk)

            chunks.append(chunk)
            infos.append(
                ChunkInfo(
                    filename=described.filename,
                    size=described.size,
                    checksum=described.checksum,
                    chunk_id=chunk_id,
                    event_count=len(month_events),
                    date_range=date_range,
                )
            )

        logger.debug("Chunked %d events into %d months", sum(len(c.events) for c in chunks), len(chunks))
        return chunks, infos


# ============================================================================
# INDEXES
# ============================================================================


class DataIndexer:
    """
    Build lookup indexes over the normalized entities.

    ``reference_epoch_ms`` decides which events count as upcoming (events on
    or after it), so that a rerun with the same reference date produces the
    same indexes.
    """

    @classmethod
    def build_indexes(
        cls,
        events: List[Event],
        artists: List[Artist],
        venues: List[Venue],
        reference_epoch_ms: Optional[int] = None,
        indexed_at: Optional[int] = None,
    ) -> DataIndexes:
        if reference_epoch_ms is None:
            reference_epoch_ms = int(time.time() * 1000)
        venues_by_id = {v.id: v for v in venues}

        events_by_date: Dict[str, List[str]] = defaultdict(list)
        events_by_venue: Dict[str, List[str]] = defaultdict(list)
        events_by_artist: Dict[str, List[str]] = defaultdict(list)
        events_by_city: Dict[str, List[str]] = defaultdict(list)

        for event in events:
            events_by_date[event.date].append(event.id)
            events_by_venue[event.venue_id].append(event.id)
            for aid in event.artist_ids:
                events_by_artist[aid].append(event.id)
            venue = venues_by_id.get(event.venue_id)
            if venue is not None:
                events_by_city[venue.city].append(event.id)

        venues_by_city: Dict[str, List[str]] = defaultdict(list)
        for venue in venues:
            venues_by_city[venue.city].append(venue.id)

        return DataIndexes(
            events_by_date=dict(events_by_date),
            events_by_venue=dict(events_by_venue),
            events_by_artist=dict(events_by_artist),
            events_by_city=dict(events_by_city),
            artists_by_name={a.normalized_name: a.id for a in artists},
            venues_by_name={v.normalized_name: v.id for v in venues},
            venues_by_city=dict(venues_by_city),
            cities=cls.build_city_info(events, venues, reference_epoch_ms),
            age_restrictions=cls.extract_age_restrictions(events),
            price_ranges=cls.build_price_range_info(events),
            search_index=cls.build_search_index_info(
                events, artists, venues, indexed_at if indexed_at is not None else reference_epoch_ms
            ),
        )

    @staticmethod
    def build_city_info(events: List[Event], venues: List[Venue], reference_epoch_ms: int) -> List[CityInfo]:
        """Per-city counts, busiest city first (ties keep first-seen order)."""
        venues_by_id = {v.id: v for v in venues}
        stats: Dict[str, Dict[str, int]] = {}

        def bucket(city: str) -> Dict[str, int]:
            return stats.setdefault(city, {"event_count": 0, "venue_count": 0, "upcoming_event_count": 0})

        for venue in venues:
            bucket(venue.city)["venue_count"] += 1

        for event in events:
            venue = venues_by_id.get(event.venue_id)
            if venue is None:
                continue
            counts = bucket(venue.city)
            counts["event_count"] += 1
            if event.date_epoch_ms >= reference_epoch_ms:
                counts["upcoming_event_count"] += 1

        cities = [
            CityInfo(name=city, slug=StringNormalizer.create_slug(city), **counts)
            for city, counts in stats.items()
        ]
        return sorted(cities, key=lambda c: -c.event_count)

    @staticmethod
    def extract_age_restrictions(events: List[Event]) -> List[str]:
        return sorted({str(e.age_restriction) for e in events})

    @staticmethod
    def build_price_range_info(events: List[Event]) -> PriceRangeInfo:
        """
        Price spread and buckets.

        Free events are counted once in ``free``; for paid events both the
        minimum and maximum price go into the buckets.
        """
        free = 0
        prices: List[float] = []
        for event in events:
            if event.is_free:
                free += 1
                continue
            for price in (event.price_min, event.price_max):
                if price is not None:
                    prices.append(float(price))

        if not prices:
            return PriceRangeInfo(min=0, max=0, buckets=PriceBuckets(free=free))

        return PriceRangeInfo(
            min=min(prices),
            max=max(prices),
            buckets=PriceBuckets(
                free=free,
                under20=sum(1 for p in prices if 0 < p < 20),
                under50=sum(1 for p in prices if 20 <= p < 50),
                under100=sum(1 for p in prices if 50 <= p < 100),
                over100=sum(1 for p in prices if p >= 100),
            ),
        )

    @staticmethod
    def build_search_index_info(
        events: List[Event], artists: List[Artist], venues: List[Venue], indexed_at: int
    ) -> SearchIndexInfo:
        total = len(events) + len(artists) + len(venues)
        return SearchIndexInfo(
            indexed_at=indexed_at,
            total_documents=total,
            fields=list(SEARCH_FIELDS),
            size=total * ESTIMATED_DOCUMENT_SIZE,
        )


# ============================================================================
# SEARCH
# ============================================================================


@dataclass
class SearchIndex:
    documents: List[SearchDocument] = field(default_factory=list)
    terms: Dict[str, List[int]] = field(default_factory=dict)


class SearchIndexBuilder:
    """
    Flat search documents plus an inverted index (term -> document ids).

    Document ids are sequential: events first, then artists, then venues.
    """

    WORD = re.compile(r"\b\w+\b")

    @classmethod
    def build_search_index(
        cls, events: List[Event], artists: List[Artist], venues: List[Venue]
    ) -> SearchIndex:
        artists_by_id = {a.id: a for a in artists}
        venues_by_id = {v.id: v for v in venues}
        index = SearchIndex()

        for event in events:
            venue = venues_by_id.get(event.venue_id)
            headliner = artists_by_id.get(event.headliner_artist_id)
            title = headliner.name if headliner else "Unknown Artist"
            content = [
                headliner.name if headliner else "",
                venue.name if venue else "",
                venue.city if venue else "",
                " ".join(str(t) for t in event.tags),
                event.notes or "",
            ]
            cls._add(
                index,
                type="event",
                entity_id=event.id,
                title=title,
                content=" ".join(part for part in content if part),
                city=venue.city if venue else None,
                date=event.date,
                tags=[str(t) for t in event.tags],
            )

        for artist in artists:
            cls._add(
                index,
                type="artist",
                entity_id=artist.id,
                title=artist.name,
                content=" ".join([artist.name, *artist.aliases]),
            )

        for venue in venues:
            content = [venue.name, venue.address, venue.city]
            cls._add(
                index,
                type="venue",
                entity_id=venue.id,
                title=venue.name,
                content=" ".join(part for part in content if part),
                city=venue.city,
            )

        logger.debug("Search index: %d documents, %d terms", len(index.documents), len(index.terms))
        return index

    @classmethod
    def _add(cls, index: SearchIndex, **fields) -> None:
        doc = SearchDocument(id=len(index.documents), **fields)
        index.documents.append(doc)
        for term in cls.tokenize(f"{doc.title} {doc.content}"):
            ids = index.terms.setdefault(term, [])
            if not ids or ids[-1] != doc.id:
                ids.append(doc.id)

    @classmethod
    def tokenize(cls, text: str) -> List[str]:
        """Lowercase words of at least three characters, in order."""
        return [w for w in cls.WORD.findall(text.lower()) if len(w) >= MIN_TERM_LENGTH]
