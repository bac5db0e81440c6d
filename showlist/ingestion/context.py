"""
Per-run ingestion state.

One ``IngestionContext`` is created per ETL run and passed by reference to
every stage. It owns the artist and venue registries ("first occurrence
creates, later occurrences merge"), the duplicate-key store and the
diagnostics collected along the way.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from showlist.configs.config import HeuristicsConfig
from showlist.ingestion.deduplication import InMemoryDedupeStore
from showlist.ingestion.normalization.dates import DEFAULT_TIMEZONE, DateParser
from showlist.ingestion.normalization.hashing import artist_id, venue_id
from showlist.ingestion.normalization.strings import StringNormalizer
from showlist.schemas.diagnostics import ParseError, ParseWarning, SourceFile
from showlist.schemas.event import AgeRestriction, Artist, Event, Venue

VenueKey = Tuple[str, str]


@dataclass
class RunCounters:
    duplicate_events_removed: int = 0
    duplicate_artists_removed: int = 0
    duplicate_venues_removed: int = 0


@dataclass
class IngestionContext:
    heuristics: HeuristicsConfig
    reference_date: date = field(default_factory=date.today)
    timezone: str = DEFAULT_TIMEZONE
    run_started_ms: int = field(default_factory=lambda: int(time.time() * 1000))

    artists: Dict[str, Artist] = field(default_factory=dict)
    venues: Dict[VenueKey, Venue] = field(default_factory=dict)
    event_keys: InMemoryDedupeStore = field(default_factory=InMemoryDedupeStore)
    errors: List[ParseError] = field(default_factory=list)
    warnings: List[ParseWarning] = field(default_factory=list)
    counters: RunCounters = field(default_factory=RunCounters)
    artists_by_id: Dict[str, Artist] = field(default_factory=dict)
    venues_by_id: Dict[str, Venue] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def error(
        self,
        line: int,
        message: str,
        raw_text: str = "",
        type: str = "validation",
        source_file: SourceFile = SourceFile.EVENTS,
    ) -> ParseError:
        err = ParseError(line=line, message=message, raw_text=raw_text, type=type, source_file=source_file)
        self.errors.append(err)
        return err

    def warn(
        self,
        line: int,
        message: str,
        raw_text: str = "",
        type: str = "data-quality",
        source_file: SourceFile = SourceFile.EVENTS,
    ) -> ParseWarning:
        warning = ParseWarning(
            line=line, message=message, raw_text=raw_text, type=type, source_file=source_file
        )
        self.warnings.append(warning)
        return warning

    def extend(self, errors: Iterable[ParseError] = (), warnings: Iterable[ParseWarning] = ()) -> None:
        self.errors.extend(errors)
        self.warnings.extend(warnings)

    # ------------------------------------------------------------------
    # Registries
    # ------------------------------------------------------------------

    @staticmethod
    def venue_key(name: str, city: str) -> VenueKey:
        return StringNormalizer.normalize_name(name), StringNormalizer.normalize_name(city)

    def resolve_artist(self, name: str) -> Artist:
        """Return the artist for ``name``, creating it on first sight."""
        normalized = StringNormalizer.normalize_name(name)
        artist = self.artists.get(normalized)
        if artist is None:
            new_id = artist_id(name)
            artist = Artist(
                id=new_id,
                name=name.strip(),
                slug=StringNormalizer.create_slug(name) or new_id,
                normalized_name=normalized,
                created_at=self.run_started_ms,
                updated_at=self.run_started_ms,
            )
            self.artists[normalized] = artist
            self.artists_by_id[artist.id] = artist
        else:
            artist.record_spelling(name)
        return artist

    def resolve_venue(
        self,
        name: str,
        city: str,
        age_restriction: AgeRestriction = AgeRestriction.ALL_AGES,
        line_number: int = 0,
    ) -> Venue:
        """Return the venue for ``(name, city)``, creating it on first sight."""
        key = self.venue_key(name, city)
        venue = self.venues.get(key)
        if venue is None:
            new_id = venue_id(name, city)
            venue = Venue(
                id=new_id,
                name=name.strip(),
                slug=StringNormalizer.create_slug(name) or new_id,
                normalized_name=key[0],
                city=city,
                age_restriction=age_restriction,
                source_line_number=line_number,
            )
            self.register_venue(venue)
        return venue

    def register_venue(self, venue: Venue) -> None:
        self.venues[self.venue_key(venue.name, venue.city)] = venue
        self.venues_by_id[venue.id] = venue

    def find_venue(self, normalized_name: str, city: Optional[str] = None) -> Optional[Venue]:
        """
        Look a venue up by normalized name.

        When the name exists in several cities the one matching ``city``
        wins, otherwise the first registered.
        """
        matches = [v for (name, _), v in self.venues.items() if name == normalized_name]
        if not matches:
            return None
        if city:
            city_key = StringNormalizer.normalize_name(city)
            for venue in matches:
                if StringNormalizer.normalize_name(venue.city) == city_key:
                    return venue
        return matches[0]

    # ------------------------------------------------------------------
    # Counts
    # ------------------------------------------------------------------

    def count_event(self, event: Event, delta: int = 1) -> None:
        for aid in event.artist_ids:
            if aid in self.artists_by_id:
                self.artists_by_id[aid].total_event_count += delta
        venue = self.venues_by_id.get(event.venue_id)
        if venue is not None:
            venue.total_event_count += delta

    def retract_event(self, event: Event) -> None:
        """Undo ``count_event`` for an event dropped after normalization."""
        self.count_event(event, delta=-1)

    @property
    def reference_epoch_ms(self) -> int:
        """Local midnight of the reference date; later events are upcoming."""
        return DateParser.local_epoch_ms(self.reference_date, tz=self.timezone)

    def update_upcoming_counts(self, events: Iterable[Event]) -> None:
        artists = self.artists_by_id
        venues = self.venues_by_id
        for entity in [*artists.values(), *venues.values()]:
            entity.upcoming_event_count = 0

        cutoff = self.reference_epoch_ms
        for event in events:
            if event.date_epoch_ms < cutoff:
                continue
            for aid in event.artist_ids:
                if aid in artists:
                    artists[aid].upcoming_event_count += 1
            if event.venue_id in venues:
                venues[event.venue_id].upcoming_event_count += 1

    # ------------------------------------------------------------------
    # Finalize
    # ------------------------------------------------------------------

    def finalize_artists(self) -> List[Artist]:
        """Artists in first-seen order."""
        return list(self.artists.values())

    def finalize_venues(self) -> List[Venue]:
        """Venues in first-seen order."""
        return list(self.venues.values())
