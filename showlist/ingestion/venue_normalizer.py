"""
Venue directory normalization.

Merges venue-file records into the registry built while normalizing events:
a venue already known from an event line gains its address and phone but
keeps its ID; unknown venues are created. The first entry for a name wins,
later ones are reported as duplicates.
"""

import logging
from typing import Iterable, List, Optional, Set

from showlist.ingestion.context import IngestionContext
from showlist.ingestion.event_normalizer import NormalizationResult
from showlist.ingestion.normalization.hashing import venue_id
from showlist.ingestion.normalization.strings import StringNormalizer
from showlist.ingestion.normalization.venue_line import VenueLineParser
from showlist.ingestion.parsers.venue_parser import RawVenueRecord
from showlist.schemas.diagnostics import SourceFile
from showlist.schemas.event import Venue

logger = logging.getLogger(__name__)


class VenueNormalizer:
    def __init__(self, context: IngestionContext):
        self.context = context

    def city_from_address(self, address: str) -> str:
        """The last comma segment of an address, canonicalized."""
        parts = [p.strip() for p in (address or "").split(",") if p.strip()]
        if not parts:
            return ""
        return StringNormalizer.normalize_city(parts[-1], self.context.heuristics.city_mappings)

    def normalize(self, records: Iterable[RawVenueRecord]) -> NormalizationResult:
        ctx = self.context
        first_error, first_warning = len(ctx.errors), len(ctx.warnings)
        processed: Set[str] = set()
        venues: List[Venue] = []
        merged = 0

        for record in records:
            raw = record.raw_text or f"{record.name}, {record.address}"
            try:
                normalized = StringNormalizer.normalize_name(record.name)
                if normalized in processed:
                    ctx.warn(
                        record.line_number,
                        f"Duplicate venue: {record.name}",
                        raw,
                        source_file=SourceFile.VENUES,
                    )
                    ctx.counters.duplicate_venues_removed += 1
                    continue
                processed.add(normalized)

                venue, was_merged = self.normalize_record(record, normalized)
                merged += int(was_merged)
                venues.append(venue)
            except Exception as e:
                logger.warning(
                    "Failed to normalize venue at line %d: %s", record.line_number, e, exc_info=True
                )
                ctx.error(
                    record.line_number,
                    f"Normalization error: {e}",
                    raw,
                    type="parse",
                    source_file=SourceFile.VENUES,
                )

        logger.info("Normalized %d venues (%d merged into event venues)", len(venues), merged)
        return NormalizationResult(
            items=venues,
            errors=ctx.errors[first_error:],
            warnings=ctx.warnings[first_warning:],
        )

    def normalize_record(self, record: RawVenueRecord, normalized: Optional[str] = None):
        """
        Merge or create the venue for one record.

        Returns:
            Tuple of (venue, True if an existing venue was merged)
        """
        ctx = self.context
        normalized = normalized or StringNormalizer.normalize_name(record.name)
        city = self.city_from_address(record.address)

        existing = ctx.find_venue(normalized, city)
        if existing is not None:
            if record.address:
                existing.address = record.address
            if record.phone:
                existing.phone = record.phone
            return existing, True

        new_id = venue_id(record.name, city)
        venue = Venue(
            id=new_id,
            name=record.name.strip(),
            slug=StringNormalizer.create_slug(record.name) or new_id,
            normalized_name=normalized,
            address=record.address,
            city=city,
            age_restriction=VenueLineParser.parse_age_restriction(record.age_restriction),
            phone=record.phone,
            source_line_number=record.line_number,
        )
        ctx.register_venue(venue)
        return venue, False
