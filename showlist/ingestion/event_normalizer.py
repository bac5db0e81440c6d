"""
Event normalization.

Turns raw event records into validated ``Event`` models, resolving artists
and venues through the run's ``IngestionContext``. Every problem with a
record becomes a diagnostic on the context; nothing here raises for bad
data.

Per record:
    1. parse the date header
    2. parse the venue line
    3. split the artist line into names, apply corrections, flag odd names
    4. pick the headliner (see ``headliner.py``)
    5. drop the record if its (date, venue, headliner) key was already seen
    6. resolve artists and venue, build the event, bump counts
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from showlist.configs.config import HeuristicsConfig
from showlist.ingestion.context import IngestionContext
from showlist.ingestion.deduplication import generate_event_key
from showlist.ingestion.headliner import HeadlinerContext, HeadlinerDetector
from showlist.ingestion.normalization.dates import DateParser
from showlist.ingestion.normalization.hashing import artist_id, event_id, venue_id
from showlist.ingestion.normalization.strings import StringNormalizer
from showlist.ingestion.normalization.venue_line import VenueLineParser
from showlist.ingestion.parsers.event_parser import RawEventRecord
from showlist.schemas.diagnostics import ParseError, ParseWarning
from showlist.schemas.event import Event, EventStatus, EventTag

logger = logging.getLogger(__name__)


@dataclass
class NormalizationResult:
    """Entities produced by one normalization pass and its diagnostics."""

    items: List = field(default_factory=list)
    errors: List[ParseError] = field(default_factory=list)
    warnings: List[ParseWarning] = field(default_factory=list)


# ============================================================================
# ARTIST LINE
# ============================================================================


class ArtistLineParser:
    """
    Split an artist line into individual artist names.

    Commas separate artists; ``A feat. B``, ``A featuring B``, ``A with B``
    and ``A w/ B`` are two artists. ``P presents A`` keeps only A. Billing
    words (``with``, ``special guest``, ``headlined by`` ...) are removed.
    """

    PRESENTS = re.compile(r"^.+?\s+presents:?\s+(.+)$", re.IGNORECASE)
    COLLAB = re.compile(r"^(.+?)\s+(?:feat\.?|ft\.|featuring|with|w/)\s+(.+)$", re.IGNORECASE)
    LEADING_CUES = re.compile(
        r"^(?:with|w/|and|featuring|feat\.?|special\s+guests?:?|headlined\s+by|starring)\s+",
        re.IGNORECASE,
    )
    TRAILING_CUES = re.compile(r"\s+(?:headlines|headlining)$", re.IGNORECASE)

    def __init__(self, corrections: Optional[dict] = None):
        self.corrections = dict(corrections or {})

    def split(self, artist_line: str) -> List[str]:
        names: List[str] = []
        for segment in (artist_line or "").split(","):
            segment = segment.strip()
            if not segment:
                continue
            presents = self.PRESENTS.match(segment)
            if presents:
                segment = presents.group(1)
            names.extend(self._split_collaborations(segment))
        return [self.correct(n) for n in names if n]

    def _split_collaborations(self, segment: str) -> List[str]:
        parts: List[str] = []
        remaining = self._strip_cues(segment)
        while remaining:
            match = self.COLLAB.match(remaining)
            if not match:
                parts.append(remaining)
                break
            parts.append(self._strip_cues(match.group(1)))
            remaining = self._strip_cues(match.group(2))
        return [p for p in parts if p]

    def _strip_cues(self, text: str) -> str:
        previous = None
        text = text.strip()
        while text != previous:
            previous = text
            text = self.LEADING_CUES.sub("", text).strip()
            text = self.TRAILING_CUES.sub("", text).strip()
        return text

    def correct(self, name: str) -> str:
        """Fix known concatenation artifacts from the correction table."""
        return self.corrections.get(name, name)


# ============================================================================
# NAME CHECKS
# ============================================================================


class ArtistNameValidator:
    """
    Flag artist names that look mangled. At most one warning per name.
    """

    SUSPICIOUS_PATTERNS: List[Tuple[re.Pattern, str]] = [
        (
            re.compile(r"^([A-Z][a-z]{3,})([A-Z][a-z]{3,})$"),
            'Possible concatenated artist name: "{name}" - might be two separate names',
        ),
        (
            re.compile(r"^[A-Za-z]+[0-9]+[A-Za-z]*$"),
            'Artist name contains numbers: "{name}" - verify this is correct',
        ),
        (
            re.compile(r"^[A-Za-z]{15,}$"),
            'Unusually long single-word artist name: "{name}" - check for concatenation',
        ),
        (
            re.compile(r"^[a-z]+[A-Z][a-z]*$"),
            'Unusual capitalization in artist name: "{name}" - verify formatting',
        ),
    ]

    def __init__(self, heuristics: HeuristicsConfig):
        self.legitimate_names = set(heuristics.legitimate_names)
        self.max_artists = heuristics.max_artists_per_event
        prefixes = "|".join(re.escape(p) for p in heuristics.legitimate_name_prefixes)
        self.legitimate_prefix = re.compile(rf"^(?:{prefixes})[A-Z]") if prefixes else None

    def is_legitimate(self, name: str) -> bool:
        if name in self.legitimate_names:
            return True
        if any(word in self.legitimate_names for word in name.split()):
            return True
        return bool(self.legitimate_prefix and self.legitimate_prefix.match(name))

    def check(self, name: str) -> Optional[str]:
        """Warning message for a suspicious name, or None."""
        if self.is_legitimate(name):
            return None
        for pattern, message in self.SUSPICIOUS_PATTERNS:
            if pattern.search(name):
                return message.format(name=name)
        return None

    def check_all(self, names: List[str]) -> Tuple[List[str], List[str]]:
        """
        Check a record's artist list.

        Returns:
            Tuple of (names with repeats removed, warning messages)
        """
        messages: List[str] = []
        unique: List[str] = []
        seen = set()
        reported = set()

        for name in names:
            key = StringNormalizer.normalize_name(name)
            if key in seen:
                if key not in reported:
                    messages.append(f'Potential duplicate artist in same event: "{name}"')
                    reported.add(key)
                continue
            seen.add(key)
            unique.append(name)
            message = self.check(name)
            if message:
                messages.append(message)

        if len(names) > self.max_artists:
            messages.append(f"Event has {len(names)} artists - verify parsing is correct")

        return unique, messages


# ============================================================================
# NORMALIZER
# ============================================================================


class EventNormalizer:
    """
    Normalize raw event records in source order.
    """

    def __init__(
        self,
        context: IngestionContext,
        detector: Optional[HeadlinerDetector] = None,
        artist_parser: Optional[ArtistLineParser] = None,
    ):
        self.context = context
        heuristics = context.heuristics
        self.detector = detector or HeadlinerDetector(heuristics=heuristics)
        self.artist_parser = artist_parser or ArtistLineParser(heuristics.artist_name_corrections)
        self.validator = ArtistNameValidator(heuristics)

    def normalize(self, records: Iterable[RawEventRecord]) -> NormalizationResult:
        ctx = self.context
        first_error, first_warning = len(ctx.errors), len(ctx.warnings)
        events: List[Event] = []
        total = 0

        for record in records:
            total += 1
            try:
                event = self.normalize_record(record)
            except Exception as e:
                logger.warning(
                    "Failed to normalize record at line %d: %s", record.line_number, e, exc_info=True
                )
                ctx.error(record.line_number, f"Normalization error: {e}", record.raw_text, type="parse")
                continue
            if event is not None:
                events.append(event)

        logger.info("Normalized %d events from %d records", len(events), total)
        return NormalizationResult(
            items=events,
            errors=ctx.errors[first_error:],
            warnings=ctx.warnings[first_warning:],
        )

    def normalize_record(self, record: RawEventRecord) -> Optional[Event]:
        """
        Normalize one record.

        Returns:
            The new Event, or None when the record was rejected or was a
            duplicate (a diagnostic is recorded either way)
        """
        ctx = self.context
        line, raw = record.line_number, record.raw_text

        parsed_date = DateParser.parse_event_date(record.date_string, ctx.reference_date, ctx.timezone)
        if parsed_date is None:
            ctx.error(line, f"Could not parse date: {record.date_string}", raw)
            return None

        info = VenueLineParser.parse(record.venue_line, ctx.heuristics)
        if info is None:
            ctx.error(line, f"Could not parse venue line: {record.venue_line}", raw)
            return None

        parsed_names = self.artist_parser.split(record.artist_line)
        names, messages = self.validator.check_all(parsed_names)
        if not names:
            ctx.error(line, "No artists found", raw)
            return None

        headliner_ctx = HeadlinerContext(
            artists=names,
            artist_line=record.artist_line,
            venue=info.venue,
            price_max=info.price.max,
        )
        choice = self.detector.detect(headliner_ctx)

        key = generate_event_key(parsed_date.date, info.venue, choice.name)
        if ctx.event_keys.seen(key):
            ctx.warn(line, f"Duplicate event detected: {choice.name} at {info.venue}", raw)
            ctx.counters.duplicate_events_removed += 1
            return None
        ctx.event_keys.add(key)
        ctx.counters.duplicate_artists_removed += len(parsed_names) - len(names)

        for message in messages:
            ctx.warn(line, message, raw)
        for message in headliner_ctx.ambiguities:
            ctx.warn(line, message, raw, type="ambiguous")

        start_ms = door_ms = None
        if info.time is not None:
            start_ms = DateParser.combine(parsed_date, info.time.start_time, ctx.timezone)
            if info.time.door_time:
                door_ms = DateParser.combine(parsed_date, info.time.door_time, ctx.timezone)

        event = Event(
            id=event_id(parsed_date.date, choice.name, info.venue),
            slug=StringNormalizer.create_slug(f"{parsed_date.date}-{choice.name}-{info.venue}"),
            date=parsed_date.date,
            date_epoch_ms=parsed_date.epoch_ms,
            start_time_epoch_ms=start_ms,
            door_time_epoch_ms=door_ms,
            timezone=ctx.timezone,
            headliner_artist_id=artist_id(choice.name),
            artist_ids=[artist_id(n) for n in names],
            headliner_rule=choice.rule,
            venue_id=venue_id(info.venue, info.city),
            price_min=info.price.min,
            price_max=info.price.max,
            is_free=info.price.is_free,
            age_restriction=info.age_restriction,
            notes=info.notes,
            status=EventStatus.SOLD_OUT if EventTag.SOLD_OUT in info.tags else EventStatus.CONFIRMED,
            tags=info.tags,
            venue_type=info.venue_type,
            source_line_number=line,
        )

        # Registries are only touched once the event is known to be valid.
        for name in names:
            ctx.resolve_artist(name)
        ctx.resolve_venue(info.venue, info.city, info.age_restriction, line)
        ctx.count_event(event)
        return event
