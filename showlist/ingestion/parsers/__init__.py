from showlist.ingestion.parsers.event_parser import (
    EventRecordExtractor,
    ExtractionResult,
    ExtractorState,
    RawEventRecord,
)
from showlist.ingestion.parsers.venue_parser import (
    RawVenueRecord,
    VenueFileParser,
    VenueParseResult,
)

__all__ = [
    "EventRecordExtractor",
    "ExtractionResult",
    "ExtractorState",
    "RawEventRecord",
    "RawVenueRecord",
    "VenueFileParser",
    "VenueParseResult",
]
