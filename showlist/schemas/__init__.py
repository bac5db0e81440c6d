from showlist.schemas.data import (
    ChunkInfo,
    CityInfo,
    DataIndexes,
    DataManifest,
    FileInfo,
    PriceRangeInfo,
    ProcessingStats,
    SearchDocument,
    SearchIndexInfo,
    SourceFileInfo,
)
from showlist.schemas.diagnostics import ParseError, ParseWarning, SourceFile
from showlist.schemas.event import (
    AgeRestriction,
    Artist,
    DateRange,
    Event,
    EventChunk,
    EventStatus,
    EventTag,
    Venue,
    VenueType,
)

__all__ = [
    "AgeRestriction",
    "Artist",
    "ChunkInfo",
    "CityInfo",
    "DataIndexes",
    "DataManifest",
    "DateRange",
    "Event",
    "EventChunk",
    "EventStatus",
    "EventTag",
    "FileInfo",
    "ParseError",
    "ParseWarning",
    "PriceRangeInfo",
    "ProcessingStats",
    "SearchDocument",
    "SearchIndexInfo",
    "SourceFile",
    "SourceFileInfo",
    "Venue",
    "VenueType",
]
