# showlist/schemas/data.py
"""
Output metadata: manifest, chunk/file descriptors, indexes and run stats.

These describe the artifacts on disk so a consumer can fetch only the month
chunks it needs and verify what it fetched.
"""

from typing import Dict, List, Optional

from pydantic import Field

from showlist.schemas.event import CamelModel, DateRange

DATA_VERSION = "1.0.0"
SCHEMA_VERSION = "1.0.0"


# ============================================================================
# FILE DESCRIPTORS
# ============================================================================


class FileInfo(CamelModel):
    filename: str
    size: int = Field(ge=0, description="Serialized size in bytes")
    checksum: str = Field(description="sha256-<hex> of the serialized bytes")


class ChunkInfo(FileInfo):
    chunk_id: str
    event_count: int = Field(ge=0)
    date_range: DateRange


class SourceFileInfo(CamelModel):
    filename: str
    size: int = Field(ge=0)
    last_modified: Optional[int] = Field(
        default=None, description="Epoch ms of the file mtime, when read from disk"
    )
    line_count: int = Field(ge=0)
    checksum: str


class ManifestDateRange(DateRange):
    start_date: str
    end_date: str


class ManifestTotals(CamelModel):
    events: int = 0
    artists: int = 0
    venues: int = 0
    chunks: int = 0


class ManifestChunks(CamelModel):
    events: List[ChunkInfo] = Field(default_factory=list)
    artists: Optional[FileInfo] = None
    venues: Optional[FileInfo] = None
    indexes: Optional[FileInfo] = None
    search_documents: Optional[FileInfo] = None
    search_terms: Optional[FileInfo] = None


class ManifestSources(CamelModel):
    events: Optional[SourceFileInfo] = None
    venues: Optional[SourceFileInfo] = None


class DataManifest(CamelModel):
    """
    Entry point for consumers: what was built, when, and from what.
    """

    version: str = DATA_VERSION
    dataset_version: str
    last_updated: int
    totals: ManifestTotals
    date_range: Optional[ManifestDateRange] = None
    chunks: ManifestChunks
    processed_at: int
    source_files: ManifestSources
    schema_version: str = SCHEMA_VERSION
    id_scheme: str


# ============================================================================
# INDEXES
# ============================================================================


class CityInfo(CamelModel):
    name: str
    slug: str
    event_count: int = 0
    venue_count: int = 0
    upcoming_event_count: int = 0


class PriceBuckets(CamelModel):
    free: int = 0
    under20: int = 0
    under50: int = 0
    under100: int = 0
    over100: int = 0


class PriceRangeInfo(CamelModel):
    min: float = 0
    max: float = 0
    buckets: PriceBuckets = Field(default_factory=PriceBuckets)


class SearchIndexInfo(CamelModel):
    indexed_at: int
    total_documents: int
    fields: List[str] = Field(
        default_factory=lambda: ["name", "description", "city", "tags"]
    )
    size: int = Field(description="Rough serialized size estimate in bytes")


class DataIndexes(CamelModel):
    """
    Cross-reference maps from keys to entity ids.
    """

    events_by_date: Dict[str, List[str]] = Field(default_factory=dict)
    events_by_venue: Dict[str, List[str]] = Field(default_factory=dict)
    events_by_artist: Dict[str, List[str]] = Field(default_factory=dict)
    events_by_city: Dict[str, List[str]] = Field(default_factory=dict)
    artists_by_name: Dict[str, str] = Field(default_factory=dict)
    venues_by_name: Dict[str, str] = Field(default_factory=dict)
    venues_by_city: Dict[str, List[str]] = Field(default_factory=dict)
    cities: List[CityInfo] = Field(default_factory=list)
    age_restrictions: List[str] = Field(default_factory=list)
    price_ranges: PriceRangeInfo = Field(default_factory=PriceRangeInfo)
    search_index: Optional[SearchIndexInfo] = None


class SearchDocument(CamelModel):
    id: int
    type: str = Field(description="event, artist or venue")
    entity_id: str
    title: str
    content: str
    city: Optional[str] = None
    date: Optional[str] = None
    tags: List[str] = Field(default_factory=list)


# ============================================================================
# RUN STATS
# ============================================================================


class ChunkStats(CamelModel):
    total: int = 0
    average_size: float = 0
    largest_size: int = 0


class ProcessingStats(CamelModel):
    """Counters for one ETL run."""

    source_events: int = 0
    source_venues: int = 0
    parsed_events: int = 0
    parsed_venues: int = 0
    parsed_artists: int = 0
    duplicate_events_removed: int = 0
    duplicate_artists_removed: int = 0
    duplicate_venues_removed: int = 0
    validation_errors: int = 0
    validation_warnings: int = 0
    processing_time_ms: int = 0
    chunks: ChunkStats = Field(default_factory=ChunkStats)
