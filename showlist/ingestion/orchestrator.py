"""
ETL Orchestrator.

Coordinates one run of the listings pipeline:

    events.txt ─► EventRecordExtractor ─► EventNormalizer ─┐
                                                           ├─► IngestionContext
    venues.txt ─► VenueFileParser ─► VenueNormalizer ──────┘        │
                                                                    ▼
                 upcoming counts ─► dedup guard ─► chunks + indexes + search
                                                                    │
                                                                    ▼
                                                   manifest + JSON artifacts

``run`` is the pure part: text in, ``PipelineResult`` out, diagnostics
collected instead of raised. ``process_data`` adds file IO around it and is
the only place infrastructure failures are turned into a FAILED result.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from showlist.configs.config import Config, HeuristicsConfig
from showlist.configs.settings import Settings, get_settings
from showlist.ingestion.context import IngestionContext
from showlist.ingestion.deduplication import EventDeduplicator, get_deduplicator
from showlist.ingestion.event_normalizer import EventNormalizer
from showlist.ingestion.exceptions import IngestionError, SourceFileError
from showlist.ingestion.indexer import DataChunker, DataIndexer, SearchIndex, SearchIndexBuilder
from showlist.ingestion.normalization.hashing import ID_SCHEME, checksum
from showlist.ingestion.parsers.event_parser import EventRecordExtractor
from showlist.ingestion.parsers.venue_parser import VenueFileParser
from showlist.ingestion.venue_normalizer import VenueNormalizer
from showlist.monitoring.logging import with_context
from showlist.schemas.data import (
    ChunkInfo,
    ChunkStats,
    DataIndexes,
    DataManifest,
    ManifestChunks,
    ManifestDateRange,
    ManifestSources,
    ManifestTotals,
    ProcessingStats,
    SourceFileInfo,
)
from showlist.schemas.diagnostics import ParseError, ParseWarning
from showlist.schemas.event import Artist, Event, EventChunk, Venue
from showlist.storage.layouts import Layout
from showlist.storage.writers import file_info, write_diagnostics, write_json

logger = logging.getLogger(__name__)


class PipelineStatus(str, Enum):
    """Status of a pipeline execution."""

    SUCCESS = "success"
    PARTIAL_SUCCESS = "partial_success"
    FAILED = "failed"


@dataclass
class PipelineResult:
    """Everything one run produced, before anything is written."""

    events: List[Event] = field(default_factory=list)
    artists: List[Artist] = field(default_factory=list)
    venues: List[Venue] = field(default_factory=list)
    errors: List[ParseError] = field(default_factory=list)
    warnings: List[ParseWarning] = field(default_factory=list)
    stats: ProcessingStats = field(default_factory=ProcessingStats)
    chunks: List[EventChunk] = field(default_factory=list)
    chunk_infos: List[ChunkInfo] = field(default_factory=list)
    indexes: DataIndexes = field(default_factory=DataIndexes)
    search: SearchIndex = field(default_factory=SearchIndex)

    @property
    def diagnostics(self) -> List:
        return [*self.errors, *self.warnings]


@dataclass
class SourceText:
    """A source listing read from disk."""

    text: str
    info: SourceFileInfo


@dataclass
class ProcessingResult:
    """Result of ``process_data``: the run plus what was written."""

    status: PipelineStatus
    run_id: str
    started_at: datetime
    ended_at: datetime
    result: Optional[PipelineResult] = None
    manifest: Optional[DataManifest] = None
    written: List[Path] = field(default_factory=list)
    failure: Optional[str] = None

    @property
    def duration_seconds(self) -> float:
        """Calculate execution duration."""
        return (self.ended_at - self.started_at).total_seconds()


def _now_ms() -> int:
    return int(datetime.now(timezone.utc).timestamp() * 1000)


class ETLOrchestrator:
    """
    Runs the listings ETL.

    Args:
        settings: Pipeline settings; defaults to ``get_settings()``
        heuristics: Lookup tables; defaults to the YAML named in settings
        reference_date: Anchor for year inference; defaults to settings
        deduplicator: Final dedup guard; defaults to the configured strategy
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        heuristics: Optional[HeuristicsConfig] = None,
        reference_date: Optional[date] = None,
        deduplicator: Optional[EventDeduplicator] = None,
        run_id: Optional[str] = None,
    ):
        self.settings = settings or get_settings()
        self.heuristics = heuristics or Config.load_heuristics_config(
            self.settings.HEURISTICS_CONFIG_PATH
        )
        self.reference_date = reference_date or self.settings.resolve_reference_date()
        self.deduplicator = deduplicator
        self.run_id = run_id or uuid.uuid4().hex[:12]
        self.layout = Layout(Path(self.settings.OUTPUT_DIR))

    def new_context(self) -> IngestionContext:
        return IngestionContext(
            heuristics=self.heuristics,
            reference_date=self.reference_date,
            timezone=self.settings.TIMEZONE,
        )

    # ========================================================================
    # PURE RUN
    # ========================================================================

    def run(
        self,
        events_text: str,
        venues_text: Optional[str] = None,
        context: Optional[IngestionContext] = None,
    ) -> PipelineResult:
        """
        Process listing text into entities, chunks and indexes.

        Data problems end up in ``errors`` / ``warnings``; this does not raise
        for malformed input.
        """
        started_ms = _now_ms()
        ctx = context or self.new_context()
        log = with_context(logger, run_id=self.run_id)

        # 1. events: extract candidate records, normalize in source order
        extraction = EventRecordExtractor().extract(events_text)
        ctx.extend(warnings=extraction.warnings)
        with_context(log, stage="extract").info(
            "Extracted %d event records (%d warnings)",
            len(extraction.records),
            len(extraction.warnings),
        )
        events: List[Event] = EventNormalizer(ctx).normalize(extraction.records).items

        # 2. venue directory: parse and merge into the registry
        source_venues = 0
        if venues_text is not None:
            parsed = VenueFileParser().parse(venues_text)
            ctx.extend(warnings=parsed.warnings)
            source_venues = len(parsed.records)
            VenueNormalizer(ctx).normalize(parsed.records)
            with_context(log, stage="venues").info("Parsed %d venue records", source_venues)

        # 3. final dedup guard
        events = self._dedupe(ctx, events)

        # 4. counts, chunks, indexes
        artists = ctx.finalize_artists()
        venues = ctx.finalize_venues()
        ctx.update_upcoming_counts(events)

        chunks, chunk_infos = DataChunker.chunk_events_by_month(events, ctx.timezone)
        indexes = DataIndexer.build_indexes(
            events,
            artists,
            venues,
            reference_epoch_ms=ctx.reference_epoch_ms,
            indexed_at=ctx.run_started_ms,
        )
        search = SearchIndexBuilder.build_search_index(events, artists, venues)
        with_context(log, stage="index").info(
            "Built %d chunks, %d search documents", len(chunks), len(search.documents)
        )

        stats = self.compute_stats(
            ctx,
            source_events=len(extraction.records),
            source_venues=source_venues,
            events=events,
            artists=artists,
            venues=venues,
            chunk_infos=chunk_infos,
            processing_time_ms=_now_ms() - started_ms,
        )
        log.info(
            "Processed %d events, %d artists, %d venues (%d errors, %d warnings)",
            stats.parsed_events,
            stats.parsed_artists,
            stats.parsed_venues,
            len(ctx.errors),
            len(ctx.warnings),
        )

        return PipelineResult(
            events=events,
            artists=artists,
            venues=venues,
            errors=list(ctx.errors),
            warnings=list(ctx.warnings),
            stats=stats,
            chunks=chunks,
            chunk_infos=chunk_infos,
            indexes=indexes,
            search=search,
        )

    def _dedupe(self, ctx: IngestionContext, events: List[Event]) -> List[Event]:
        """
        Second line of defence after the per-record key check.

        Dropped events have their artist/venue counts retracted so the
        counts keep matching the output.
        """
        deduplicator = self.deduplicator or get_deduplicator(
            self.settings.DEDUPLICATION_STRATEGY,
            threshold=self.settings.FUZZY_THRESHOLD,
            artist_names={a.id: a.name for a in ctx.artists_by_id.values()},
        )
        result = deduplicator.deduplicate(events)
        for event in result.dropped:
            ctx.retract_event(event)
            ctx.warn(
                event.source_line_number,
                f"Duplicate event removed: {event.slug}",
                type="data-quality",
            )
        ctx.counters.duplicate_events_removed += len(result.dropped)
        if result.dropped:
            logger.info("Deduplication: %d -> %d events", len(events), len(result.kept))
        return result.kept

    @staticmethod
    def compute_stats(
        ctx: IngestionContext,
        *,
        source_events: int,
        source_venues: int,
        events: List[Event],
        artists: List[Artist],
        venues: List[Venue],
        chunk_infos: List[ChunkInfo],
        processing_time_ms: int,
    ) -> ProcessingStats:
        sizes = [info.event_count for info in chunk_infos]
        return ProcessingStats(
            source_events=source_events,
            source_venues=source_venues,
            parsed_events=len(events),
            parsed_venues=len(venues),
            parsed_artists=len(artists),
            duplicate_events_removed=ctx.counters.duplicate_events_removed,
            duplicate_artists_removed=ctx.counters.duplicate_artists_removed,
            duplicate_venues_removed=ctx.counters.duplicate_venues_removed,
            validation_errors=sum(1 for e in ctx.errors if e.type == "validation"),
            validation_warnings=len(ctx.warnings),
            processing_time_ms=max(processing_time_ms, 0),
            chunks=ChunkStats(
                total=len(chunk_infos),
                average_size=(sum(sizes) / len(sizes)) if sizes else 0,
                largest_size=max(sizes, default=0),
            ),
        )

    # ========================================================================
    # FILES
    # ========================================================================

    @staticmethod
    def read_source(path: Path) -> SourceText:
        """
        Read a listing file.

        Raises:
            SourceFileError: the file is missing or unreadable
        """
        path = Path(path)
        if not path.is_file():
            raise SourceFileError(path, "file not found")
        try:
            raw = path.read_bytes()
            text = raw.decode("utf-8")
            stat = path.stat()
        except (OSError, UnicodeDecodeError) as e:
            raise SourceFileError(path, str(e)) from e

        return SourceText(
            text=text,
            info=SourceFileInfo(
                filename=path.name,
                size=len(raw),
                last_modified=int(stat.st_mtime * 1000),
                line_count=len(text.split("\n")),
                checksum=checksum(raw),
            ),
        )

    def artifacts(self, result: PipelineResult) -> Dict[str, Any]:
        """Output filename -> object, for every JSON file except the manifest."""
        layout = self.layout
        files: Dict[str, Any] = {layout.chunk_filename(c.chunk_id): c for c in result.chunks}
        files[layout.artists_path().name] = result.artists
        files[layout.venues_path().name] = result.venues
        files[layout.indexes_path().name] = result.indexes
        files[layout.search_documents_path().name] = result.search.documents
        files[layout.search_terms_path().name] = result.search.terms
        return files

    def build_manifest(
        self,
        result: PipelineResult,
        sources: ManifestSources,
        now_ms: Optional[int] = None,
    ) -> DataManifest:
        now_ms = now_ms if now_ms is not None else _now_ms()
        layout = self.layout

        date_range = None
        if result.events:
            epochs = sorted(e.date_epoch_ms for e in result.events)
            dates = sorted(e.date for e in result.events)
            date_range = ManifestDateRange(
                start_epoch_ms=epochs[0],
                end_epoch_ms=epochs[-1],
                start_date=dates[0],
                end_date=dates[-1],
            )

        return DataManifest(
            dataset_version=datetime.fromtimestamp(now_ms / 1000, tz=timezone.utc).isoformat(),
            last_updated=now_ms,
            totals=ManifestTotals(
                events=len(result.events),
                artists=len(result.artists),
                venues=len(result.venues),
                chunks=len(result.chunks),
            ),
            date_range=date_range,
            chunks=ManifestChunks(
                events=result.chunk_infos,
                artists=file_info(layout.artists_path().name, result.artists),
                venues=file_info(layout.venues_path().name, result.venues),
                indexes=file_info(layout.indexes_path().name, result.indexes),
                search_documents=file_info(layout.search_documents_path().name, result.search.documents),
                search_terms=file_info(layout.search_terms_path().name, result.search.terms),
            ),
            processed_at=now_ms,
            source_files=sources,
            id_scheme=ID_SCHEME,
        )

    def write_outputs(self, result: PipelineResult, manifest: DataManifest) -> List[Path]:
        """Write every artifact, the diagnostics report, then the manifest."""
        layout = self.layout
        written = [write_json(layout.root / name, obj) for name, obj in self.artifacts(result).items()]
        written.append(write_diagnostics(layout.diagnostics_path(), result.diagnostics))
        written.append(write_json(layout.manifest_path(), manifest))
        return written

    # ========================================================================
    # FULL RUN
    # ========================================================================

    def process_data(self, dry_run: bool = False) -> ProcessingResult:
        """
        Read sources, run, and write outputs.

        Missing or unreadable sources produce a FAILED result and nothing is
        written.
        """
        started_at = datetime.now(timezone.utc)
        log = with_context(logger, run_id=self.run_id)
        log.info("Starting ETL run (reference date %s)", self.reference_date.isoformat())

        try:
            events_src = self.read_source(self.settings.events_path)
            venues_src = self.read_source(self.settings.venues_path)

            result = self.run(events_src.text, venues_src.text)
            manifest = self.build_manifest(
                result, ManifestSources(events=events_src.info, venues=venues_src.info)
            )

            written: List[Path] = []
            if dry_run:
                log.info("Dry run: %d files not written", len(self.artifacts(result)) + 2)
            else:
                written = self.write_outputs(result, manifest)
                log.info("Wrote %d files to %s", len(written), self.layout.root)

            status = PipelineStatus.PARTIAL_SUCCESS if result.errors else PipelineStatus.SUCCESS
            return ProcessingResult(
                status=status,
                run_id=self.run_id,
                started_at=started_at,
                ended_at=datetime.now(timezone.utc),
                result=result,
                manifest=manifest,
                written=written,
            )

        except IngestionError as e:
            log.error("ETL run failed: %s", e)
            failure = str(e)
        except Exception as e:
            log.error("ETL run failed with unexpected error: %s", e, exc_info=True)
            failure = f"{type(e).__name__}: {e}"

        return ProcessingResult(
            status=PipelineStatus.FAILED,
            run_id=self.run_id,
            started_at=started_at,
            ended_at=datetime.now(timezone.utc),
            failure=failure,
        )
