"""
Event record extraction.

Groups the physical lines of the events listing into candidate records. A
record is a date header, zero or more artist continuation lines and a venue
line::

    aug 15 fri Strfkr, Mamalarky
    at Fox Theater, Oakland a/a $50.60 7pm/8pm

or a single line when the header carries ``<artists> at <venue-line>``.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator

from showlist.schemas.diagnostics import ParseWarning, SourceFile

logger = logging.getLogger(__name__)


class ExtractorState(str, Enum):
    AWAITING_DATE = "awaiting_date"
    ACCUMULATING = "accumulating"


@dataclass
class RawEventRecord:
    """One candidate event, still as text."""

    date_string: str
    artist_line: str
    venue_line: str
    raw_text: str
    line_number: int

    @property
    def is_complete(self) -> bool:
        return bool(self.date_string and self.venue_line)


@dataclass
class ExtractionResult:
    records: list[RawEventRecord] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list)


_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)"
_WEEKDAY = r"(?:sun|mon|tue|wed|thu|fri|sat)"


class EventRecordExtractor:
    """
    Line-scanning state machine over the events listing.

    ``AWAITING_DATE`` waits for a header; ``ACCUMULATING`` collects artist
    continuation lines until a line starting with ``at `` closes the record.
    """

    DATE_HEADER = re.compile(
        rf"^({_MONTH}\s+\d{{1,2}}\s+{_WEEKDAY})(?:\s+(.*))?$", re.IGNORECASE
    )
    INLINE_VENUE = re.compile(r"^(.+?)\s+at\s+(.+)$")
    VENUE_PREFIX = "at "

    def __init__(self, source_file: SourceFile = SourceFile.EVENTS):
        self.source_file = source_file

    def extract(self, content: str | Iterable[str]) -> ExtractionResult:
        """
        Extract raw records from the listing.

        Args:
            content: Full file text, or any iterable of lines (a file object
                streams without loading the whole file)

        Returns:
            ExtractionResult with records in source order and the format /
            incomplete warnings raised on the way
        """
        result = ExtractionResult()
        for item in self._scan(content):
            if isinstance(item, RawEventRecord):
                result.records.append(item)
            else:
                result.warnings.append(item)

        logger.debug(
            "Extracted %d records (%d warnings)", len(result.records), len(result.warnings)
        )
        return result

    def _scan(self, content: str | Iterable[str]) -> Iterator[RawEventRecord | ParseWarning]:
        lines = content.splitlines() if isinstance(content, str) else content

        state = ExtractorState.AWAITING_DATE
        current: RawEventRecord | None = None

        for line_number, raw_line in enumerate(lines, start=1):
            line = raw_line.strip()
            if not line:
                continue

            header = self.DATE_HEADER.match(line)
            if header:
                if state == ExtractorState.ACCUMULATING and current is not None:
                    yield self._warning(
                        current.line_number, "Incomplete event data", current.raw_text, "incomplete"
                    )

                record = self._start_record(header.group(1), header.group(2) or "", line, line_number)
                if record.is_complete:
                    yield record
                    state, current = ExtractorState.AWAITING_DATE, None
                else:
                    state, current = ExtractorState.ACCUMULATING, record
                continue

            if state == ExtractorState.ACCUMULATING and current is not None:
                current.raw_text += "\n" + line
                if line.startswith(self.VENUE_PREFIX):
                    current.venue_line = line
                    yield current
                    state, current = ExtractorState.AWAITING_DATE, None
                elif current.artist_line:
                    current.artist_line += ", " + line
                else:
                    current.artist_line = line
                continue

            yield self._warning(line_number, "Unexpected line format, skipping", line, "format")

        if state == ExtractorState.ACCUMULATING and current is not None:
            yield self._warning(
                current.line_number, "Incomplete event at end of file", current.raw_text, "incomplete"
            )

    def _start_record(self, date_string: str, rest: str, line: str, line_number: int) -> RawEventRecord:
        rest = rest.strip()
        record = RawEventRecord(
            date_string=date_string,
            artist_line=rest,
            venue_line="",
            raw_text=line,
            line_number=line_number,
        )

        if rest.startswith(self.VENUE_PREFIX):
            record.artist_line = ""
            record.venue_line = rest
            return record

        inline = self.INLINE_VENUE.match(rest)
        if inline:
            record.artist_line = inline.group(1).strip()
            record.venue_line = f"{self.VENUE_PREFIX}{inline.group(2).strip()}"
        return record

    def _warning(self, line: int, message: str, raw_text: str, type: str) -> ParseWarning:
        return ParseWarning(
            line=line,
            message=message,
            raw_text=raw_text,
            type=type,
            source_file=self.source_file,
        )
