"""
Venue directory parsing.

One venue per line, comma-delimited::

    Fox Theater, 1807 Telegraph Ave, Oakland, a/a, 510-555-0100

Age restriction and phone are optional trailing fields and are sometimes
glued onto the city with spaces instead of commas.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Iterable

from showlist.schemas.diagnostics import ParseWarning, SourceFile

logger = logging.getLogger(__name__)


@dataclass
class RawVenueRecord:
    name: str
    address: str
    line_number: int
    raw_text: str
    age_restriction: str = "a/a"
    phone: str | None = None


@dataclass
class VenueParseResult:
    records: list[RawVenueRecord] = field(default_factory=list)
    warnings: list[ParseWarning] = field(default_factory=list)


class VenueFileParser:
    """
    Split venue lines into name, address, age restriction and phone.
    """

    AGE = re.compile(r"(?<!\S)(?:a/a|all[\s-]ages|\d{1,2}\+)(?!\S)", re.IGNORECASE)
    PHONE = re.compile(r"(?:\(\d{3}\)\s*|\b\d{3}[-.\s])\d{3}[-.]\d{4}\b")

    def __init__(self, source_file: SourceFile = SourceFile.VENUES):
        self.source_file = source_file

    def parse(self, content: str | Iterable[str]) -> VenueParseResult:
        lines = content.splitlines() if isinstance(content, str) else content
        result = VenueParseResult()

        for line_number, raw_line in enumerate(lines, start=1):
            line = raw_line.strip()
            if not line:
                continue

            record = self.parse_line(line, line_number)
            if record is None:
                result.warnings.append(
                    ParseWarning(
                        line=line_number,
                        message="Incomplete venue data",
                        raw_text=line,
                        type="incomplete",
                        source_file=self.source_file,
                    )
                )
                continue
            result.records.append(record)

        logger.debug("Parsed %d venue lines", len(result.records))
        return result

    def parse_line(self, line: str, line_number: int) -> RawVenueRecord | None:
        """
        Parse one non-blank line.

        Returns:
            RawVenueRecord, or None when there is no name plus address
        """
        parts = [part.strip() for part in line.split(",") if part.strip()]
        if len(parts) < 2:
            return None

        name, segments = parts[0], parts[1:]
        age: str | None = None
        phone: str | None = None

        # Peel age/phone off the tail; whatever is left is the address.
        while segments:
            segment = segments[-1]
            phone_match = self.PHONE.search(segment)
            if phone_match and phone is None:
                phone = phone_match.group(0).strip()
                segment = (segment[: phone_match.start()] + segment[phone_match.end():]).strip()
            age_match = self.AGE.search(segment)
            if age_match and age is None:
                age = age_match.group(0)
                segment = (segment[: age_match.start()] + segment[age_match.end():]).strip()

            if segment == segments[-1]:
                break
            if segment:
                segments[-1] = segment
                break
            segments.pop()

        if not segments:
            return None

        return RawVenueRecord(
            name=name,
            address=", ".join(segments),
            line_number=line_number,
            raw_text=line,
            age_restriction=age or "a/a",
            phone=phone,
        )
