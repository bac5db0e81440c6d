"""
Venue-line grammar.

A venue line closes every event record::

    at <venue>, <city> <age> [$price[-price]] [door/show time] [#@^$ markers] [(notes)]

e.g. ``at the Fox Theater, Oakland a/a $50.60 7pm/8pm #``. Everything after
the venue is optional and may come in any order, so each field is picked
out by its own pattern rather than by position.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional

from showlist.configs.config import Config, HeuristicsConfig
from showlist.ingestion.normalization.dates import DateParser, ParsedTime
from showlist.ingestion.normalization.price import PriceInfo, PriceParser
from showlist.ingestion.normalization.strings import StringNormalizer
from showlist.schemas.event import AgeRestriction, EventTag, VenueType


@dataclass
class VenueLineInfo:
    venue: str
    city: str
    age_restriction: AgeRestriction
    price: PriceInfo
    time: Optional[ParsedTime]
    venue_type: VenueType
    tags: List[EventTag] = field(default_factory=list)
    notes: Optional[str] = None
    markers: str = ""


class VenueLineParser:
    """
    Parse a venue line into its fields.
    """

    PREFIX = re.compile(r"^\s*at\s+", re.IGNORECASE)
    NOTES = re.compile(r"\(([^)]*)\)")
    MARKERS = re.compile(r"([#@^$]+)\s*$")

    # Tokens that end the city part of "<venue>, <city> ..."
    DETAIL_TOKEN = re.compile(r"^(?:a/a|all|free|sold|\$.*|\d.*|[#@^$]+)$", re.IGNORECASE)

    AGE_RULES = [
        (re.compile(r"(?<!\S)a/a(?!\S)|\ball[\s-]ages\b", re.IGNORECASE), AgeRestriction.ALL_AGES),
        (re.compile(r"(?<!\d)21\+"), AgeRestriction.TWENTY_ONE_PLUS),
        (re.compile(r"(?<!\d)18\+"), AgeRestriction.EIGHTEEN_PLUS),
        (re.compile(r"(?<!\d)16\+"), AgeRestriction.SIXTEEN_PLUS),
        (re.compile(r"(?<!\d)8\+"), AgeRestriction.EIGHT_PLUS),
        (re.compile(r"(?<!\d)6\+"), AgeRestriction.SIX_PLUS),
        (re.compile(r"(?<!\d)5\+"), AgeRestriction.FIVE_PLUS),
    ]

    # Only tokens with am/pm, a colon or a door/show slash are times, so
    # prices ("$50.60") and ages ("21+") are never read as hours.
    TIME_TOKEN = re.compile(
        r"(?<![\d$.:])(\d{1,2}(?::\d{2})?\s*(?:am|pm)?(?:\s*/\s*\d{1,2}(?::\d{2})?\s*(?:am|pm)?)?)(?![\d+:])",
        re.IGNORECASE,
    )

    SOLD_OUT = re.compile(r"\bsold[\s-]?out\b", re.IGNORECASE)
    OUTDOOR = re.compile(r"\b(?:outdoors?|park|amphitheat(?:er|re))\b", re.IGNORECASE)
    MATINEE = re.compile(r"\b(?:matinee|afternoon|12pm|1pm|2pm|3pm|4pm)\b", re.IGNORECASE)
    LATE_SHOW = re.compile(r"\b(?:late|10pm|11pm|midnight)\b", re.IGNORECASE)
    NOTE_TAGS = [
        (re.compile(r"\btribute\b", re.IGNORECASE), EventTag.TRIBUTE),
        (re.compile(r"\bhip[\s-]?hop\b", re.IGNORECASE), EventTag.HIP_HOP),
        (re.compile(r"\breggae\b", re.IGNORECASE), EventTag.REGGAE),
        (re.compile(r"\bfest(?:ival)?\b", re.IGNORECASE), EventTag.FESTIVAL),
    ]

    @classmethod
    def parse(cls, venue_line: str, heuristics: Optional[HeuristicsConfig] = None) -> Optional[VenueLineInfo]:
        """
        Parse one venue line.

        Args:
            venue_line: The raw line, with or without the leading ``at``
            heuristics: Lookup tables for cities and venue classes

        Returns:
            VenueLineInfo, or None when there is no ``venue, city`` split
        """
        heuristics = heuristics or Config.load_heuristics_config()
        line = cls.PREFIX.sub("", venue_line or "").strip()

        notes = [n.strip() for n in cls.NOTES.findall(line) if n.strip()]
        line = cls.NOTES.sub(" ", line).strip()

        markers = ""
        marker_match = cls.MARKERS.search(line)
        if marker_match:
            markers = marker_match.group(1)
            line = line[: marker_match.start()].strip()

        if "," not in line:
            return None
        venue, rest = (part.strip() for part in line.split(",", 1))
        if not venue:
            return None

        details = rest.replace(",", " ")
        city_tokens = []
        for token in details.split():
            if cls.DETAIL_TOKEN.match(token):
                break
            city_tokens.append(token)
        if not city_tokens:
            return None
        city = StringNormalizer.normalize_city(" ".join(city_tokens), heuristics.city_mappings)

        notes_text = "; ".join(notes) if notes else None
        price = PriceParser.parse_price_string(details)
        time = DateParser.parse_time(cls.extract_time(details))

        return VenueLineInfo(
            venue=venue,
            city=city,
            age_restriction=cls.parse_age_restriction(details),
            price=price,
            time=time,
            venue_type=cls.determine_venue_type(markers, venue, heuristics),
            tags=cls.extract_tags(venue, details, notes_text, price, time),
            notes=notes_text,
            markers=markers,
        )

    @classmethod
    def parse_age_restriction(cls, text: str) -> AgeRestriction:
        """First age rule that matches, all-ages by default."""
        for pattern, restriction in cls.AGE_RULES:
            if pattern.search(text or ""):
                return restriction
        return AgeRestriction.ALL_AGES

    @classmethod
    def extract_time(cls, text: str) -> str:
        for match in cls.TIME_TOKEN.finditer(text or ""):
            token = match.group(1)
            if re.search(r"am|pm|:|/", token, re.IGNORECASE):
                return re.sub(r"\s+", "", token)
        return ""

    @staticmethod
    def determine_venue_type(markers: str, venue: str, heuristics: HeuristicsConfig) -> VenueType:
        if "#" in markers:
            return VenueType.MAJOR
        if "@" in markers:
            return VenueType.DIY

        venue_lower = venue.lower()
        keywords = heuristics.venue_type_keywords
        if any(word in venue_lower for word in keywords.major):
            return VenueType.MAJOR
        if any(word in venue_lower for word in keywords.diy):
            return VenueType.DIY
        return VenueType.CLUB

    @classmethod
    def extract_tags(
        cls,
        venue: str,
        text: str,
        notes: Optional[str],
        price: PriceInfo,
        time: Optional[ParsedTime],
    ) -> List[EventTag]:
        notes = notes or ""
        tags: List[EventTag] = []

        if price.is_free:
            tags.append(EventTag.FREE)
        if cls.SOLD_OUT.search(text) or cls.SOLD_OUT.search(notes):
            tags.append(EventTag.SOLD_OUT)
        for pattern, tag in cls.NOTE_TAGS:
            if pattern.search(notes):
                tags.append(tag)
        if cls.OUTDOOR.search(f"{venue} {text}"):
            tags.append(EventTag.OUTDOOR)

        start_hour = time.start_hour if time else None
        if cls.MATINEE.search(text) or (start_hour is not None and 12 <= start_hour <= 16):
            tags.append(EventTag.MATINEE)
        if cls.LATE_SHOW.search(text) or (start_hour is not None and start_hour >= 22):
            tags.append(EventTag.LATE_SHOW)

        return tags
