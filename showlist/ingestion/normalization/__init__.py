"""
Primitive normalizers: dates, names, prices, content hashes and the
venue-line grammar.
"""

from showlist.ingestion.normalization.dates import DateParser, ParsedDate, ParsedTime
from showlist.ingestion.normalization.hashing import (
    ID_SCHEME,
    artist_id,
    checksum,
    content_hash,
    event_id,
    venue_id,
)
from showlist.ingestion.normalization.price import PriceInfo, PriceParser
from showlist.ingestion.normalization.strings import StringNormalizer
from showlist.ingestion.normalization.venue_line import VenueLineInfo, VenueLineParser

__all__ = [
    "DateParser",
    "ID_SCHEME",
    "ParsedDate",
    "ParsedTime",
    "PriceInfo",
    "PriceParser",
    "StringNormalizer",
    "VenueLineInfo",
    "VenueLineParser",
    "artist_id",
    "checksum",
    "content_hash",
    "event_id",
    "venue_id",
]
