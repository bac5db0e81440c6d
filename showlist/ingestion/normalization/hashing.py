"""
Content-addressed IDs.

Scheme ``v1``::

    id = sha256("v1:" + kind + ":" + ":".join(parts)).hexdigest()[:16]

with the name parts passed through ``StringNormalizer.normalize_name``
first:

- artist: ``("artist", name)``
- venue:  ``("venue", name, city)``
- event:  ``("event", iso_date, headliner, venue)``

Any change to the normalization rules or to this layout must bump the
version so stored IDs are not silently reused for different content.
"""

from __future__ import annotations

import hashlib

from showlist.ingestion.normalization.strings import StringNormalizer

HASH_VERSION = "v1"
HASH_LENGTH = 16
ID_SCHEME = f"sha256-{HASH_LENGTH}/{HASH_VERSION}"


def content_hash(kind: str, *parts: str) -> str:
    """Versioned, truncated sha256 of already-normalized parts."""
    payload = f"{HASH_VERSION}:{kind}:" + ":".join(parts)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()[:HASH_LENGTH]


def artist_id(name: str) -> str:
    return content_hash("artist", StringNormalizer.normalize_name(name))


def venue_id(name: str, city: str) -> str:
    return content_hash(
        "venue",
        StringNormalizer.normalize_name(name),
        StringNormalizer.normalize_name(city),
    )


def event_id(iso_date: str, headliner: str, venue: str) -> str:
    return content_hash(
        "event",
        iso_date,
        StringNormalizer.normalize_name(headliner),
        StringNormalizer.normalize_name(venue),
    )


def checksum(data: str | bytes) -> str:
    """Integrity checksum for a file body, ``sha256-<hex>``."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return f"sha256-{hashlib.sha256(data).hexdigest()}"
