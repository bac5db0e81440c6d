"""
Shared pytest fixtures for the showlist test suite.

Provides factory fixtures for entities and ingestion contexts, plus small
listing texts used by the end-to-end tests.
"""

from datetime import date
from decimal import Decimal
from typing import List, Optional

import pytest

from showlist.configs.config import Config
from showlist.configs.settings import Settings
from showlist.ingestion.context import IngestionContext
from showlist.ingestion.normalization.dates import DateParser
from showlist.ingestion.normalization.hashing import artist_id, event_id, venue_id
from showlist.ingestion.normalization.strings import StringNormalizer
from showlist.schemas.event import Artist, Event, Venue

REFERENCE_DATE = date(2025, 8, 1)


EVENTS_TEXT = """\
aug 15 fri Strfkr, Mamalarky
at Fox Theater, Oakland a/a $50.60 7pm/8pm

aug 16 sat Tim Cohen, Banana Gun
at the Knockout, S.F. 21+ free 9pm

sep 2 tue Cool Ghouls
at Bottom of the Hill, S.F. 21+ $15 8pm/8:30pm
"""

VENUES_TEXT = """\
Fox Theater, 1807 Telegraph Ave, Oakland, a/a, 510-555-0100
Knockout, 3223 Mission St, S.F., 21+
Bottom of the Hill, 1233 17th St, S.F., 21+, 415-626-4455
Ivy Room, 860 San Pablo Ave, Albany, 21+
"""


@pytest.fixture
def reference_date():
    """Anchor used for year inference in every test."""
    return REFERENCE_DATE


@pytest.fixture
def heuristics():
    """The bundled heuristics tables."""
    return Config.load_heuristics_config()


@pytest.fixture
def make_context(heuristics, reference_date):
    """
    Return a function that creates fresh IngestionContext objects.

    Example:
        ctx = make_context(reference_date=date(2025, 1, 1))
    """

    def _make_context(**kwargs) -> IngestionContext:
        defaults = {
            "heuristics": heuristics,
            "reference_date": reference_date,
            "run_started_ms": 1_754_000_000_000,
        }
        defaults.update(kwargs)
        return IngestionContext(**defaults)

    return _make_context


@pytest.fixture
def context(make_context):
    return make_context()


@pytest.fixture
def create_event():
    """
    Return a function that creates Event objects with sensible defaults.

    IDs are derived from the given names so that events built from the same
    arguments are equal, as they would be after ingestion.

    Example:
        event = create_event(headliner="Strfkr", venue="Fox Theater")
    """

    def _create_event(
        headliner: str = "Test Artist",
        venue: str = "Test Venue",
        city: str = "Oakland",
        day: date = date(2025, 8, 15),
        artists: Optional[List[str]] = None,
        line: int = 1,
        **kwargs,
    ) -> Event:
        artists = artists or [headliner]
        iso = day.isoformat()
        defaults = {
            "id": event_id(iso, headliner, venue),
            "slug": StringNormalizer.create_slug(f"{iso}-{headliner}-{venue}"),
            "date": iso,
            "date_epoch_ms": DateParser.local_epoch_ms(day),
            "headliner_artist_id": artist_id(headliner),
            "artist_ids": [artist_id(a) for a in artists],
            "venue_id": venue_id(venue, city),
            "source_line_number": line,
        }
        defaults.update(kwargs)
        return Event(**defaults)

    return _create_event


@pytest.fixture
def create_artist():
    def _create_artist(name: str = "Test Artist", **kwargs) -> Artist:
        defaults = {
            "id": artist_id(name),
            "name": name,
            "slug": StringNormalizer.create_slug(name),
            "normalized_name": StringNormalizer.normalize_name(name),
            "created_at": 0,
            "updated_at": 0,
        }
        defaults.update(kwargs)
        return Artist(**defaults)

    return _create_artist


@pytest.fixture
def create_venue():
    def _create_venue(name: str = "Test Venue", city: str = "Oakland", **kwargs) -> Venue:
        defaults = {
            "id": venue_id(name, city),
            "name": name,
            "slug": StringNormalizer.create_slug(name),
            "normalized_name": StringNormalizer.normalize_name(name),
            "city": city,
            "source_line_number": 1,
        }
        defaults.update(kwargs)
        return Venue(**defaults)

    return _create_venue


@pytest.fixture
def sample_event(create_event):
    """
    Return a single default test event.

    Useful for tests that need a basic event to work with.
    """
    return create_event(price_min=Decimal("15"), price_max=Decimal("20"))


@pytest.fixture
def events_text():
    return EVENTS_TEXT


@pytest.fixture
def venues_text():
    return VENUES_TEXT


@pytest.fixture
def data_dir(tmp_path, events_text, venues_text):
    """A data directory holding events.txt and venues.txt."""
    d = tmp_path / "data"
    d.mkdir()
    (d / "events.txt").write_text(events_text, encoding="utf-8")
    (d / "venues.txt").write_text(venues_text, encoding="utf-8")
    return d


@pytest.fixture
def settings(tmp_path, data_dir, reference_date):
    """Settings pointing at the temporary data and output directories."""
    return Settings(
        DATA_DIR=data_dir,
        OUTPUT_DIR=tmp_path / "out",
        REFERENCE_DATE=reference_date,
    )
