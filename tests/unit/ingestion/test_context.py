"""
Unit tests for IngestionContext registries and counters.
"""

from datetime import date

from showlist.ingestion.normalization.hashing import artist_id, venue_id
from showlist.schemas.diagnostics import SourceFile


class TestDiagnostics:
    def test_error_defaults(self, context):
        err = context.error(3, "Could not parse date: foo", "foo")
        assert err.type == "validation"
        assert err.source_file == "events"
        assert context.errors == [err]

    def test_warn_defaults(self, context):
        warning = context.warn(5, "odd", source_file=SourceFile.VENUES)
        assert warning.type == "data-quality"
        assert warning.source_file == "venues"
        assert context.warnings == [warning]


class TestArtistRegistry:
    """First occurrence creates, later occurrences merge."""

    def test_create_once(self, context):
        first = context.resolve_artist("Strfkr")
        second = context.resolve_artist("STRFKR")
        assert first is second
        assert first.id == artist_id("Strfkr")
        assert first.name == "Strfkr"
        assert first.aliases == ["STRFKR"]
        assert len(context.finalize_artists()) == 1

    def test_created_at_is_run_start(self, context):
        artist = context.resolve_artist("Strfkr")
        assert artist.created_at == artist.updated_at == context.run_started_ms

    def test_slug_falls_back_to_id(self, context):
        artist = context.resolve_artist("東京")
        assert artist.slug == artist.id


class TestVenueRegistry:
    def test_keyed_by_name_and_city(self, context):
        oakland = context.resolve_venue("Fox Theater", "Oakland")
        redwood = context.resolve_venue("Fox Theater", "Redwood City")
        assert oakland is not redwood
        assert context.resolve_venue("the Fox Theater", "Oakland") is oakland
        assert oakland.id == venue_id("Fox Theater", "Oakland")

    def test_find_venue_prefers_city(self, context):
        context.resolve_venue("Fox Theater", "Redwood City")
        oakland = context.resolve_venue("Fox Theater", "Oakland")
        assert context.find_venue("fox theater", "Oakland") is oakland
        assert context.find_venue("fox theater", "Berkeley").city == "Redwood City"
        assert context.find_venue("ivy room") is None


class TestCounts:
    def test_count_and_retract(self, context, create_event):
        context.resolve_artist("Strfkr")
        context.resolve_venue("Fox Theater", "Oakland")
        event = create_event(headliner="Strfkr", venue="Fox Theater")

        context.count_event(event)
        assert context.artists_by_id[event.headliner_artist_id].total_event_count == 1
        assert context.venues_by_id[event.venue_id].total_event_count == 1

        context.retract_event(event)
        assert context.artists_by_id[event.headliner_artist_id].total_event_count == 0

    def test_upcoming_counts(self, context, create_event):
        """Events on or after the reference date are upcoming."""
        context.resolve_artist("Strfkr")
        venue = context.resolve_venue("Fox Theater", "Oakland")
        past = create_event(headliner="Strfkr", venue="Fox Theater", day=date(2025, 7, 20))
        today = create_event(headliner="Strfkr", venue="Fox Theater", day=context.reference_date)

        context.update_upcoming_counts([past, today])
        assert venue.upcoming_event_count == 1
        assert context.artists_by_id[artist_id("Strfkr")].upcoming_event_count == 1

    def test_upcoming_counts_reset(self, context, create_event):
        venue = context.resolve_venue("Fox Theater", "Oakland")
        event = create_event(venue="Fox Theater")
        context.update_upcoming_counts([event])
        context.update_upcoming_counts([event])
        assert venue.upcoming_event_count == 1
