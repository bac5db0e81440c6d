"""
Unit tests for venue directory normalization and merging.
"""

from showlist.ingestion.event_normalizer import EventNormalizer
from showlist.ingestion.parsers.event_parser import EventRecordExtractor
from showlist.ingestion.parsers.venue_parser import VenueFileParser
from showlist.ingestion.venue_normalizer import VenueNormalizer
from showlist.schemas.event import AgeRestriction


def load_events(context, text):
    EventNormalizer(context).normalize(EventRecordExtractor().extract(text).records)


def load_venues(context, text):
    return VenueNormalizer(context).normalize(VenueFileParser().parse(text).records)


class TestVenueNormalizer:
    """Tests for VenueNormalizer."""

    def test_merge_into_event_venue(self, context):
        """An event venue gains address and phone and keeps its ID."""
        load_events(context, "aug 15 fri Strfkr, Mamalarky\nat Fox Theater, Oakland a/a $50.60 7pm/8pm")
        (before,) = context.finalize_venues()
        original_id = before.id

        load_venues(context, "Fox Theater, 1807 Telegraph Ave, Oakland, a/a, 510-555-0100")

        venues = context.finalize_venues()
        assert len(venues) == 1
        assert venues[0] is before
        assert venues[0].id == original_id
        assert venues[0].address == "1807 Telegraph Ave, Oakland"
        assert venues[0].phone == "510-555-0100"
        assert venues[0].total_event_count == 1

    def test_merge_matches_city_alias(self, context):
        load_events(context, "aug 16 sat Tim Cohen\nat the Knockout, S.F. 21+ free 9pm")
        load_venues(context, "Knockout, 3223 Mission St, SF, 21+")
        (venue,) = context.finalize_venues()
        assert venue.city == "San Francisco"
        assert venue.address == "3223 Mission St, SF"

    def test_new_venue_created(self, context):
        result = load_venues(context, "Ivy Room, 860 San Pablo Ave, Albany, 21+")
        (venue,) = result.items
        assert venue.name == "Ivy Room"
        assert venue.city == "Albany"
        assert venue.age_restriction == AgeRestriction.TWENTY_ONE_PLUS.value
        assert venue.total_event_count == 0
        assert context.find_venue("ivy room") is venue

    def test_duplicate_venue_entry(self, context):
        text = "Ivy Room, 860 San Pablo Ave, Albany, 21+\nThe Ivy Room, 1 Other St, Albany\n"
        result = load_venues(context, text)
        assert len(result.items) == 1
        assert result.items[0].address == "860 San Pablo Ave, Albany"
        assert result.warnings[0].message == "Duplicate venue: The Ivy Room"
        assert result.warnings[0].source_file == "venues"
        assert result.warnings[0].line == 2
        assert context.counters.duplicate_venues_removed == 1

    def test_missing_phone_keeps_existing(self, context):
        venue = context.resolve_venue("Ivy Room", "Albany")
        venue.phone = "510-526-5888"
        record = VenueFileParser().parse_line("Ivy Room, 860 San Pablo Ave, Albany", 1)
        merged, was_merged = VenueNormalizer(context).normalize_record(record)
        assert was_merged is True
        assert merged is venue
        assert venue.phone == "510-526-5888"
        assert venue.address == "860 San Pablo Ave, Albany"

    def test_city_from_address(self, context):
        normalizer = VenueNormalizer(context)
        assert normalizer.city_from_address("1233 17th St, S.F.") == "San Francisco"
        assert normalizer.city_from_address("") == ""
