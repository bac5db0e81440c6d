"""
Unit tests for the venue file parser.
"""

import pytest

from showlist.ingestion.parsers.venue_parser import VenueFileParser


@pytest.fixture
def parser():
    return VenueFileParser()


class TestParseLine:
    """Tests for VenueFileParser.parse_line."""

    def test_all_fields(self, parser):
        record = parser.parse_line("Fox Theater, 1807 Telegraph Ave, Oakland, a/a, 510-555-0100", 4)
        assert record.name == "Fox Theater"
        assert record.address == "1807 Telegraph Ave, Oakland"
        assert record.age_restriction == "a/a"
        assert record.phone == "510-555-0100"
        assert record.line_number == 4

    def test_no_phone(self, parser):
        record = parser.parse_line("Ivy Room, 860 San Pablo Ave, Albany, 21+", 1)
        assert record.address == "860 San Pablo Ave, Albany"
        assert record.age_restriction == "21+"
        assert record.phone is None

    def test_age_and_phone_glued_to_city(self, parser):
        """Trailing fields separated by spaces instead of commas."""
        record = parser.parse_line("Ivy Room, 860 San Pablo Ave, Albany 21+ (510) 526-5888", 1)
        assert record.address == "860 San Pablo Ave, Albany"
        assert record.age_restriction == "21+"
        assert record.phone == "(510) 526-5888"

    def test_defaults_to_all_ages(self, parser):
        assert parser.parse_line("Ivy Room, 860 San Pablo Ave, Albany", 1).age_restriction == "a/a"

    def test_name_only_is_rejected(self, parser):
        assert parser.parse_line("Ivy Room", 1) is None

    def test_no_address_left_is_rejected(self, parser):
        assert parser.parse_line("Ivy Room, 21+, 510-526-5888", 1) is None


class TestParse:
    def test_warns_on_incomplete_lines(self, parser, venues_text):
        result = parser.parse(venues_text + "\nJust A Name\n")
        assert len(result.records) == 4
        assert len(result.warnings) == 1
        warning = result.warnings[0]
        assert warning.type == "incomplete"
        assert warning.message == "Incomplete venue data"
        assert warning.line == 6
        assert warning.source_file == "venues"
