"""
Unit tests for the price module.

Tests for PriceParser price parsing and free-show detection.
"""

from decimal import Decimal

from showlist.ingestion.normalization.price import PriceInfo, PriceParser


class TestParsePriceString:
    """Tests for parse_price_string method."""

    def test_parse_simple_dollar(self):
        """Single price: min and max are equal."""
        info = PriceParser.parse_price_string("$15")
        assert info.min == Decimal("15")
        assert info.max == Decimal("15")
        assert info.is_free is False

    def test_parse_cents(self):
        info = PriceParser.parse_price_string("a/a $50.60 7pm/8pm")
        assert info.min == info.max == Decimal("50.60")

    def test_parse_range(self):
        """Dash range without a second dollar sign."""
        info = PriceParser.parse_price_string("$20-25")
        assert info.min == Decimal("20")
        assert info.max == Decimal("25")

    def test_parse_range_with_both_signs(self):
        info = PriceParser.parse_price_string("$20 - $25")
        assert (info.min, info.max) == (Decimal("20"), Decimal("25"))

    def test_parse_advance_and_door(self):
        """Advance/door prices become a range."""
        info = PriceParser.parse_price_string("$10/$15")
        assert (info.min, info.max) == (Decimal("10"), Decimal("15"))

    def test_parse_free_event(self):
        """Free event has no bounds."""
        info = PriceParser.parse_price_string("21+ free 9pm")
        assert info == PriceInfo(min=None, max=None, is_free=True)

    def test_free_wins_over_amounts(self):
        assert PriceParser.parse_price_string("free before 10, $5 after").is_free is True

    def test_no_price(self):
        assert PriceParser.parse_price_string("21+ 8pm") == PriceInfo()

    def test_empty(self):
        assert PriceParser.parse_price_string("") == PriceInfo()

    def test_bare_numbers_are_not_prices(self):
        """Ages and times without a dollar sign are ignored."""
        assert PriceParser.parse_price_string("21+ 8pm/9pm").min is None


class TestIsFree:
    def test_word_boundary(self):
        """'freedom' is not 'free'."""
        assert PriceParser.is_free("Freedom Hall") is False
        assert PriceParser.is_free("FREE show") is True


class TestExtractAmounts:
    def test_extract_all(self):
        amounts = PriceParser.extract_amounts("$10/$15, $20-30")
        assert amounts == [Decimal("10"), Decimal("15"), Decimal("20"), Decimal("30")]
