"""
Unit tests for headliner detection.
"""

from decimal import Decimal

import pytest

from showlist.ingestion.headliner import (
    DiyTouringActRule,
    FirstArtistRule,
    HeadlinerContext,
    HeadlinerDetector,
    HeadlinerRule,
    HighPriceRule,
    MajorVenueRule,
    TextualCueRule,
)


@pytest.fixture
def detector(heuristics):
    return HeadlinerDetector(heuristics=heuristics)


def ctx(artists, venue="Ivy Room", artist_line=None, price_max=None):
    return HeadlinerContext(
        artists=artists,
        artist_line=artist_line if artist_line is not None else ", ".join(artists),
        venue=venue,
        price_max=Decimal(str(price_max)) if price_max is not None else None,
    )


class TestHeadlinerDetector:
    """Tests for the rule cascade."""

    def test_single_artist(self, detector):
        choice = detector.detect(ctx(["Cool Ghouls"]))
        assert (choice.name, choice.rule) == ("Cool Ghouls", "single")

    def test_no_artists(self, detector):
        with pytest.raises(ValueError):
            detector.detect(ctx([]))

    def test_major_venue_first_artist(self, detector):
        choice = detector.detect(ctx(["Strfkr", "Mamalarky"], venue="Fox Theater"))
        assert (choice.name, choice.rule) == ("Strfkr", "major-venue")

    def test_textual_cue_beats_venue(self, detector):
        """Explicit wording outranks billing order."""
        line = "Mamalarky, headlined by Strfkr"
        choice = detector.detect(ctx(["Mamalarky", "Strfkr"], venue="Fox Theater", artist_line=line))
        assert (choice.name, choice.rule) == ("Strfkr", "textual-cue")

    def test_diy_touring_act(self, detector):
        choice = detector.detect(ctx(["Local Band", "FUGAZI"], venue="924 Gilman"))
        assert (choice.name, choice.rule) == ("FUGAZI", "diy-touring-act")

    def test_diy_ambiguous_falls_through(self, detector):
        """Two touring candidates: note the ambiguity, use a later rule."""
        context = ctx(["FUGAZI", "MINOR THREAT", "Locals"], venue="924 Gilman")
        choice = detector.detect(context)
        assert choice.rule == "default"
        assert choice.name == "FUGAZI"
        assert len(context.ambiguities) == 1
        assert context.ambiguities[0].startswith("Ambiguous headliner at 924 Gilman")

    def test_high_price(self, detector):
        choice = detector.detect(ctx(["Opener", "Big Act"], price_max=45))
        assert (choice.name, choice.rule) == ("Opener", "high-price")

    def test_default(self, detector):
        choice = detector.detect(ctx(["Tim Cohen", "Banana Gun"], venue="Knockout", price_max=10))
        assert (choice.name, choice.rule) == ("Tim Cohen", "default")

    def test_insert_custom_rule(self, detector):
        """New heuristics plug in without touching callers."""

        class LastArtistRule(HeadlinerRule):
            name = "last-artist"

            def choose(self, context):
                return context.artists[-1]

        detector.insert(0, LastArtistRule())
        choice = detector.detect(ctx(["Strfkr", "Mamalarky"], venue="Fox Theater"))
        assert (choice.name, choice.rule) == ("Mamalarky", "last-artist")

    def test_custom_rule_list(self):
        detector = HeadlinerDetector(rules=[FirstArtistRule()])
        assert detector.detect(ctx(["A1", "B2"])).rule == "default"


class TestTextualCueRule:
    """Tests for TextualCueRule."""

    CUES = ["headlined by", "starring", "headlines", "presents", "with special guest"]

    def test_starring(self):
        rule = TextualCueRule(self.CUES)
        assert rule.choose(ctx(["Openers", "Strfkr"], artist_line="Openers, starring Strfkr")) == "Strfkr"

    def test_headlines_takes_artist_before(self):
        rule = TextualCueRule(self.CUES)
        line = "Mamalarky, Strfkr headlines"
        assert rule.choose(ctx(["Mamalarky", "Strfkr"], artist_line=line)) == "Strfkr"

    def test_special_guest_keeps_first(self):
        rule = TextualCueRule(self.CUES)
        line = "Strfkr with special guest Mamalarky"
        assert rule.choose(ctx(["Strfkr", "Mamalarky"], artist_line=line)) == "Strfkr"

    def test_presents(self):
        rule = TextualCueRule(self.CUES)
        line = "Noise Pop presents Strfkr, Mamalarky"
        assert rule.choose(ctx(["Strfkr", "Mamalarky"], artist_line=line)) == "Strfkr"

    def test_no_cue(self):
        assert TextualCueRule(self.CUES).choose(ctx(["A1", "B2"])) is None


class TestSimpleRules:
    def test_major_venue(self):
        rule = MajorVenueRule(["fox theater"])
        assert rule.choose(ctx(["A1", "B2"], venue="The Fox Theater")) == "A1"
        assert rule.choose(ctx(["A1", "B2"], venue="Ivy Room")) is None

    def test_touring_patterns(self):
        rule = DiyTouringActRule(["gilman"])
        assert rule.is_touring_act("FUGAZI")
        assert rule.is_touring_act("Dark Star (Grateful Dead tribute)")
        assert not rule.is_touring_act("Fugazi")

    def test_high_price_threshold(self):
        rule = HighPriceRule(30)
        assert rule.choose(ctx(["A1", "B2"], price_max=30)) == "A1"
        assert rule.choose(ctx(["A1", "B2"], price_max=29.99)) is None
        assert rule.choose(ctx(["A1", "B2"])) is None
