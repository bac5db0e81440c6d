"""
Headliner detection.

Listings name several artists per show but never say who headlines. The
detector runs an ordered list of rules; the first one that returns a name
wins and its ``name`` is recorded on the event so low-confidence picks can
be reviewed later. The last rule always answers, so detection never fails.

Rules are small strategy objects: pass a custom list (or ``insert`` into
the default one) to add or reorder heuristics without touching callers.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence

from showlist.configs.config import HeuristicsConfig


@dataclass
class HeadlinerContext:
    """What a rule may look at. ``ambiguities`` collects review notes."""

    artists: Sequence[str]
    artist_line: str
    venue: str
    price_max: Optional[Decimal] = None
    ambiguities: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class HeadlinerChoice:
    name: str
    rule: str


class HeadlinerRule(ABC):
    name: str = "rule"

    @abstractmethod
    def choose(self, ctx: HeadlinerContext) -> Optional[str]:
        """Return the headliner, or None to defer to the next rule."""


class TextualCueRule(HeadlinerRule):
    """
    Explicit wording in the artist line.

    - ``headlined by X`` / ``starring X``: X
    - ``X headlines``: the artist named right before the cue
    - ``X with special guest Y``: the first artist
    - ``P presents X``: X, if X is one of the parsed artists
    """

    name = "textual-cue"

    AFTER_CUES = ("headlined by", "starring", "presents")
    BEFORE_CUES = ("headlines",)
    FIRST_ARTIST_CUES = ("with special guest",)

    def __init__(self, cues: Sequence[str]):
        self.cues = [c.lower() for c in cues]

    def choose(self, ctx: HeadlinerContext) -> Optional[str]:
        text = ctx.artist_line.lower()
        for cue in self.cues:
            match = re.search(rf"\b{re.escape(cue)}\b", text)
            if not match:
                continue
            before = text[: match.start()]
            after = text[match.end():]

            if cue in self.FIRST_ARTIST_CUES and before.strip():
                return ctx.artists[0]
            if cue in self.AFTER_CUES:
                found = self._first_in(after, ctx.artists)
                if found:
                    return found
            if cue in self.BEFORE_CUES:
                found = self._last_in(before, ctx.artists)
                if found:
                    return found
        return None

    @staticmethod
    def _first_in(text: str, artists: Sequence[str]) -> Optional[str]:
        positions = [(text.find(a.lower()), a) for a in artists if a.lower() in text]
        return min(positions, key=lambda p: p[0])[1] if positions else None

    @staticmethod
    def _last_in(text: str, artists: Sequence[str]) -> Optional[str]:
        positions = [(text.rfind(a.lower()) + len(a), a) for a in artists if a.lower() in text]
        return max(positions, key=lambda p: p[0])[1] if positions else None


class MajorVenueRule(HeadlinerRule):
    """Billing order is reliable at big rooms: first artist headlines."""

    name = "major-venue"

    def __init__(self, major_venues: Sequence[str]):
        self.major_venues = [v.lower() for v in major_venues]

    def choose(self, ctx: HeadlinerContext) -> Optional[str]:
        venue = ctx.venue.lower()
        if any(v in venue for v in self.major_venues):
            return ctx.artists[0]
        return None


class DiyTouringActRule(HeadlinerRule):
    """
    At DIY spaces a touring act usually tops locals regardless of order.

    Touring acts are guessed from the name (all caps, or a ``(... tribute)``
    suffix). Only a single candidate is trusted.
    """

    name = "diy-touring-act"

    TOURING_PATTERNS = [
        re.compile(r"^[A-Z]{2,}(?: [A-Z]{2,})*$"),
        re.compile(r"\(.*tribute.*\)", re.IGNORECASE),
    ]

    def __init__(self, diy_venues: Sequence[str]):
        self.diy_venues = [v.lower() for v in diy_venues]

    def is_touring_act(self, name: str) -> bool:
        return any(p.search(name) for p in self.TOURING_PATTERNS)

    def choose(self, ctx: HeadlinerContext) -> Optional[str]:
        venue = ctx.venue.lower()
        if not any(v in venue for v in self.diy_venues):
            return None

        candidates = [a for a in ctx.artists if self.is_touring_act(a)]
        if len(candidates) == 1:
            return candidates[0]
        if len(candidates) > 1:
            ctx.ambiguities.append(
                f"Ambiguous headliner at {ctx.venue}: {len(candidates)} possible "
                f"touring acts ({', '.join(candidates)})"
            )
        return None


class HighPriceRule(HeadlinerRule):
    """Expensive shows tend to have an unambiguous, first-billed headliner."""

    name = "high-price"

    def __init__(self, threshold: float):
        self.threshold = Decimal(str(threshold))

    def choose(self, ctx: HeadlinerContext) -> Optional[str]:
        if ctx.price_max is not None and ctx.price_max >= self.threshold:
            return ctx.artists[0]
        return None


class FirstArtistRule(HeadlinerRule):
    name = "default"

    def choose(self, ctx: HeadlinerContext) -> Optional[str]:
        return ctx.artists[0]


class HeadlinerDetector:
    """
    Run headliner rules in order.
    """

    SINGLE = "single"

    def __init__(self, rules: Optional[List[HeadlinerRule]] = None, heuristics: Optional[HeuristicsConfig] = None):
        if rules is None:
            rules = self.default_rules(heuristics or HeuristicsConfig())
        self.rules = list(rules)

    @staticmethod
    def default_rules(heuristics: HeuristicsConfig) -> List[HeadlinerRule]:
        return [
            TextualCueRule(heuristics.headliner_cues),
            MajorVenueRule(heuristics.major_venues),
            DiyTouringActRule(heuristics.diy_venues),
            HighPriceRule(heuristics.high_price_threshold),
            FirstArtistRule(),
        ]

    def insert(self, index: int, rule: HeadlinerRule) -> None:
        self.rules.insert(index, rule)

    def detect(self, ctx: HeadlinerContext) -> HeadlinerChoice:
        """
        Pick the headliner for one record.

        Raises:
            ValueError: if the record has no artists
        """
        if not ctx.artists:
            raise ValueError("cannot detect a headliner without artists")
        if len(ctx.artists) == 1:
            return HeadlinerChoice(name=ctx.artists[0], rule=self.SINGLE)

        for rule in self.rules:
            name = rule.choose(ctx)
            if name is not None:
                return HeadlinerChoice(name=name, rule=rule.name)
        return HeadlinerChoice(name=ctx.artists[0], rule=FirstArtistRule.name)
