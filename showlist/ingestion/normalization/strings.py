"""
String normalization: matching keys, slugs and city names.
"""

from __future__ import annotations

import re
import unicodedata
from typing import Mapping


class StringNormalizer:
    """
    Canonicalize names so that spelling noise does not split entities.

    ``normalize_name`` is part of the ID contract: changing it changes every
    content-addressed ID, so treat it as versioned along with the hash scheme.
    """

    QUOTE_MAP = str.maketrans(
        {
            "‘": "'",
            "’": "'",
            "“": '"',
            "”": '"',
            "–": "-",
            "—": "-",
        }
    )

    LEADING_WORDS = re.compile(r"^(?:the|a|dj)\s+")
    TRAILING_WORDS = re.compile(r"\s+(?:band|music|group)$")
    APOSTROPHES = re.compile(r"['\"`]")
    PUNCTUATION = re.compile(r"[^\w\s]")
    WHITESPACE = re.compile(r"\s+")

    @classmethod
    def normalize_name(cls, name: str) -> str:
        """
        Matching key for an artist, venue or city name.

        Lowercases, unifies quotes and dashes, strips punctuation, drops a
        leading ``the``/``a``/``dj`` and a trailing ``band``/``music``/``group``.
        A name made only of punctuation (``!!!``) keeps its lowercased form.
        """
        base = cls.WHITESPACE.sub(" ", (name or "").lower().translate(cls.QUOTE_MAP)).strip()

        text = cls.APOSTROPHES.sub("", base)
        text = cls.PUNCTUATION.sub(" ", text)
        text = cls.WHITESPACE.sub(" ", text).strip()
        text = cls.LEADING_WORDS.sub("", text)
        text = cls.TRAILING_WORDS.sub("", text).strip()

        return text or base

    @staticmethod
    def create_slug(text: str) -> str:
        """URL-safe slug. Accents are folded to ASCII."""
        folded = unicodedata.normalize("NFKD", text or "").encode("ascii", "ignore").decode("ascii")
        slug = folded.lower().strip()
        slug = re.sub(r"[^a-z0-9\s-]", "", slug)
        slug = re.sub(r"\s+", "-", slug)
        slug = re.sub(r"-+", "-", slug)
        return slug.strip("-")

    @classmethod
    def normalize_city(cls, city: str, mappings: Mapping[str, str] | None = None) -> str:
        """
        Canonical city name: a lookup table first, title case otherwise.

        Args:
            city: Raw city text (``"sf"``, ``"S.F."``, ``"san jose"``)
            mappings: Lowercase key -> canonical name. Defaults to the
                bundled heuristics config.
        """
        if mappings is None:
            from showlist.configs.config import Config

            mappings = Config.load_heuristics_config().city_mappings

        key = cls.WHITESPACE.sub(" ", (city or "").lower()).strip()
        if key in mappings:
            return mappings[key]
        key = key.rstrip(".")
        return mappings.get(key) or cls.to_title_case(key)

    @staticmethod
    def to_title_case(text: str) -> str:
        return re.sub(r"\w\S*", lambda m: m.group(0)[0].upper() + m.group(0)[1:].lower(), text or "")
