"""
Price Parser.

Parses the ticket price part of a venue line. Listings are US-only, so the
currency is always dollars and is not tracked.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation


@dataclass(frozen=True)
class PriceInfo:
    """Parsed ticket price. Both bounds are None for free or unpriced shows."""

    min: Decimal | None = None
    max: Decimal | None = None
    is_free: bool = False


class PriceParser:
    """
    Parse price text like ``$50.60``, ``$10/$15``, ``$20-25`` or ``free``.
    """

    FREE_PATTERN = re.compile(r"\bfree\b", re.IGNORECASE)

    # "$20", "$20.50", "$20-25", "$20-$25"
    PRICE_PATTERN = re.compile(
        r"\$(\d+(?:\.\d{1,2})?)(?:\s*-\s*\$?(\d+(?:\.\d{1,2})?))?"
    )

    @classmethod
    def parse_price_string(cls, price_str: str) -> PriceInfo:
        """
        Parse a price string into a PriceInfo.

        Handles various formats:
        - "$50.60" -> (50.60, 50.60)
        - "$10/$15" -> (10, 15)
        - "$20-25" -> (20, 25)
        - "free" -> free, no bounds
        - "" -> not free, no bounds

        Args:
            price_str: Text that may contain prices

        Returns:
            PriceInfo with min/max as Decimal
        """
        if not price_str:
            return PriceInfo()

        if cls.is_free(price_str):
            return PriceInfo(is_free=True)

        amounts = cls.extract_amounts(price_str)
        if not amounts:
            return PriceInfo()

        return PriceInfo(min=min(amounts), max=max(amounts))

    @classmethod
    def is_free(cls, price_str: str) -> bool:
        """Check if the text marks a free show."""
        return bool(cls.FREE_PATTERN.search(price_str or ""))

    @classmethod
    def extract_amounts(cls, price_str: str) -> list[Decimal]:
        """
        Extract every dollar amount, expanding ranges.

        - "$15" -> [15]
        - "$10/$15" -> [10, 15]
        - "$20-25" -> [20, 25]
        """
        amounts: list[Decimal] = []
        for match in cls.PRICE_PATTERN.finditer(price_str or ""):
            for group in match.groups():
                if group is None:
                    continue
                try:
                    amounts.append(Decimal(group))
                except InvalidOperation:
                    continue
        return amounts
