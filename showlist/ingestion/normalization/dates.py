"""
Date and time parsing for listing headers and venue lines.

Headers carry no year (``aug 15 fri``), so the year is inferred from a
reference date. All epochs are milliseconds at local wall-clock time in the
listing timezone.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

DEFAULT_TIMEZONE = "America/Los_Angeles"


@dataclass(frozen=True)
class ParsedDate:
    """A calendar date resolved to a concrete year."""

    date: str  # YYYY-MM-DD
    epoch_ms: int

    @property
    def as_date(self) -> date:
        return date.fromisoformat(self.date)


@dataclass(frozen=True)
class ParsedTime:
    """Show time and optional door time, both ``HH:MM`` 24-hour."""

    start_time: str
    door_time: str | None = None

    @property
    def start_hour(self) -> int:
        return int(self.start_time.split(":")[0])


class DateParser:
    """
    Parse listing dates and times.
    """

    MONTHS = {
        "jan": 1,
        "january": 1,
        "feb": 2,
        "february": 2,
        "mar": 3,
        "march": 3,
        "apr": 4,
        "april": 4,
        "may": 5,
        "jun": 6,
        "june": 6,
        "jul": 7,
        "july": 7,
        "aug": 8,
        "august": 8,
        "sep": 9,
        "sept": 9,
        "september": 9,
        "oct": 10,
        "october": 10,
        "nov": 11,
        "november": 11,
        "dec": 12,
        "december": 12,
    }

    # A header date this far behind the reference date belongs to next year
    PAST_TOLERANCE = timedelta(days=30)

    HOUR_PATTERN = re.compile(r"(\d{1,2})(?::(\d{2}))?\s*(am|pm)?", re.IGNORECASE)

    @classmethod
    def parse_event_date(
        cls,
        date_string: str,
        reference_date: date | None = None,
        tz: str = DEFAULT_TIMEZONE,
    ) -> ParsedDate | None:
        """
        Parse a header date like ``"aug 15 fri"``.

        Args:
            date_string: Month and day, optionally followed by a weekday
            reference_date: Anchor for year inference (defaults to today)
            tz: IANA timezone used to compute the epoch

        Returns:
            ParsedDate, or None when the month or day is not valid
        """
        parts = (date_string or "").strip().lower().split()
        if len(parts) < 2:
            return None

        month = cls.MONTHS.get(parts[0])
        if month is None or not parts[1].isdigit():
            return None
        day = int(parts[1])
        if day < 1 or day > 31:
            return None

        reference_date = reference_date or date.today()
        candidate = cls._safe_date(reference_date.year, month, day)
        if candidate is None or candidate < reference_date - cls.PAST_TOLERANCE:
            candidate = cls._safe_date(reference_date.year + 1, month, day)
        if candidate is None:
            return None

        return ParsedDate(
            date=candidate.isoformat(),
            epoch_ms=cls.local_epoch_ms(candidate, tz=tz),
        )

    @classmethod
    def parse_time(cls, time_string: str) -> ParsedTime | None:
        """
        Parse ``"7pm/8pm"`` (doors/show), ``"7:30pm"`` or ``"8"``.

        The last slash-separated part is the show time. Bare hours 1-11 are
        taken as pm.
        """
        if not time_string:
            return None

        parts = [p.strip() for p in time_string.split("/") if p.strip()]
        if not parts:
            return None

        start_time = cls._parse_hour(parts[-1])
        if start_time is None:
            return None
        door_time = cls._parse_hour(parts[0]) if len(parts) > 1 else None
        return ParsedTime(start_time=start_time, door_time=door_time)

    @classmethod
    def _parse_hour(cls, text: str) -> str | None:
        match = cls.HOUR_PATTERN.search(text)
        if not match:
            return None

        hour = int(match.group(1))
        minute = int(match.group(2) or 0)
        ampm = (match.group(3) or "").lower()

        if ampm == "pm" and hour != 12:
            hour += 12
        elif ampm == "am" and hour == 12:
            hour = 0
        elif not ampm and 1 <= hour <= 11:
            hour += 12

        if hour > 23 or minute > 59:
            return None
        return f"{hour:02d}:{minute:02d}"

    @staticmethod
    def _safe_date(year: int, month: int, day: int) -> date | None:
        try:
            return date(year, month, day)
        except ValueError:
            return None

    @staticmethod
    def local_epoch_ms(day: date, hour: int = 0, minute: int = 0, tz: str = DEFAULT_TIMEZONE) -> int:
        """Epoch milliseconds of a wall-clock time in ``tz``."""
        local = datetime(day.year, day.month, day.day, hour, minute, tzinfo=ZoneInfo(tz))
        return int(local.timestamp()) * 1000

    @classmethod
    def combine(cls, parsed_date: ParsedDate, hhmm: str, tz: str = DEFAULT_TIMEZONE) -> int:
        """Epoch milliseconds of ``HH:MM`` on the parsed date."""
        hour, minute = (int(x) for x in hhmm.split(":"))
        return cls.local_epoch_ms(parsed_date.as_date, hour, minute, tz=tz)

    @staticmethod
    def local_date(epoch_ms: int, tz: str = DEFAULT_TIMEZONE) -> date:
        """Calendar date of an epoch in ``tz``."""
        return datetime.fromtimestamp(epoch_ms / 1000, tz=ZoneInfo(tz)).date()

    @classmethod
    def month_key(cls, epoch_ms: int, tz: str = DEFAULT_TIMEZONE) -> str:
        """``YYYY-MM`` of an epoch in ``tz``."""
        return cls.local_date(epoch_ms, tz=tz).strftime("%Y-%m")
