"""Centralized settings management for the showlist ETL."""

from __future__ import annotations

from datetime import date
from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from showlist.ingestion.deduplication import DeduplicationStrategy


class Settings(BaseSettings):
    """
    Pipeline settings powered by pydantic-settings.

    Loads configuration from ``SHOWLIST_``-prefixed environment variables and
    an optional ``.env`` file at the project root.
    """

    # -------------------------------------------------------------------------
    # PATHS
    # -------------------------------------------------------------------------
    # BASE_DIR points to the project root
    BASE_DIR: Path = Path(__file__).resolve().parents[2]

    DATA_DIR: Path = BASE_DIR / "data"
    OUTPUT_DIR: Path = BASE_DIR / "public" / "data"
    EVENTS_FILENAME: str = "events.txt"
    VENUES_FILENAME: str = "venues.txt"
    HEURISTICS_CONFIG_PATH: Path = Path(__file__).resolve().parent / "heuristics.yaml"

    # -------------------------------------------------------------------------
    # PARSING
    # -------------------------------------------------------------------------
    TIMEZONE: str = "America/Los_Angeles"
    # Anchor for inferring the year of "<month> <day>" headers. Left unset,
    # the current date is used; pin it to make reruns reproducible.
    REFERENCE_DATE: date | None = None

    # -------------------------------------------------------------------------
    # DEDUPLICATION
    # -------------------------------------------------------------------------
    DEDUPLICATION_STRATEGY: DeduplicationStrategy = DeduplicationStrategy.EXACT
    FUZZY_THRESHOLD: float = Field(default=0.85, ge=0.0, le=1.0)

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    LOG_LEVEL: str = "INFO"
    JSON_LOGS: bool = False

    # -------------------------------------------------------------------------
    # CONFIGURATION
    # -------------------------------------------------------------------------
    model_config = SettingsConfigDict(
        env_prefix="SHOWLIST_",
        env_file=str(Path(__file__).resolve().parents[2] / ".env"),
        env_file_encoding="utf-8",
        # Allow extra fields in .env but ignore them in the model
        extra="ignore",
    )

    @property
    def events_path(self) -> Path:
        """Absolute path of the events listing."""
        return self.DATA_DIR / self.EVENTS_FILENAME

    @property
    def venues_path(self) -> Path:
        """Absolute path of the venue directory."""
        return self.DATA_DIR / self.VENUES_FILENAME

    def resolve_reference_date(self) -> date:
        """
        Return the date used to infer event years.

        Returns
        -------
        date
            ``REFERENCE_DATE`` when configured, otherwise today.
        """
        return self.REFERENCE_DATE or date.today()


@lru_cache
def get_settings() -> Settings:
    """
    Get cached pipeline settings.

    Returns
    -------
    Settings
        The singleton settings instance.
    """
    return Settings()
