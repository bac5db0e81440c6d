from datetime import date
from pathlib import Path

import pytest
from pydantic import ValidationError

from showlist.configs.settings import Settings, get_settings
from showlist.ingestion.deduplication import DeduplicationStrategy


def test_settings_default_values():
    """Test default values for settings."""
    settings = Settings()
    assert settings.TIMEZONE == "America/Los_Angeles"
    assert settings.DEDUPLICATION_STRATEGY == "exact"
    assert settings.REFERENCE_DATE is None
    assert settings.JSON_LOGS is False


def test_paths():
    """Test that paths are correctly resolved."""
    settings = Settings(DATA_DIR=Path("/srv/listings"))
    assert settings.events_path == Path("/srv/listings/events.txt")
    assert settings.venues_path == Path("/srv/listings/venues.txt")
    assert settings.HEURISTICS_CONFIG_PATH.name == "heuristics.yaml"
    assert settings.OUTPUT_DIR.parts[-2:] == ("public", "data")


def test_env_prefix(monkeypatch):
    """Environment variables use the SHOWLIST_ prefix."""
    monkeypatch.setenv("SHOWLIST_REFERENCE_DATE", "2025-08-01")
    monkeypatch.setenv("SHOWLIST_JSON_LOGS", "true")
    monkeypatch.setenv("SHOWLIST_FUZZY_THRESHOLD", "0.9")
    settings = Settings()
    assert settings.REFERENCE_DATE == date(2025, 8, 1)
    assert settings.JSON_LOGS is True
    assert settings.FUZZY_THRESHOLD == 0.9


def test_threshold_bounds():
    with pytest.raises(ValidationError):
        Settings(FUZZY_THRESHOLD=1.5)


def test_deduplication_strategy_from_env(monkeypatch):
    monkeypatch.setenv("SHOWLIST_DEDUPLICATION_STRATEGY", "fuzzy")
    assert Settings().DEDUPLICATION_STRATEGY is DeduplicationStrategy.FUZZY


def test_unknown_deduplication_strategy(monkeypatch):
    """A bad strategy fails when settings load, not mid-run."""
    monkeypatch.setenv("SHOWLIST_DEDUPLICATION_STRATEGY", "nearest")
    with pytest.raises(ValidationError):
        Settings()


def test_resolve_reference_date():
    assert Settings(REFERENCE_DATE=date(2025, 8, 1)).resolve_reference_date() == date(2025, 8, 1)
    assert Settings().resolve_reference_date() == date.today()


def test_get_settings_cached():
    assert get_settings() is get_settings()
