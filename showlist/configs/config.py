# showlist/configs/config.py
import yaml
from pathlib import Path
from functools import lru_cache
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, ValidationError, field_validator

from showlist.ingestion.exceptions import ConfigError


class VenueTypeKeywords(BaseModel):
    """Substrings of a venue name that hint at its class."""

    major: List[str] = Field(default_factory=list)
    diy: List[str] = Field(default_factory=list)


class HeuristicsConfig(BaseModel):
    """
    Lookup tables consumed by the normalizers and headliner rules.

    Everything here is data, not logic: extending a list in
    ``heuristics.yaml`` changes behavior without touching code.
    """

    artist_name_corrections: Dict[str, str] = Field(default_factory=dict)
    legitimate_names: List[str] = Field(default_factory=list)
    legitimate_name_prefixes: List[str] = Field(default_factory=list)
    max_artists_per_event: int = Field(default=8, ge=1)
    headliner_cues: List[str] = Field(
        default_factory=lambda: [
            "headlined by",
            "starring",
            "headlines",
            "presents",
            "with special guest",
        ]
    )

    major_venues: List[str] = Field(default_factory=list)
    diy_venues: List[str] = Field(default_factory=list)
    venue_type_keywords: VenueTypeKeywords = Field(default_factory=VenueTypeKeywords)

    high_price_threshold: float = Field(default=30, ge=0)
    city_mappings: Dict[str, str] = Field(default_factory=dict)

    @field_validator("major_venues", "diy_venues", mode="after")
    @classmethod
    def lowercase_venues(cls, v: List[str]) -> List[str]:
        return [name.lower().strip() for name in v]

    @field_validator("city_mappings", mode="after")
    @classmethod
    def lowercase_city_keys(cls, v: Dict[str, str]) -> Dict[str, str]:
        return {key.lower().strip(): value for key, value in v.items()}


class Config:
    """
    Configuration for the showlist ETL.
    """

    # 1. Setup Base Paths
    # This points to showlist/configs/
    CONFIG_DIR = Path(__file__).parent.resolve()

    # 2. Define File Paths
    HEURISTICS_CONFIG_PATH = CONFIG_DIR / "heuristics.yaml"

    @classmethod
    def load_heuristics_config(cls, path: Optional[Path] = None) -> HeuristicsConfig:
        """Loads the YAML lookup tables for the normalizers."""
        return _load_heuristics(Path(path) if path else cls.HEURISTICS_CONFIG_PATH)

    @classmethod
    def get_heuristics_path(cls) -> Path:
        """Returns the absolute path to the bundled heuristics YAML."""
        return cls.HEURISTICS_CONFIG_PATH


@lru_cache
def _load_heuristics(path: Path) -> HeuristicsConfig:
    if not path.exists():
        raise ConfigError(f"Missing config at {path}")

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    try:
        return HeuristicsConfig(**raw)
    except ValidationError as e:
        raise ConfigError(f"Invalid heuristics config at {path}: {e}") from e
