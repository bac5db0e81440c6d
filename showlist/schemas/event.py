# showlist/schemas/event.py
"""
Canonical entity schemas for the showlist dataset.

Artists, venues and events are built once per ETL run from the raw listings
and serialized for the external data-loading layer. That layer validates the
JSON structurally, so the camelCase field names produced here are a contract:
attributes are snake_case in Python and dumped through a camelCase alias
generator.
"""

from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


# ============================================================================
# ENUMS
# ============================================================================


class AgeRestriction(str, Enum):
    """
    Admission policy as printed in the listings.
    """

    ALL_AGES = "all-ages"
    EIGHTEEN_PLUS = "18+"
    TWENTY_ONE_PLUS = "21+"
    SIXTEEN_PLUS = "16+"
    EIGHT_PLUS = "8+"
    FIVE_PLUS = "5+"
    SIX_PLUS = "6+"


class EventStatus(str, Enum):
    """
    Lifecycle status of an event.
    """

    CONFIRMED = "confirmed"
    SOLD_OUT = "sold-out"
    CANCELLED = "cancelled"
    POSTPONED = "postponed"
    RESCHEDULED = "rescheduled"


class EventTag(str, Enum):
    """
    Facets derived from the venue line and its notes.
    """

    SOLD_OUT = "sold-out"
    FREE = "free"
    TRIBUTE = "tribute"
    HIP_HOP = "hip-hop"
    REGGAE = "reggae"
    FESTIVAL = "festival"
    OUTDOOR = "outdoor"
    ALL_AGES = "all-ages"
    MATINEE = "matinee"
    LATE_SHOW = "late-show"


class VenueType(str, Enum):
    """
    Coarse venue class, used for display and headliner heuristics.
    """

    MAJOR = "major"
    CLUB = "club"
    DIY = "diy"
    OUTDOOR = "outdoor"
    FESTIVAL = "festival"
    UNKNOWN = "unknown"


# ============================================================================
# BASE
# ============================================================================


class CamelModel(BaseModel):
    """
    Base model whose JSON form uses camelCase keys.

    Construct with snake_case names; dump with ``to_json_dict()``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
        # enum defaults are stored as plain values too
        validate_default=True,
    )

    def to_json_dict(self) -> dict:
        """Serialize with camelCase keys, leaving out unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ============================================================================
# ARTIST
# ============================================================================


class Artist(CamelModel):
    """
    A performer. One per distinct normalized name within a run.
    """

    id: str = Field(description="Content hash of the normalized name")
    name: str
    slug: str
    normalized_name: str
    aliases: List[str] = Field(
        default_factory=list,
        description="Other spellings seen for the same normalized name",
    )
    total_event_count: int = Field(default=0, ge=0)
    upcoming_event_count: int = Field(default=0, ge=0)
    created_at: int = Field(description="Epoch ms of the run that built it")
    updated_at: int

    def record_spelling(self, name: str) -> None:
        """Remember an alternative surface spelling of this artist."""
        name = name.strip()
        if name and name != self.name and name not in self.aliases:
            self.aliases.append(name)


# ============================================================================
# VENUE
# ============================================================================


class Venue(CamelModel):
    """
    A venue. Normalized name plus city identifies it.

    Venues first seen in the events listing have an empty address until the
    venue directory is merged in.
    """

    id: str = Field(description="Content hash of normalized name + city")
    name: str
    slug: str
    normalized_name: str
    address: str = ""
    city: str
    age_restriction: AgeRestriction = AgeRestriction.ALL_AGES
    capacity: Optional[int] = Field(default=None, ge=0)
    phone: Optional[str] = None
    total_event_count: int = Field(default=0, ge=0)
    upcoming_event_count: int = Field(default=0, ge=0)
    source_line_number: int


# ============================================================================
# EVENT
# ============================================================================


class Event(CamelModel):
    """
    A single show: one headliner, one venue, one date.
    """

    id: str = Field(description="Content hash of date + headliner + venue")
    slug: str
    date: str = Field(description="ISO date (YYYY-MM-DD) in the listing timezone")
    date_epoch_ms: int
    start_time_epoch_ms: Optional[int] = None
    door_time_epoch_ms: Optional[int] = None
    timezone: str = "America/Los_Angeles"

    # ---- ARTISTS ----
    headliner_artist_id: str
    artist_ids: List[str] = Field(min_length=1)
    headliner_rule: str = Field(
        default="default",
        description="Name of the heuristic tier that picked the headliner",
    )

    # ---- VENUE ----
    venue_id: str

    # ---- DETAILS ----
    price_min: Optional[Decimal] = Field(default=None, ge=0)
    price_max: Optional[Decimal] = Field(default=None, ge=0)
    is_free: bool = False
    age_restriction: AgeRestriction = AgeRestriction.ALL_AGES
    notes: Optional[str] = None

    # ---- STATUS ----
    status: EventStatus = EventStatus.CONFIRMED
    tags: List[EventTag] = Field(default_factory=list)
    venue_type: VenueType = VenueType.CLUB

    # ---- SOURCE ----
    source_line_number: int

    @field_validator("price_min", "price_max", mode="before")
    @classmethod
    def coerce_to_decimal(cls, v):
        """Coerce float/int to Decimal for price fields."""
        if v is None:
            return None
        if isinstance(v, Decimal):
            return v
        return Decimal(str(v))

    @model_validator(mode="after")
    def validate_event(self) -> "Event":
        if (
            self.price_min is not None
            and self.price_max is not None
            and self.price_max < self.price_min
        ):
            raise ValueError("price_max cannot be less than price_min")
        if self.headliner_artist_id not in self.artist_ids:
            raise ValueError("headliner_artist_id must be one of artist_ids")
        return self

    @field_serializer("price_min", "price_max")
    def serialize_decimal(self, v: Optional[Decimal]) -> Optional[float]:
        """Serialize Decimal to float for JSON compatibility."""
        if v is None:
            return None
        return float(v)

    @property
    def chunk_id(self) -> str:
        """Month partition (YYYY-MM) this event belongs to."""
        return self.date[:7]


# ============================================================================
# EVENT CHUNK
# ============================================================================


class DateRange(CamelModel):
    start_epoch_ms: int
    end_epoch_ms: int


class EventChunk(CamelModel):
    """
    Month-partitioned slice of the events, the unit of incremental loading.
    """

    chunk_id: str = Field(pattern=r"^\d{4}-\d{2}$")
    date_range: DateRange
    events: List[Event] = Field(default_factory=list)
