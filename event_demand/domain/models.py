"""Domain models for the event demand engine.

All models use Pydantic v2 for validation and serialization.
"""

import datetime as dt
from collections.abc import Iterator
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from event_demand.services.text_normalizer import normalize_title


class EventType(str, Enum):
    """Event type classification."""

    CONCERT = "concert"
    SPORTS = "sports"
    FESTIVAL = "festival"
    CONVENTION = "convention"
    CONFERENCE = "conference"
    THEATER = "theater"
    OTHER = "other"


class DemandLevel(str, Enum):
    """Discretized demand bucket for a date."""

    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    VERY_HIGH = "very_high"
    EXTREME = "extreme"


class EventStatus(str, Enum):
    """Listing status as reported by the source."""

    ACTIVE = "active"
    CANCELLED = "cancelled"


class Venue(BaseModel):
    """Venue as reported by a source."""

    name: str | None = Field(default=None, description="Venue name")
    address: str | None = Field(default=None, description="Street address")
    latitude: float | None = Field(default=None, description="Latitude (degrees)")
    longitude: float | None = Field(default=None, description="Longitude (degrees)")
    capacity: int | None = Field(default=None, description="Seated capacity")
    downtown_distance_miles: float | None = Field(
        default=None, description="Distance from downtown in miles"
    )

    @property
    def has_coordinates(self) -> bool:
        """Check if both coordinates are known."""
        return self.latitude is not None and self.longitude is not None


class CandidateEvent(BaseModel):
    """One source's unverified view of an event."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    # Identification
    source_name: str = Field(..., description="Source the listing came from")
    source_event_id: str | None = Field(
        default=None, description="Source-local event identifier"
    )

    # Content
    title: str = Field(default="", description="Title as listed by the source")
    normalized_title: str = Field(
        default="", description="Lowercased ASCII alphanumeric title"
    )
    description: str | None = Field(default=None, description="Free-text description")
    event_type: EventType | None = Field(default=None, description="Event type")
    status: EventStatus = Field(default=EventStatus.ACTIVE, description="Status")

    # Timing
    start_date: dt.date | None = Field(default=None, description="Start date")
    start_time: dt.time | None = Field(default=None, description="Local start time")
    end_date: dt.date | None = Field(default=None, description="End date")
    end_time: dt.time | None = Field(default=None, description="Local end time")

    # Size and price
    expected_attendance: int | None = Field(
        default=None, description="Expected attendance"
    )
    ticket_price_min: float | None = Field(default=None, description="Lowest price")
    ticket_price_max: float | None = Field(default=None, description="Highest price")

    # Links
    image_url: str | None = Field(default=None, description="Image URL")
    event_url: str | None = Field(default=None, description="Listing URL")

    venue: Venue | None = Field(default=None, description="Venue")

    # Quality
    confidence_score: float = Field(
        default=0.5, description="Source-asserted reliability (0.0-1.0)"
    )
    demand_metrics: dict[str, float | None] = Field(
        default_factory=dict,
        description="Enrichment metrics (rank, local_rank, phq_attendance, ...)",
    )

    @field_validator("event_type", mode="before")
    @classmethod
    def validate_event_type(cls, v: Any) -> EventType | None:
        """Map unrecognized type labels to OTHER."""
        if v is None or v == "":
            return None
        if isinstance(v, EventType):
            return v
        try:
            return EventType(str(v).strip().lower())
        except ValueError:
            return EventType.OTHER

    @field_validator("confidence_score", mode="before")
    @classmethod
    def validate_confidence(cls, v: Any) -> float:
        """Clamp confidence to 0.0-1.0."""
        if v is None:
            return 0.0
        return max(0.0, min(1.0, float(v)))

    @field_validator("demand_metrics", mode="before")
    @classmethod
    def validate_demand_metrics(cls, v: Any) -> dict[str, Any]:
        """Treat a missing metrics map as empty."""
        return v or {}

    @model_validator(mode="after")
    def fill_normalized_title(self) -> "CandidateEvent":
        """Derive the normalized title when the source did not supply one."""
        if not self.normalized_title:
            self.normalized_title = normalize_title(self.title)
        return self

    @property
    def source_key(self) -> str | None:
        """Provenance key ``sourceName:sourceEventId`` (None without an id)."""
        if not self.source_event_id:
            return None
        return f"{self.source_name}:{self.source_event_id}"


class CanonicalEvent(CandidateEvent):
    """Deduplicated, merged representation of one real-world event."""

    sources: list[CandidateEvent] = Field(
        default_factory=list, description="Contributing candidate listings"
    )
    demand_impact_score: int | None = Field(
        default=None, description="Demand impact score (0-100)"
    )

    def provenance_keys(self) -> list[str]:
        """Get ``sourceName:sourceEventId`` for each contributing source."""
        return [source.source_key for source in self.sources if source.source_key]


class DemandScoreBreakdown(BaseModel):
    """Per-component demand scores for audit."""

    attendance: float
    event_type: float
    proximity: float
    timing: float
    price: float
    total: int = Field(..., ge=0, le=100)


class DailyDemand(BaseModel):
    """Aggregated demand for one date."""

    date: dt.date
    event_score: int = Field(
        ..., description="Diminishing-returns sum of event impacts (unclamped)"
    )
    holiday_bonus: int = Field(default=0, description="Calendar bonus for the date")
    total_score: int = Field(
        ..., description="event_score + holiday_bonus (unclamped, may exceed 100)"
    )
    event_count: int
    demand_level: DemandLevel
    events: list[CanonicalEvent] = Field(
        default_factory=list, description="Contributing events, highest impact first"
    )


class EventSummary(BaseModel):
    """Short description of an event contributing to a price suggestion."""

    title: str
    event_type: EventType | None = None
    demand_impact_score: int | None = None
    source_keys: list[str] = Field(default_factory=list)


class HostPricingSettings(BaseModel):
    """Host-supplied nightly rate bounds; absent values use engine defaults."""

    base_rate: float | None = Field(default=None, gt=0, description="Base rate")
    min_rate: float | None = Field(default=None, gt=0, description="Minimum rate")
    max_rate: float | None = Field(default=None, gt=0, description="Maximum rate")


class PriceSuggestion(BaseModel):
    """Bounded nightly price recommendation for one date."""

    date: dt.date
    demand_level: DemandLevel
    total_demand_score: int
    event_count: int
    multiplier: float = Field(..., description="Applied multiplier (2 decimals)")
    suggested_price: int
    min_price: int
    max_price: int
    base_rate: float
    is_weekend: bool
    holiday_bonus: int
    top_events: list[EventSummary] = Field(default_factory=list)


class DateRange(BaseModel):
    """Inclusive date range."""

    start: dt.date
    end: dt.date

    @model_validator(mode="after")
    def validate_order(self) -> "DateRange":
        """Ensure the range is not inverted."""
        if self.end < self.start:
            raise ValueError(f"end {self.end} precedes start {self.start}")
        return self

    def days(self) -> Iterator[dt.date]:
        """Iterate every date in the range, both ends included."""
        current = self.start
        while current <= self.end:
            yield current
            current += dt.timedelta(days=1)

    def __contains__(self, day: object) -> bool:
        return isinstance(day, dt.date) and self.start <= day <= self.end


class Pagination(BaseModel):
    """Offset pagination window for source fetches."""

    offset: int = Field(default=0, ge=0)
    limit: int = Field(default=100, ge=1)

    def next(self) -> "Pagination":
        """Window following this one."""
        return Pagination(offset=self.offset + self.limit, limit=self.limit)


class SourcePage(BaseModel):
    """One page of candidates returned by a paginated source."""

    events: list[CandidateEvent] = Field(default_factory=list)
    skipped: int = Field(default=0, description="Records dropped as unparseable")
    has_more: bool = False


class SourceFetchResult(BaseModel):
    """Outcome of fetching one source: candidates or a captured error."""

    source_name: str
    events: list[CandidateEvent] = Field(default_factory=list)
    skipped: int = Field(default=0, description="Records dropped as unparseable")
    error: str | None = None
    error_type: str | None = None
    duration_seconds: float = 0.0

    @property
    def succeeded(self) -> bool:
        """Check if the fetch finished without error."""
        return self.error is None

    @property
    def fetched(self) -> int:
        """Number of candidates returned."""
        return len(self.events)


class DeduplicationStats(BaseModel):
    """Counts reported by a deduplication run."""

    total: int
    unique: int
    duplicates: int


class DeduplicationResult(BaseModel):
    """Canonical events produced by deduplication plus stats."""

    events: list[CanonicalEvent] = Field(default_factory=list)
    stats: DeduplicationStats


class PipelineResult(BaseModel):
    """Full output of one demand pipeline run."""

    correlation_id: str
    date_range: DateRange
    sources: list[SourceFetchResult] = Field(default_factory=list)
    skipped_candidates: int = 0
    dedup_stats: DeduplicationStats
    canonical_events: list[CanonicalEvent] = Field(default_factory=list)
    daily_demand: list[DailyDemand] = Field(default_factory=list)
    price_suggestions: list[PriceSuggestion] = Field(default_factory=list)

    @property
    def failed_sources(self) -> list[str]:
        """Names of sources whose fetch failed."""
        return [result.source_name for result in self.sources if not result.succeeded]
