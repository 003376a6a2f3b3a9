"""Business rules and constants for cross-source event deduplication.

This module defines the fixed thresholds, weights and priorities used to decide
when two candidate listings describe the same real-world event and which
source wins when their fields conflict. The values are domain constants, not
runtime configuration.
"""

from types import MappingProxyType
from typing import Final

from event_demand.domain.models import EventType

# Cluster threshold
DEFAULT_MERGE_THRESHOLD: Final[float] = 0.75
"""Minimum weighted similarity (0.0-1.0) for two candidates to share a cluster.

Example:
    - "Grizzlies vs Lakers" vs "Memphis Grizzlies vs. Lakers", same day,
      venues 0.005° apart → similarity ≈ 0.88 → merge (≥ 0.75)
"""

# Blocking
BLOCKING_TITLE_PREFIX_LENGTH: Final[int] = 10
"""Number of normalized title characters that make up a blocking key."""

NO_DATE_BLOCK_KEY: Final[str] = "nodate"
"""Date part of the blocking key for candidates without a start date."""

ADJACENT_BLOCK_DAYS: Final[tuple[int, ...]] = (-1, 1)
"""Day offsets under which a candidate is additionally registered.

Business rule: sources disagree on dates by a day (time zones, late-night
shows), so a listing is also placed in the neighbouring days' blocks.
"""

# Similarity weights
SIMILARITY_WEIGHTS: Final[MappingProxyType[str, float]] = MappingProxyType(
    {
        "title": 0.40,
        "date": 0.25,
        "venue": 0.25,
        "type": 0.10,
    }
)

DATE_SAME_DAY_SCORE: Final[float] = 1.0
DATE_ONE_DAY_SCORE: Final[float] = 0.8
DATE_WITHIN_WINDOW_SCORE: Final[float] = 0.5
DATE_WINDOW_DAYS: Final[int] = 3

VENUE_NEAR_DEGREES: Final[float] = 0.01
"""Coordinate delta (both axes) treated as the same venue (~0.7 miles)."""

VENUE_CLOSE_DEGREES: Final[float] = 0.03
"""Coordinate delta (both axes) treated as a neighbouring venue (~2 miles)."""

VENUE_NEAR_SCORE: Final[float] = 1.0
VENUE_CLOSE_SCORE: Final[float] = 0.8
VENUE_FAR_SCORE: Final[float] = 0.3
VENUE_UNKNOWN_SCORE: Final[float] = 0.5
"""Neutral venue score when either side lacks venue data (not penalized)."""

TYPE_MATCH_SCORE: Final[float] = 1.0
TYPE_ADJACENT_SCORE: Final[float] = 0.7
TYPE_MISMATCH_SCORE: Final[float] = 0.3
TYPE_UNKNOWN_SCORE: Final[float] = 0.5

ADJACENT_EVENT_TYPES: Final[frozenset[frozenset[EventType]]] = frozenset(
    {
        frozenset({EventType.CONCERT, EventType.FESTIVAL}),
        frozenset({EventType.CONFERENCE, EventType.CONVENTION}),
    }
)
"""Unordered type pairs that sources commonly use for the same event."""

# Merge priority
SOURCE_PRIORITY: Final[MappingProxyType[str, int]] = MappingProxyType(
    {
        "predicthq": 4,
        "ticketmaster": 3,
        "seatgeek": 2,
        "memphis_travel": 1,
        "memphis_tourism": 1,
        "downtown_memphis": 1,
    }
)
"""Source ranking for merge resolution (higher wins).

Business rule: API sources with curated data beat scraped listings. Sources
not listed here rank 0. Ties keep input order.
"""

UNKNOWN_SOURCE_PRIORITY: Final[int] = 0

MERGE_FILL_FIELDS: Final[tuple[str, ...]] = (
    "description",
    "expected_attendance",
    "ticket_price_min",
    "ticket_price_max",
    "image_url",
    "event_url",
    "venue",
)
"""Fields filled from lower-priority members only while the base lacks them."""

MERGE_MAX_FIELDS: Final[tuple[str, ...]] = (
    "expected_attendance",
    "confidence_score",
)
"""Fields that always take the maximum value observed across the cluster."""

MERGE_OVERWRITE_MAP_FIELDS: Final[tuple[str, ...]] = ("demand_metrics",)
"""Mapping fields merged key-by-key, later members overwriting on collision."""
