"""Scoring constants for event demand impact and daily aggregation.

All weights, breakpoints and lookup tables used by the demand scorer and the
daily aggregator live here so the scoring functions stay table-driven.
"""

from types import MappingProxyType
from typing import Final

from event_demand.domain.models import DemandLevel, EventType

# Component weights (sum to 1.0)
DEMAND_COMPONENT_WEIGHTS: Final[MappingProxyType[str, float]] = MappingProxyType(
    {
        "attendance": 0.35,
        "event_type": 0.20,
        "proximity": 0.20,
        "timing": 0.15,
        "price": 0.10,
    }
)

MIN_IMPACT_SCORE: Final[float] = 0.0
MAX_IMPACT_SCORE: Final[float] = 100.0

# Attendance
DEFAULT_ATTENDANCE_SCORE: Final[float] = 30.0
"""Score used when attendance is unknown or non-positive."""

SMALL_EVENT_MIN_SCORE: Final[float] = 10.0
SMALL_EVENT_DIVISOR: Final[float] = 5.0
SMALL_EVENT_LIMIT: Final[int] = 100

ATTENDANCE_BANDS: Final[tuple[tuple[int, int, float, float], ...]] = (
    # (lower bound, upper bound exclusive, score at lower bound, slope)
    (100, 500, 20.0, 0.025),
    (500, 1_000, 30.0, 0.02),
    (1_000, 5_000, 40.0, 0.005),
    (5_000, 10_000, 60.0, 0.004),
    (10_000, 50_000, 80.0, 0.000125),
    (50_000, 100_000, 85.0, 0.0003),
)
"""Piecewise-linear attendance bands.

Example:
    - 2,500 attendees → 40 + (2,500 - 1,000) × 0.005 = 47.5
"""

MAX_ATTENDANCE_SCORE: Final[float] = 100.0
"""Score at and above 100,000 attendees."""

# Event type
EVENT_TYPE_SCORES: Final[MappingProxyType[EventType, float]] = MappingProxyType(
    {
        EventType.FESTIVAL: 95.0,
        EventType.CONVENTION: 90.0,
        EventType.CONCERT: 85.0,
        EventType.SPORTS: 80.0,
        EventType.CONFERENCE: 75.0,
        EventType.THEATER: 65.0,
        EventType.OTHER: 50.0,
    }
)

# Proximity
PROXIMITY_BANDS: Final[tuple[tuple[float, float], ...]] = (
    # (distance upper bound exclusive in miles, score)
    (0.5, 100.0),
    (1.0, 90.0),
    (2.0, 75.0),
    (5.0, 50.0),
    (10.0, 25.0),
)
FAR_PROXIMITY_SCORE: Final[float] = 10.0
DEFAULT_PROXIMITY_SCORE: Final[float] = 70.0
"""Score used when the venue's distance from downtown is unknown."""

# Timing
TIMING_BASE_SCORE: Final[float] = 50.0

DAY_OF_WEEK_FACTORS: Final[MappingProxyType[int, float]] = MappingProxyType(
    {
        0: 0.85,  # Monday
        1: 0.85,  # Tuesday
        2: 0.90,  # Wednesday
        3: 0.95,  # Thursday
        4: 1.20,  # Friday
        5: 1.25,  # Saturday
        6: 1.15,  # Sunday
    }
)
"""Keyed by ``date.weekday()`` (Monday = 0)."""

TIME_OF_DAY_FACTORS: Final[tuple[tuple[int, int, float], ...]] = (
    # (first hour, last hour inclusive, factor)
    (19, 22, 1.15),
    (17, 18, 1.10),
    (10, 14, 1.05),
)

# Ticket price
DEFAULT_PRICE_SCORE: Final[float] = 50.0
PRICE_BANDS: Final[tuple[tuple[float, float], ...]] = (
    # (average price upper bound exclusive in USD, score)
    (25.0, 30.0),
    (50.0, 45.0),
    (100.0, 60.0),
    (200.0, 75.0),
    (500.0, 90.0),
)
PREMIUM_PRICE_SCORE: Final[float] = 100.0

# Enrichment metric keys
ATTENDANCE_METRIC_KEY: Final[str] = "phq_attendance"
"""Source-provided attendance estimate; supersedes declared attendance."""

LOCAL_RANK_METRIC_KEY: Final[str] = "local_rank"
"""Source-provided 0-100 local impact rank; blended with the type score."""

# Daily aggregation
DIMINISHING_RETURN_FACTORS: Final[tuple[float, ...]] = (1.0, 0.7, 0.5, 0.3)
"""Positional weights; the last factor applies to every event after it."""

DEMAND_LEVEL_THRESHOLDS: Final[tuple[tuple[float, DemandLevel], ...]] = (
    # (score upper bound exclusive, level)
    (30.0, DemandLevel.LOW),
    (60.0, DemandLevel.MODERATE),
    (100.0, DemandLevel.HIGH),
    (150.0, DemandLevel.VERY_HIGH),
)
TOP_DEMAND_LEVEL: Final[DemandLevel] = DemandLevel.EXTREME

# Calendar bonuses
HOLIDAY_BONUSES: Final[MappingProxyType[tuple[int, int], int]] = MappingProxyType(
    {
        (1, 1): 50,  # New Year's Day
        (7, 4): 40,  # Independence Day
        (12, 24): 30,  # Christmas Eve
        (12, 25): 35,  # Christmas Day
        (12, 31): 60,  # New Year's Eve
    }
)
"""Fixed-date holiday bonuses keyed by (month, day)."""

FESTIVAL_WINDOWS: Final[tuple[tuple[int, int, int, bool, int], ...]] = (
    # (month, first day, last day, weekend only, bonus)
    (5, 1, 7, True, 70),  # Beale Street Music Festival
    (5, 12, 18, True, 50),  # Memphis in May BBQ
    (8, 10, 18, False, 40),  # Elvis Week
)
"""Recurring local festival windows, checked after fixed-date holidays."""

WEEKEND_DAYS: Final[frozenset[int]] = frozenset({4, 5, 6})
"""Friday, Saturday and Sunday by ``date.weekday()``."""
