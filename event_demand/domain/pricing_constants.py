"""Pricing constants for nightly rate suggestions."""

from types import MappingProxyType
from typing import Final

from event_demand.domain.models import DemandLevel

DEMAND_MULTIPLIERS: Final[MappingProxyType[DemandLevel, float]] = MappingProxyType(
    {
        DemandLevel.LOW: 0.85,
        DemandLevel.MODERATE: 1.00,
        DemandLevel.HIGH: 1.35,
        DemandLevel.VERY_HIGH: 1.75,
        DemandLevel.EXTREME: 2.50,
    }
)

WEEKEND_MULTIPLIER: Final[float] = 1.15
"""Extra 15% on Friday, Saturday and Sunday nights."""

PRICE_RANGE_LOWER_RATIO: Final[float] = 0.9
PRICE_RANGE_UPPER_RATIO: Final[float] = 1.1

MULTIPLIER_DECIMALS: Final[int] = 2

TOP_EVENTS_IN_SUGGESTION: Final[int] = 5

# Engine-level fallbacks when neither the host nor configuration supplies a rate
DEFAULT_BASE_RATE: Final[float] = 100.0
DEFAULT_MIN_RATE: Final[float] = 50.0
DEFAULT_MAX_RATE: Final[float] = 500.0
