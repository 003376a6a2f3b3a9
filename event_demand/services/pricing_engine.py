"""Pricing resolver: demand level and host bounds to a nightly price.

Price = base_rate * demand multiplier [* 1.15 on weekends], rounded half up and
clamped to the whole prices inside the host's bounds. The +-10% suggested
range is held within the same whole-price bounds.
"""

import math
from datetime import date

from event_demand.domain.exceptions import ValidationError
from event_demand.domain.models import (
    DailyDemand,
    DemandLevel,
    EventSummary,
    HostPricingSettings,
    PriceSuggestion,
)
from event_demand.domain.pricing_constants import (
    DEFAULT_BASE_RATE,
    DEFAULT_MAX_RATE,
    DEFAULT_MIN_RATE,
    DEMAND_MULTIPLIERS,
    MULTIPLIER_DECIMALS,
    PRICE_RANGE_LOWER_RATIO,
    PRICE_RANGE_UPPER_RATIO,
    TOP_EVENTS_IN_SUGGESTION,
    WEEKEND_MULTIPLIER,
)
from event_demand.services.calendar import is_weekend
from event_demand.services.numeric import clamp, round_half_up


class PricingResolver:
    """Resolve price suggestions under host-configured bounds."""

    def __init__(
        self,
        default_base_rate: float = DEFAULT_BASE_RATE,
        default_min_rate: float = DEFAULT_MIN_RATE,
        default_max_rate: float = DEFAULT_MAX_RATE,
    ) -> None:
        """Initialize resolver.

        Args:
            default_base_rate: Base rate when the host supplies none
            default_min_rate: Minimum rate when the host supplies none
            default_max_rate: Maximum rate when the host supplies none
        """
        self.default_base_rate = default_base_rate
        self.default_min_rate = default_min_rate
        self.default_max_rate = default_max_rate

    def resolve_settings(
        self, settings: HostPricingSettings | None = None
    ) -> HostPricingSettings:
        """Fill absent host values with defaults and check the bounds.

        Raises:
            ValidationError: If the minimum rate exceeds the maximum rate, or
                no whole price lies between them
        """
        settings = settings or HostPricingSettings()
        resolved = HostPricingSettings(
            base_rate=settings.base_rate or self.default_base_rate,
            min_rate=settings.min_rate or self.default_min_rate,
            max_rate=settings.max_rate or self.default_max_rate,
        )
        if resolved.min_rate > resolved.max_rate:  # type: ignore[operator]
            raise ValidationError(
                f"min_rate {resolved.min_rate} exceeds max_rate {resolved.max_rate}"
            )
        lowest, highest = self.whole_price_bounds(
            resolved.min_rate, resolved.max_rate  # type: ignore[arg-type]
        )
        if lowest > highest:
            raise ValidationError(
                f"no whole price between min_rate {resolved.min_rate} "
                f"and max_rate {resolved.max_rate}"
            )
        return resolved

    @staticmethod
    def whole_price_bounds(min_rate: float, max_rate: float) -> tuple[int, int]:
        """Smallest and largest whole prices inside the host's bounds.

        Example:
            >>> PricingResolver.whole_price_bounds(99.5, 350.5)
            (100, 350)
        """
        return math.ceil(min_rate), math.floor(max_rate)

    @staticmethod
    def calculate_multiplier(demand_level: DemandLevel, weekend: bool) -> float:
        """Demand multiplier, with the weekend premium applied when relevant.

        Example:
            >>> PricingResolver.calculate_multiplier(DemandLevel.HIGH, weekend=True)
            1.5525
        """
        multiplier = DEMAND_MULTIPLIERS[demand_level]
        if weekend:
            multiplier *= WEEKEND_MULTIPLIER
        return multiplier

    def suggest_price(
        self,
        day: date,
        demand_level: DemandLevel,
        settings: HostPricingSettings | None = None,
        *,
        total_demand_score: int = 0,
        event_count: int = 0,
        holiday_bonus: int = 0,
        top_events: list[EventSummary] | None = None,
    ) -> PriceSuggestion:
        """Price suggestion for one date at a given demand level.

        Args:
            day: Night being priced
            demand_level: Adjusted demand level for the date
            settings: Host bounds (absent values use defaults)
            total_demand_score: Adjusted demand score, reported back
            event_count: Number of events on the date, reported back
            holiday_bonus: Calendar bonus applied, reported back
            top_events: Highest-impact events, reported back

        Returns:
            PriceSuggestion with bounded price and range

        Example:
            >>> resolver = PricingResolver()
            >>> host = HostPricingSettings(base_rate=150, min_rate=100, max_rate=350)
            >>> s = resolver.suggest_price(date(2025, 3, 12), DemandLevel.HIGH, host)
            >>> (s.suggested_price, s.min_price, s.max_price)
            (203, 183, 223)
        """
        resolved = self.resolve_settings(settings)
        base_rate = float(resolved.base_rate)  # type: ignore[arg-type]
        min_rate = float(resolved.min_rate)  # type: ignore[arg-type]
        max_rate = float(resolved.max_rate)  # type: ignore[arg-type]

        weekend = is_weekend(day)
        multiplier = self.calculate_multiplier(demand_level, weekend)
        lowest, highest = self.whole_price_bounds(min_rate, max_rate)

        suggested_price = int(
            clamp(round_half_up(base_rate * multiplier), lowest, highest)
        )
        min_price = int(
            clamp(round_half_up(suggested_price * PRICE_RANGE_LOWER_RATIO), lowest, highest)
        )
        max_price = int(
            clamp(round_half_up(suggested_price * PRICE_RANGE_UPPER_RATIO), lowest, highest)
        )

        return PriceSuggestion(
            date=day,
            demand_level=demand_level,
            total_demand_score=total_demand_score,
            event_count=event_count,
            multiplier=round(multiplier, MULTIPLIER_DECIMALS),
            suggested_price=suggested_price,
            min_price=min_price,
            max_price=max_price,
            base_rate=base_rate,
            is_weekend=weekend,
            holiday_bonus=holiday_bonus,
            top_events=top_events or [],
        )

    def suggest_for_demand(
        self, demand: DailyDemand, settings: HostPricingSettings | None = None
    ) -> PriceSuggestion:
        """Price suggestion for an aggregated DailyDemand record."""
        top_events = [
            EventSummary(
                title=event.title,
                event_type=event.event_type,
                demand_impact_score=event.demand_impact_score,
                source_keys=event.provenance_keys(),
            )
            for event in demand.events[:TOP_EVENTS_IN_SUGGESTION]
        ]
        return self.suggest_price(
            demand.date,
            demand.demand_level,
            settings,
            total_demand_score=demand.total_score,
            event_count=demand.event_count,
            holiday_bonus=demand.holiday_bonus,
            top_events=top_events,
        )
