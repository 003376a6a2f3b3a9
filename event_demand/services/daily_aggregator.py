"""Daily demand aggregation.

Combines the events of one date into a single demand score:
- Events sorted by impact, highest first
- Diminishing returns: 1st x1.0, 2nd x0.7, 3rd x0.5, 4th and later x0.3
- Cancelled events are left out
- Calendar bonus added on top
- Total is NOT clamped; several big events can push it past 100
"""

from collections import defaultdict
from collections.abc import Iterable, Sequence
from datetime import date

from event_demand.domain.models import (
    CanonicalEvent,
    DailyDemand,
    DateRange,
    DemandLevel,
    EventStatus,
)
from event_demand.domain.scoring_constants import (
    DEMAND_LEVEL_THRESHOLDS,
    DIMINISHING_RETURN_FACTORS,
    TOP_DEMAND_LEVEL,
)
from event_demand.services.calendar import get_holiday_bonus
from event_demand.services.demand_scorer import calculate_event_demand_score
from event_demand.services.numeric import round_half_up


def get_demand_level(score: float) -> DemandLevel:
    """Map an adjusted demand score to a demand level.

    Example:
        >>> get_demand_level(181)
        <DemandLevel.EXTREME: 'extreme'>
    """
    for upper, level in DEMAND_LEVEL_THRESHOLDS:
        if score < upper:
            return level
    return TOP_DEMAND_LEVEL


def diminishing_factor(position: int) -> float:
    """Weight for the event at ``position`` (0-based) in impact order."""
    return DIMINISHING_RETURN_FACTORS[min(position, len(DIMINISHING_RETURN_FACTORS) - 1)]


def active_events(events: Iterable[CanonicalEvent]) -> list[CanonicalEvent]:
    """Events still scheduled to happen."""
    return [event for event in events if event.status is EventStatus.ACTIVE]


def with_impact_scores(events: Iterable[CanonicalEvent]) -> list[CanonicalEvent]:
    """Events with ``demand_impact_score`` filled, highest impact first."""
    scored = [
        event
        if event.demand_impact_score is not None
        else event.model_copy(
            update={"demand_impact_score": calculate_event_demand_score(event)}
        )
        for event in events
    ]
    return sorted(scored, key=lambda event: event.demand_impact_score or 0, reverse=True)


def weighted_event_score(events: Sequence[CanonicalEvent]) -> int:
    """Diminishing-returns sum of impact scores, rounded, unclamped.

    Args:
        events: Events sorted by descending impact, scores filled

    Returns:
        Weighted sum

    Example:
        >>> weighted_event_score(events_scored_95_80_60)
        181
    """
    total = sum(
        (event.demand_impact_score or 0) * diminishing_factor(position)
        for position, event in enumerate(events)
    )
    return round_half_up(total)


def calculate_daily_demand(day: date, events: Iterable[CanonicalEvent]) -> DailyDemand:
    """Aggregate the events of one date into a DailyDemand record.

    A date without events still receives its calendar bonus, so its level is
    derived from the bonus alone.

    Args:
        day: Date being aggregated
        events: Canonical events on that date (scores computed when absent,
            cancelled events ignored)

    Returns:
        DailyDemand with adjusted total score and demand level

    Example:
        >>> demand = calculate_daily_demand(date(2025, 12, 31), [])
        >>> (demand.total_score, demand.demand_level.value)
        (60, 'high')
    """
    ordered = with_impact_scores(active_events(events))
    event_score = weighted_event_score(ordered)
    holiday_bonus = get_holiday_bonus(day)
    total_score = event_score + holiday_bonus

    return DailyDemand(
        date=day,
        event_score=event_score,
        holiday_bonus=holiday_bonus,
        total_score=total_score,
        event_count=len(ordered),
        demand_level=get_demand_level(total_score),
        events=ordered,
    )


def group_events_by_date(
    events: Iterable[CanonicalEvent],
) -> dict[date, list[CanonicalEvent]]:
    """Group active events by start date; undated events are left out."""
    grouped: dict[date, list[CanonicalEvent]] = defaultdict(list)
    for event in active_events(events):
        if event.start_date is not None:
            grouped[event.start_date].append(event)
    return dict(grouped)


def calculate_demand_for_range(
    date_range: DateRange, events: Iterable[CanonicalEvent]
) -> list[DailyDemand]:
    """One DailyDemand per date in the range, in date order.

    Example:
        >>> days = calculate_demand_for_range(DateRange(start=d1, end=d7), events)
        >>> len(days)
        7
    """
    grouped = group_events_by_date(events)
    return [
        calculate_daily_demand(day, grouped.get(day, [])) for day in date_range.days()
    ]
