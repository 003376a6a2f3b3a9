"""Demand impact scoring for canonical events.

Impact (0-100) = 0.35 * attendance + 0.20 * event type + 0.20 * proximity
               + 0.15 * timing + 0.10 * price

Each component is a 0-100 score clamped before weighting, so malformed
upstream values (negative attendance, prices) cannot push the total out of
range.
"""

from datetime import date, time

from event_demand.domain.models import CandidateEvent, DemandScoreBreakdown, EventType
from event_demand.domain.scoring_constants import (
    ATTENDANCE_BANDS,
    ATTENDANCE_METRIC_KEY,
    DAY_OF_WEEK_FACTORS,
    DEFAULT_ATTENDANCE_SCORE,
    DEFAULT_PRICE_SCORE,
    DEFAULT_PROXIMITY_SCORE,
    DEMAND_COMPONENT_WEIGHTS,
    EVENT_TYPE_SCORES,
    FAR_PROXIMITY_SCORE,
    LOCAL_RANK_METRIC_KEY,
    MAX_ATTENDANCE_SCORE,
    MAX_IMPACT_SCORE,
    MIN_IMPACT_SCORE,
    PREMIUM_PRICE_SCORE,
    PRICE_BANDS,
    PROXIMITY_BANDS,
    SMALL_EVENT_DIVISOR,
    SMALL_EVENT_LIMIT,
    SMALL_EVENT_MIN_SCORE,
    TIME_OF_DAY_FACTORS,
    TIMING_BASE_SCORE,
)
from event_demand.services.numeric import clamp, round_half_up


def _bounded(score: float) -> float:
    return clamp(score, MIN_IMPACT_SCORE, MAX_IMPACT_SCORE)


def calculate_attendance_score(attendance: float | None) -> float:
    """Piecewise attendance score.

    100 people = 20, 1,000 = 40, 10,000 = 80, 50,000 = 85, 100,000+ = 100.
    Unknown or non-positive attendance scores 30.

    Example:
        >>> calculate_attendance_score(5_000)
        60.0
    """
    if not attendance or attendance <= 0:
        return DEFAULT_ATTENDANCE_SCORE

    if attendance < SMALL_EVENT_LIMIT:
        return max(SMALL_EVENT_MIN_SCORE, attendance / SMALL_EVENT_DIVISOR)

    for lower, upper, base_score, slope in ATTENDANCE_BANDS:
        if lower <= attendance < upper:
            return _bounded(base_score + (attendance - lower) * slope)

    return MAX_ATTENDANCE_SCORE


def calculate_event_type_score(
    event_type: EventType | None, local_rank: float | None = None
) -> float:
    """Base type score, averaged with the source's local rank when present.

    Example:
        >>> calculate_event_type_score(EventType.CONCERT, local_rank=65)
        75.0
    """
    score = EVENT_TYPE_SCORES.get(
        event_type or EventType.OTHER, EVENT_TYPE_SCORES[EventType.OTHER]
    )
    if local_rank:
        score = (score + _bounded(local_rank)) / 2
    return score


def calculate_proximity_score(distance_miles: float | None) -> float:
    """Score by distance from downtown (closer is better, unknown = 70).

    Example:
        >>> calculate_proximity_score(1.4)
        75.0
    """
    if distance_miles is None:
        return DEFAULT_PROXIMITY_SCORE

    for upper, score in PROXIMITY_BANDS:
        if distance_miles < upper:
            return score

    return FAR_PROXIMITY_SCORE


def _time_of_day_factor(start_time: time) -> float:
    for first_hour, last_hour, factor in TIME_OF_DAY_FACTORS:
        if first_hour <= start_time.hour <= last_hour:
            return factor
    return 1.0


def calculate_timing_score(start_date: date | None, start_time: time | None) -> float:
    """Timing score from day of week and start hour.

    Base 50, times the day-of-week factor, times the time-of-day factor
    when the start time is known, capped at 100.

    Example:
        >>> calculate_timing_score(date(2025, 3, 15), time(20, 0))  # Saturday evening
        71.875
    """
    score = TIMING_BASE_SCORE

    if start_date is not None:
        score *= DAY_OF_WEEK_FACTORS[start_date.weekday()]

    if start_time is not None:
        score *= _time_of_day_factor(start_time)

    return _bounded(score)


def calculate_price_score(min_price: float | None, max_price: float | None) -> float:
    """Score by average ticket price; pricier events signal higher value.

    Example:
        >>> calculate_price_score(40, 120)
        60.0
    """
    prices = [price for price in (min_price, max_price) if price is not None]
    if not prices:
        return DEFAULT_PRICE_SCORE

    average = sum(prices) / len(prices)
    if average <= 0:
        return DEFAULT_PRICE_SCORE

    for upper, score in PRICE_BANDS:
        if average < upper:
            return score

    return PREMIUM_PRICE_SCORE


def score_breakdown(
    event: CandidateEvent, venue_distance: float | None = None
) -> DemandScoreBreakdown:
    """Per-component demand scores and weighted total for one event.

    Args:
        event: Event to score
        venue_distance: Fallback distance from downtown when the venue has none

    Returns:
        DemandScoreBreakdown with every component and the final 0-100 score
    """
    metrics = event.demand_metrics or {}

    attendance = event.expected_attendance
    metric_attendance = metrics.get(ATTENDANCE_METRIC_KEY)
    if metric_attendance:
        attendance = metric_attendance

    distance = (
        event.venue.downtown_distance_miles
        if event.venue is not None and event.venue.downtown_distance_miles is not None
        else venue_distance
    )

    components = {
        "attendance": _bounded(calculate_attendance_score(attendance)),
        "event_type": _bounded(
            calculate_event_type_score(
                event.event_type, metrics.get(LOCAL_RANK_METRIC_KEY)
            )
        ),
        "proximity": _bounded(calculate_proximity_score(distance)),
        "timing": calculate_timing_score(event.start_date, event.start_time),
        "price": _bounded(
            calculate_price_score(event.ticket_price_min, event.ticket_price_max)
        ),
    }

    weighted = sum(
        components[name] * weight for name, weight in DEMAND_COMPONENT_WEIGHTS.items()
    )

    return DemandScoreBreakdown(
        **components,
        total=round_half_up(_bounded(weighted)),
    )


def calculate_event_demand_score(
    event: CandidateEvent, venue_distance: float | None = None
) -> int:
    """Demand impact score (0-100) for one event.

    Example:
        >>> calculate_event_demand_score(festival)
        82
    """
    return score_breakdown(event, venue_distance=venue_distance).total
