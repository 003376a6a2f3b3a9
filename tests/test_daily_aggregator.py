"""Tests for daily demand aggregation."""

from datetime import date

import pytest

from event_demand.domain.models import DateRange, DemandLevel
from event_demand.services.daily_aggregator import (
    calculate_daily_demand,
    calculate_demand_for_range,
    diminishing_factor,
    get_demand_level,
    group_events_by_date,
    weighted_event_score,
    with_impact_scores,
)
from tests.conftest import create_canonical

WEDNESDAY = date(2025, 3, 12)


@pytest.mark.parametrize(
    ("score", "expected"),
    [
        (0, DemandLevel.LOW),
        (29, DemandLevel.LOW),
        (30, DemandLevel.MODERATE),
        (59, DemandLevel.MODERATE),
        (60, DemandLevel.HIGH),
        (99, DemandLevel.HIGH),
        (100, DemandLevel.VERY_HIGH),
        (149, DemandLevel.VERY_HIGH),
        (150, DemandLevel.EXTREME),
        (400, DemandLevel.EXTREME),
    ],
)
def test_get_demand_level(score: int, expected: DemandLevel) -> None:
    """Test level thresholds are inclusive at the lower bound."""
    assert get_demand_level(score) is expected


def test_diminishing_factor() -> None:
    """Test positional weights with the tail factor repeating."""
    assert [diminishing_factor(i) for i in range(6)] == [1.0, 0.7, 0.5, 0.3, 0.3, 0.3]


def test_three_events_diminishing_returns() -> None:
    """Test impacts 95, 80, 60 aggregate to 181 and extreme demand."""
    events = [
        create_canonical(title="Hamilton", start_date=WEDNESDAY, demand_impact_score=60),
        create_canonical(title="Grizzlies", start_date=WEDNESDAY, demand_impact_score=95),
        create_canonical(title="Jazz", start_date=WEDNESDAY, demand_impact_score=80),
    ]

    demand = calculate_daily_demand(WEDNESDAY, events)

    assert demand.event_score == 181
    assert demand.holiday_bonus == 0
    assert demand.total_score == 181
    assert demand.event_count == 3
    assert demand.demand_level is DemandLevel.EXTREME
    assert [e.demand_impact_score for e in demand.events] == [95, 80, 60]


def test_many_events_use_tail_factor() -> None:
    """Test events past the fourth all weigh 0.3."""
    events = [
        create_canonical(title=f"Show {i}", start_date=WEDNESDAY, demand_impact_score=50)
        for i in range(5)
    ]

    # 50 + 35 + 25 + 15 + 15
    assert calculate_daily_demand(WEDNESDAY, events).total_score == 140


def test_weighted_event_score_rounds_half_up() -> None:
    """Test fractional weighted sums round half up."""
    events = [create_canonical(demand_impact_score=5), create_canonical(demand_impact_score=5)]

    # 5 + 3.5 = 8.5
    assert weighted_event_score(events) == 9


def test_zero_events_takes_bonus_only() -> None:
    """Test an empty date scores its calendar bonus alone."""
    demand = calculate_daily_demand(date(2025, 12, 31), [])

    assert demand.event_score == 0
    assert demand.holiday_bonus == 60
    assert demand.total_score == 60
    assert demand.event_count == 0
    assert demand.demand_level is DemandLevel.HIGH
    assert demand.events == []


def test_zero_events_without_bonus() -> None:
    """Test an empty ordinary date is low demand."""
    demand = calculate_daily_demand(WEDNESDAY, [])

    assert demand.total_score == 0
    assert demand.demand_level is DemandLevel.LOW


def test_bonus_added_to_event_score() -> None:
    """Test the calendar bonus stacks on top of events."""
    events = [create_canonical(start_date=date(2025, 7, 4), demand_impact_score=70)]

    demand = calculate_daily_demand(date(2025, 7, 4), events)

    assert demand.event_score == 70
    assert demand.total_score == 110
    assert demand.demand_level is DemandLevel.VERY_HIGH


def test_with_impact_scores_fills_missing_scores() -> None:
    """Test unscored events are scored without mutating the input."""
    unscored = create_canonical(event_type="festival", expected_attendance=20_000)

    scored = with_impact_scores([unscored])

    assert unscored.demand_impact_score is None
    assert scored[0].demand_impact_score is not None
    assert 0 <= scored[0].demand_impact_score <= 100


def test_group_events_by_date_drops_undated() -> None:
    """Test events are grouped by start date and undated ones left out."""
    first = create_canonical(title="A", start_date=WEDNESDAY)
    second = create_canonical(title="B", start_date=WEDNESDAY)
    undated = create_canonical(title="C", start_date=None)

    grouped = group_events_by_date([first, second, undated])

    assert grouped == {WEDNESDAY: [first, second]}


def test_calculate_demand_for_range_covers_every_date(march_week: DateRange) -> None:
    """Test one record per date, including dates without events."""
    events = [
        create_canonical(start_date=WEDNESDAY, demand_impact_score=90),
        create_canonical(title="Outside", start_date=date(2025, 4, 1), demand_impact_score=90),
    ]

    days = calculate_demand_for_range(march_week, events)

    assert [d.date for d in days] == list(march_week.days())
    assert len(days) == 7
    assert sum(d.event_count for d in days) == 1
    assert days[2].total_score == 90
    assert all(d.total_score == 0 for d in days if d.date != WEDNESDAY)


def test_cancelled_events_add_no_demand(march_week: DateRange) -> None:
    """Test cancelled events are ignored by daily and range aggregation."""
    cancelled = create_canonical(
        start_date=WEDNESDAY, demand_impact_score=90, status="cancelled"
    )

    demand = calculate_daily_demand(WEDNESDAY, [cancelled])
    days = calculate_demand_for_range(march_week, [cancelled])

    assert demand.event_count == 0
    assert demand.total_score == 0
    assert demand.demand_level == DemandLevel.LOW
    assert sum(d.event_count for d in days) == 0
    assert group_events_by_date([cancelled]) == {}


def test_cancelled_listing_does_not_hide_active_one() -> None:
    """Test only the active events of a date are counted."""
    active = create_canonical(title="Jazz", start_date=WEDNESDAY, demand_impact_score=60)
    cancelled = create_canonical(
        title="Blues", start_date=WEDNESDAY, demand_impact_score=95, status="cancelled"
    )

    demand = calculate_daily_demand(WEDNESDAY, [cancelled, active])

    assert demand.event_count == 1
    assert demand.total_score == 60
    assert [e.title for e in demand.events] == ["Jazz"]
