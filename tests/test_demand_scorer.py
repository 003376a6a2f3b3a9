"""Tests for event demand impact scoring."""

from datetime import date, time

import pytest

from event_demand.domain.models import EventType, Venue
from event_demand.services.demand_scorer import (
    calculate_attendance_score,
    calculate_event_demand_score,
    calculate_event_type_score,
    calculate_price_score,
    calculate_proximity_score,
    calculate_timing_score,
    score_breakdown,
)
from tests.conftest import create_canonical


@pytest.mark.parametrize(
    ("attendance", "expected"),
    [
        (100, 20.0),
        (500, 30.0),
        (1_000, 40.0),
        (5_000, 60.0),
        (10_000, 80.0),
        (50_000, 85.0),
        (100_000, 100.0),
    ],
)
def test_attendance_score_breakpoints(attendance: int, expected: float) -> None:
    """Test each band boundary evaluates to its stated value."""
    assert calculate_attendance_score(attendance) == pytest.approx(expected)


@pytest.mark.parametrize(
    ("attendance", "expected"),
    [
        (None, 30.0),
        (0, 30.0),
        (-250, 30.0),
        (20, 10.0),
        (80, 16.0),
        (2_500, 47.5),
        (75_000, 92.5),
        (2_000_000, 100.0),
    ],
)
def test_attendance_score_interpolation(attendance: int | None, expected: float) -> None:
    """Test unknown, small and in-band attendance."""
    assert calculate_attendance_score(attendance) == pytest.approx(expected)


def test_attendance_score_is_monotonic() -> None:
    """Test more attendees never lowers the score."""
    samples = [100, 250, 499, 500, 999, 1_000, 4_999, 5_000, 9_999, 10_000, 49_999]
    scores = [calculate_attendance_score(n) for n in samples]

    assert scores == sorted(scores)


def test_event_type_score() -> None:
    """Test table lookup, unknown type and local rank blending."""
    assert calculate_event_type_score(EventType.FESTIVAL) == 95.0
    assert calculate_event_type_score(EventType.THEATER) == 65.0
    assert calculate_event_type_score(None) == 50.0
    assert calculate_event_type_score(EventType.CONCERT, local_rank=65) == 75.0
    assert calculate_event_type_score(EventType.CONCERT, local_rank=0) == 85.0


@pytest.mark.parametrize(
    ("distance", "expected"),
    [
        (None, 70.0),
        (0.2, 100.0),
        (0.5, 90.0),
        (1.4, 75.0),
        (2.0, 50.0),
        (7.5, 25.0),
        (10.0, 10.0),
        (25.0, 10.0),
    ],
)
def test_proximity_score(distance: float | None, expected: float) -> None:
    """Test distance bands from downtown."""
    assert calculate_proximity_score(distance) == expected


def test_timing_score() -> None:
    """Test day-of-week and hour factors."""
    saturday = date(2025, 3, 15)
    tuesday = date(2025, 3, 11)

    assert calculate_timing_score(saturday, time(20, 0)) == pytest.approx(71.875)
    assert calculate_timing_score(saturday, time(22, 59)) == pytest.approx(71.875)
    assert calculate_timing_score(saturday, time(23, 0)) == pytest.approx(62.5)
    assert calculate_timing_score(tuesday, time(17, 30)) == pytest.approx(46.75)
    assert calculate_timing_score(tuesday, time(12, 0)) == pytest.approx(44.625)
    assert calculate_timing_score(tuesday, None) == pytest.approx(42.5)
    assert calculate_timing_score(None, None) == 50.0


@pytest.mark.parametrize(
    ("min_price", "max_price", "expected"),
    [
        (None, None, 50.0),
        (0, 0, 50.0),
        (-20, -5, 50.0),
        (10, 20, 30.0),
        (40, None, 45.0),
        (None, 60, 60.0),
        (40, 120, 60.0),
        (150, 200, 75.0),
        (300, 400, 90.0),
        (450, 1_500, 100.0),
    ],
)
def test_price_score(
    min_price: float | None, max_price: float | None, expected: float
) -> None:
    """Test average price bands."""
    assert calculate_price_score(min_price, max_price) == expected


def test_score_breakdown_components() -> None:
    """Test weighted total from known components."""
    event = create_canonical(
        title="Beale Street Music Festival",
        start_date=date(2025, 5, 3),  # Saturday
        start_time=time(19, 0),
        event_type="festival",
        expected_attendance=50_000,
        ticket_price_min=60,
        ticket_price_max=120,
        venue=Venue(name="Tom Lee Park", downtown_distance_miles=0.8),
    )

    breakdown = score_breakdown(event)

    assert breakdown.attendance == pytest.approx(85.0)
    assert breakdown.event_type == 95.0
    assert breakdown.proximity == 90.0
    assert breakdown.timing == pytest.approx(71.875)
    assert breakdown.price == 60.0
    # 29.75 + 19 + 18 + 10.78125 + 6 = 83.53125
    assert breakdown.total == 84
    assert calculate_event_demand_score(event) == 84


def test_score_uses_attendance_metric_over_declared_attendance() -> None:
    """Test a source attendance estimate supersedes declared attendance."""
    declared = create_canonical(expected_attendance=500)
    enriched = create_canonical(
        expected_attendance=500, demand_metrics={"phq_attendance": 10_000}
    )

    assert score_breakdown(declared).attendance == pytest.approx(30.0)
    assert score_breakdown(enriched).attendance == pytest.approx(80.0)


def test_score_blends_local_rank_metric() -> None:
    """Test local rank is averaged into the event type component."""
    event = create_canonical(event_type="sports", demand_metrics={"local_rank": 40})

    assert score_breakdown(event).event_type == 60.0


def test_score_uses_fallback_venue_distance() -> None:
    """Test caller-provided distance applies when the venue carries none."""
    event = create_canonical(venue=Venue(name="Minglewood Hall"))

    assert score_breakdown(event, venue_distance=3.0).proximity == 50.0
    assert score_breakdown(event).proximity == 70.0


def test_score_clamps_malformed_values() -> None:
    """Test negative attendance and prices cannot push the total out of range."""
    event = create_canonical(
        expected_attendance=-5_000,
        ticket_price_min=-100,
        ticket_price_max=-50,
        demand_metrics={"local_rank": -400},
    )

    total = calculate_event_demand_score(event)

    assert 0 <= total <= 100


def test_score_stays_within_bounds_for_maximal_event() -> None:
    """Test a maximal event scores at most 100."""
    event = create_canonical(
        start_date=date(2025, 3, 15),
        start_time=time(20, 0),
        event_type="festival",
        expected_attendance=500_000,
        ticket_price_min=900,
        venue=Venue(downtown_distance_miles=0.1),
        demand_metrics={"local_rank": 100},
    )

    assert calculate_event_demand_score(event) <= 100
