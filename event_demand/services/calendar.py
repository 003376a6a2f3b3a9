"""Calendar rules: weekend detection and holiday/festival demand bonuses."""

from datetime import date

from event_demand.domain.scoring_constants import (
    FESTIVAL_WINDOWS,
    HOLIDAY_BONUSES,
    WEEKEND_DAYS,
)


def is_weekend(day: date) -> bool:
    """Check if a date is a Friday, Saturday or Sunday night."""
    return day.weekday() in WEEKEND_DAYS


def get_holiday_bonus(day: date) -> int:
    """Calendar demand bonus for a date, independent of listed events.

    Fixed-date holidays are checked first; otherwise the first matching
    recurring festival window applies. At most one bonus per date.

    Args:
        day: Date to check

    Returns:
        Bonus points added to the day's demand score (0 when none applies)

    Example:
        >>> get_holiday_bonus(date(2025, 12, 31))
        60
        >>> get_holiday_bonus(date(2025, 5, 2))  # Friday of festival weekend
        70
        >>> get_holiday_bonus(date(2025, 5, 6))  # Tuesday
        0
    """
    holiday_bonus = HOLIDAY_BONUSES.get((day.month, day.day))
    if holiday_bonus is not None:
        return holiday_bonus

    for month, first_day, last_day, weekend_only, bonus in FESTIVAL_WINDOWS:
        if day.month != month or not first_day <= day.day <= last_day:
            continue
        if weekend_only and not is_weekend(day):
            continue
        return bonus

    return 0
