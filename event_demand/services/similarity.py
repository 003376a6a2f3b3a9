"""Weighted similarity between two candidate listings.

Similarity = 0.40 * title + 0.25 * date + 0.25 * venue + 0.10 * type,
each component in 0.0-1.0.
"""

from datetime import date

from rapidfuzz.distance import Levenshtein

from event_demand.domain.deduplication_constants import (
    ADJACENT_EVENT_TYPES,
    DATE_ONE_DAY_SCORE,
    DATE_SAME_DAY_SCORE,
    DATE_WINDOW_DAYS,
    DATE_WITHIN_WINDOW_SCORE,
    SIMILARITY_WEIGHTS,
    TYPE_ADJACENT_SCORE,
    TYPE_MATCH_SCORE,
    TYPE_MISMATCH_SCORE,
    TYPE_UNKNOWN_SCORE,
    VENUE_CLOSE_DEGREES,
    VENUE_CLOSE_SCORE,
    VENUE_FAR_SCORE,
    VENUE_NEAR_DEGREES,
    VENUE_NEAR_SCORE,
    VENUE_UNKNOWN_SCORE,
)
from event_demand.domain.models import CandidateEvent, EventType, Venue
from event_demand.services.text_normalizer import normalize_title


def text_similarity(text1: str | None, text2: str | None) -> float:
    """Normalized Levenshtein similarity of two strings.

    Both inputs are normalized first. Identical normalized strings score 1.0
    (two empty strings included); otherwise an empty side scores 0.0.

    Args:
        text1: First text
        text2: Second text

    Returns:
        1 - distance / max(len) in 0.0-1.0

    Example:
        >>> text_similarity("Grizzlies vs Lakers", "grizzlies vs. lakers")
        1.0
    """
    norm1 = normalize_title(text1)
    norm2 = normalize_title(text2)

    if norm1 == norm2:
        return 1.0
    if not norm1 or not norm2:
        return 0.0

    max_len = max(len(norm1), len(norm2))
    distance = Levenshtein.distance(norm1, norm2)
    return 1.0 - distance / max_len


def title_similarity(event1: CandidateEvent, event2: CandidateEvent) -> float:
    """Title component of the similarity score."""
    return text_similarity(event1.title, event2.title)


def date_similarity(date1: date | None, date2: date | None) -> float:
    """Date component: 1.0 same day, 0.8 one day apart, 0.5 within 3 days.

    Example:
        >>> date_similarity(date(2025, 3, 10), date(2025, 3, 11))
        0.8
    """
    if date1 is None or date2 is None:
        return 0.0

    diff_days = abs((date1 - date2).days)
    if diff_days == 0:
        return DATE_SAME_DAY_SCORE
    if diff_days == 1:
        return DATE_ONE_DAY_SCORE
    if diff_days <= DATE_WINDOW_DAYS:
        return DATE_WITHIN_WINDOW_SCORE
    return 0.0


def venue_similarity(venue1: Venue | None, venue2: Venue | None) -> float:
    """Venue component: coordinate buckets, then name similarity, else neutral.

    Example:
        >>> near = Venue(latitude=35.138, longitude=-90.0505)
        >>> venue_similarity(near, Venue(latitude=35.141, longitude=-90.052))
        1.0
    """
    if venue1 is None or venue2 is None:
        return VENUE_UNKNOWN_SCORE

    if venue1.has_coordinates and venue2.has_coordinates:
        lat_diff = abs(venue1.latitude - venue2.latitude)  # type: ignore[operator]
        lng_diff = abs(venue1.longitude - venue2.longitude)  # type: ignore[operator]

        if lat_diff < VENUE_NEAR_DEGREES and lng_diff < VENUE_NEAR_DEGREES:
            return VENUE_NEAR_SCORE
        if lat_diff < VENUE_CLOSE_DEGREES and lng_diff < VENUE_CLOSE_DEGREES:
            return VENUE_CLOSE_SCORE
        return VENUE_FAR_SCORE

    if venue1.name and venue2.name:
        return text_similarity(venue1.name, venue2.name)

    return VENUE_UNKNOWN_SCORE


def type_similarity(type1: EventType | None, type2: EventType | None) -> float:
    """Type component: exact 1.0, adjacent pair 0.7, other 0.3, unknown 0.5."""
    if type1 is None or type2 is None:
        return TYPE_UNKNOWN_SCORE
    if type1 == type2:
        return TYPE_MATCH_SCORE
    if frozenset({type1, type2}) in ADJACENT_EVENT_TYPES:
        return TYPE_ADJACENT_SCORE
    return TYPE_MISMATCH_SCORE


def similarity_components(
    event1: CandidateEvent, event2: CandidateEvent
) -> dict[str, float]:
    """Individual similarity components keyed like SIMILARITY_WEIGHTS."""
    return {
        "title": title_similarity(event1, event2),
        "date": date_similarity(event1.start_date, event2.start_date),
        "venue": venue_similarity(event1.venue, event2.venue),
        "type": type_similarity(event1.event_type, event2.event_type),
    }


def calculate_similarity(event1: CandidateEvent, event2: CandidateEvent) -> float:
    """Weighted similarity of two candidates.

    Args:
        event1: First candidate
        event2: Second candidate

    Returns:
        Similarity in 0.0-1.0

    Example:
        >>> calculate_similarity(candidate, candidate.model_copy())
        1.0
    """
    components = similarity_components(event1, event2)
    total = sum(
        components[name] * weight for name, weight in SIMILARITY_WEIGHTS.items()
    )
    return max(0.0, min(1.0, total))
