"""Blocking index for candidate deduplication.

Candidates are bucketed by ``<start date>:<first 10 normalized title chars>``
so that similarity is only computed inside small buckets. Every dated
candidate is also registered in the buckets of the previous and next day.
"""

from collections.abc import Sequence
from datetime import date, timedelta

from event_demand.domain.deduplication_constants import (
    ADJACENT_BLOCK_DAYS,
    BLOCKING_TITLE_PREFIX_LENGTH,
    NO_DATE_BLOCK_KEY,
)
from event_demand.domain.models import CandidateEvent
from event_demand.services.text_normalizer import normalize_title, title_prefix


def _candidate_prefix(event: CandidateEvent) -> str:
    normalized = event.normalized_title or normalize_title(event.title)
    return title_prefix(normalized, BLOCKING_TITLE_PREFIX_LENGTH)


def make_blocking_key(day: date | None, prefix: str) -> str:
    """Build a blocking key from a date and a title prefix.

    Example:
        >>> make_blocking_key(date(2025, 3, 10), "grizzlies ")
        '2025-03-10:grizzlies '
    """
    date_key = day.isoformat() if day is not None else NO_DATE_BLOCK_KEY
    return f"{date_key}:{prefix}"


def create_blocking_key(event: CandidateEvent) -> str:
    """Primary blocking key of a candidate."""
    return make_blocking_key(event.start_date, _candidate_prefix(event))


def blocking_keys(event: CandidateEvent) -> list[str]:
    """All keys a candidate is registered under, primary key first.

    Example:
        >>> jazz = CandidateEvent(source_name="x", title="Jazz", start_date=jan_2)
        >>> blocking_keys(jazz)
        ['2025-01-02:jazz', '2025-01-01:jazz', '2025-01-03:jazz']
    """
    keys = [create_blocking_key(event)]
    if event.start_date is None:
        return keys

    prefix = _candidate_prefix(event)
    for offset in ADJACENT_BLOCK_DAYS:
        keys.append(make_blocking_key(event.start_date + timedelta(days=offset), prefix))
    return keys


def block_events(events: Sequence[CandidateEvent]) -> dict[str, list[CandidateEvent]]:
    """Group candidates into comparison blocks.

    Blocks keep first-registration order, and members keep input order. A
    candidate is never listed twice in the same block.

    Args:
        events: Candidates to index

    Returns:
        Mapping of blocking key to the candidates registered under it
    """
    blocks: dict[str, list[CandidateEvent]] = {}

    for event in events:
        for key in blocking_keys(event):
            members = blocks.setdefault(key, [])
            if not any(member is event for member in members):
                members.append(event)

    return blocks
