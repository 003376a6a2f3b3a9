"""Cross-source event deduplication service.

Rules:
1. Candidates are compared only inside blocking buckets (see blocking.py)
2. Greedy clustering per block: the first unprocessed candidate seeds a
   cluster, later unprocessed candidates with similarity >= threshold join it
3. A candidate is resolved once globally, tracked by identity key
4. Each cluster collapses into one CanonicalEvent by source priority

Identity:
- ``sourceName:sourceEventId`` when the source supplies an id
- otherwise the full serialized record, so two id-less listings with
  byte-identical fields share one identity and collapse before similarity
  is evaluated
"""

from collections.abc import Iterable, Sequence
from typing import Any

from event_demand.config.logging_config import get_logger
from event_demand.domain.deduplication_constants import (
    DEFAULT_MERGE_THRESHOLD,
    MERGE_FILL_FIELDS,
    MERGE_MAX_FIELDS,
    MERGE_OVERWRITE_MAP_FIELDS,
    SOURCE_PRIORITY,
    UNKNOWN_SOURCE_PRIORITY,
)
from event_demand.domain.models import (
    CandidateEvent,
    CanonicalEvent,
    DeduplicationResult,
    DeduplicationStats,
)
from event_demand.services.blocking import block_events
from event_demand.services.similarity import calculate_similarity

logger = get_logger(__name__)

_CANDIDATE_FIELDS: tuple[str, ...] = tuple(CandidateEvent.model_fields)


def candidate_identity_key(event: CandidateEvent) -> str:
    """Global identity of a candidate for the processed index.

    Args:
        event: Candidate to identify

    Returns:
        ``sourceName:sourceEventId``, or the serialized record without an id

    Example:
        >>> listing = CandidateEvent(source_name="seatgeek", source_event_id="42")
        >>> candidate_identity_key(listing)
        'seatgeek:42'
    """
    if event.source_key:
        return event.source_key
    return event.model_dump_json()


def source_priority(event: CandidateEvent) -> int:
    """Merge priority of a candidate's source (unknown sources rank 0)."""
    return SOURCE_PRIORITY.get(event.source_name, UNKNOWN_SOURCE_PRIORITY)


def cluster_block(
    block: Sequence[CandidateEvent],
    processed: dict[str, bool],
    threshold: float = DEFAULT_MERGE_THRESHOLD,
) -> list[list[CandidateEvent]]:
    """Greedily cluster the candidates of one block.

    Args:
        block: Candidates sharing a blocking key, in registration order
        processed: Global identity index; updated in place
        threshold: Minimum similarity to join a cluster

    Returns:
        Clusters seeded in this block (candidates processed elsewhere skipped)
    """
    clusters: list[list[CandidateEvent]] = []

    for i, seed in enumerate(block):
        seed_key = candidate_identity_key(seed)
        if processed.get(seed_key):
            continue

        cluster = [seed]
        processed[seed_key] = True

        for other in block[i + 1 :]:
            other_key = candidate_identity_key(other)
            if processed.get(other_key):
                continue

            if calculate_similarity(seed, other) >= threshold:
                cluster.append(other)
                processed[other_key] = True

        clusters.append(cluster)

    return clusters


def find_clusters(
    events: Sequence[CandidateEvent],
    threshold: float = DEFAULT_MERGE_THRESHOLD,
    processed: dict[str, bool] | None = None,
) -> list[list[CandidateEvent]]:
    """Partition candidates into duplicate clusters.

    Args:
        events: Candidates from all sources
        threshold: Minimum similarity to merge
        processed: Optional identity index shared with the caller

    Returns:
        Clusters covering every input identity exactly once
    """
    index: dict[str, bool] = processed if processed is not None else {}
    clusters: list[list[CandidateEvent]] = []

    for block in block_events(events).values():
        clusters.extend(cluster_block(block, index, threshold))

    return clusters


def _is_absent(value: Any) -> bool:
    return value is None or value == "" or value == 0


def _provenance(member: CandidateEvent) -> list[CandidateEvent]:
    if isinstance(member, CanonicalEvent) and member.sources:
        return list(member.sources)
    return [member]


def coalesce_fields(members: Sequence[CandidateEvent]) -> dict[str, Any]:
    """Ordered coalesce over a priority-sorted cluster.

    Strategy:
    - Base: first member's fields
    - Fill: MERGE_FILL_FIELDS only while the base still lacks them
    - Max: MERGE_MAX_FIELDS take the largest observed value
    - Overwrite: MERGE_OVERWRITE_MAP_FIELDS merge key-by-key, later members
      winning on key collision

    Args:
        members: Cluster members, highest priority first

    Returns:
        Field values for the canonical record
    """
    base = members[0]
    fields: dict[str, Any] = {name: getattr(base, name) for name in _CANDIDATE_FIELDS}
    for name in MERGE_OVERWRITE_MAP_FIELDS:
        fields[name] = dict(fields[name] or {})

    for member in members[1:]:
        for name in MERGE_FILL_FIELDS:
            value = getattr(member, name)
            if _is_absent(fields[name]) and not _is_absent(value):
                fields[name] = value

        for name in MERGE_MAX_FIELDS:
            value = getattr(member, name)
            if value is not None and value > (fields[name] or 0):
                fields[name] = value

        for name in MERGE_OVERWRITE_MAP_FIELDS:
            value = getattr(member, name)
            if value:
                fields[name].update(value)

    return fields


def merge_cluster(cluster: Sequence[CandidateEvent]) -> CanonicalEvent:
    """Collapse a cluster into one canonical event.

    Members are stable-sorted by source priority, so among equal priorities
    the first member in input order becomes the base record.

    Args:
        cluster: Non-empty list of duplicate candidates

    Returns:
        Canonical event with every contributing candidate in ``sources``

    Raises:
        ValueError: If the cluster is empty

    Example:
        >>> merged = merge_cluster([seatgeek_listing, ticketmaster_listing])
        >>> merged.source_name
        'ticketmaster'
        >>> len(merged.sources)
        2
    """
    if not cluster:
        raise ValueError("Cannot merge an empty cluster")

    ordered = sorted(cluster, key=source_priority, reverse=True)
    fields = coalesce_fields(ordered)

    sources: list[CandidateEvent] = []
    for member in cluster:
        sources.extend(_provenance(member))

    return CanonicalEvent(**fields, sources=sources)


def deduplicate_candidates(
    events: Iterable[CandidateEvent],
    threshold: float = DEFAULT_MERGE_THRESHOLD,
) -> DeduplicationResult:
    """Deduplicate candidates from multiple sources in memory.

    Args:
        events: Candidates (or canonical events from an earlier run)
        threshold: Minimum similarity to merge

    Returns:
        DeduplicationResult with canonical events and counts

    Example:
        >>> result = deduplicate_candidates(candidates)
        >>> result.stats.duplicates
        3
    """
    candidates = list(events)
    if not candidates:
        return DeduplicationResult(
            events=[], stats=DeduplicationStats(total=0, unique=0, duplicates=0)
        )

    clusters = find_clusters(candidates, threshold=threshold)
    canonical = [merge_cluster(cluster) for cluster in clusters]

    stats = DeduplicationStats(
        total=len(candidates),
        unique=len(canonical),
        duplicates=len(candidates) - len(canonical),
    )

    logger.debug(
        "deduplication_clusters_resolved",
        total=stats.total,
        unique=stats.unique,
        duplicates=stats.duplicates,
        merged_clusters=sum(1 for cluster in clusters if len(cluster) > 1),
    )

    return DeduplicationResult(events=canonical, stats=stats)
