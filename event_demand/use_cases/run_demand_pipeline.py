"""Demand pipeline use case.

Sources → validation → deduplication → impact scoring → per-date
aggregation → pricing.
"""

from collections.abc import Iterable, Iterator, Sequence
from contextlib import contextmanager
from datetime import date, timedelta
from time import perf_counter

from event_demand.config.logging_config import get_logger
from event_demand.config.settings import Settings, get_settings
from event_demand.domain.models import (
    CandidateEvent,
    CanonicalEvent,
    DailyDemand,
    DateRange,
    DeduplicationStats,
    HostPricingSettings,
    PipelineResult,
    PriceSuggestion,
    SourceFetchResult,
)
from event_demand.domain.protocols import (
    DailyDemandRepositoryProtocol,
    SourceAdapterProtocol,
)
from event_demand.observability.metrics import PIPELINE_STAGE_DURATION_SECONDS
from event_demand.observability.tracing import correlation_scope
from event_demand.services.daily_aggregator import calculate_demand_for_range
from event_demand.services.deduplicator import deduplicate_candidates
from event_demand.services.demand_scorer import calculate_event_demand_score
from event_demand.services.geo import with_downtown_distance
from event_demand.services.pricing_engine import PricingResolver
from event_demand.services.validators import CandidateValidator
from event_demand.use_cases.fetch_sources import fetch_all_sources

logger = get_logger(__name__)
_CANDIDATE_VALIDATOR = CandidateValidator()


@contextmanager
def _stage(name: str) -> Iterator[None]:
    started = perf_counter()
    try:
        yield
    finally:
        PIPELINE_STAGE_DURATION_SECONDS.labels(stage=name).observe(
            perf_counter() - started
        )


def resolve_date_range(
    start_date: date, end_date: date | None, settings: Settings
) -> DateRange:
    """Date range for a run; a missing end date spans the sync horizon."""
    end = end_date or start_date + timedelta(days=settings.sync_horizon_days)
    return DateRange(start=start_date, end=end)


def score_events(
    events: Iterable[CanonicalEvent], settings: Settings
) -> list[CanonicalEvent]:
    """Attach demand impact scores, deriving venue distance from coordinates.

    Args:
        events: Canonical events from deduplication
        settings: Provides the downtown reference point

    Returns:
        Scored copies of the events
    """
    scored: list[CanonicalEvent] = []
    for event in events:
        update: dict[str, object] = {}
        if event.venue is not None:
            venue = with_downtown_distance(
                event.venue, settings.downtown_latitude, settings.downtown_longitude
            )
            if venue is not event.venue:
                update["venue"] = venue

        enriched = event.model_copy(update=update) if update else event
        enriched = enriched.model_copy(
            update={"demand_impact_score": calculate_event_demand_score(enriched)}
        )
        scored.append(enriched)
    return scored


def collect_candidates(
    results: Sequence[SourceFetchResult],
) -> tuple[list[CandidateEvent], int]:
    """Validated candidates from every successful source, plus skip count."""
    candidates: list[CandidateEvent] = []
    skipped = 0
    for result in results:
        valid, source_skipped = _CANDIDATE_VALIDATOR.filter_valid(
            result.events, result.source_name
        )
        candidates.extend(valid)
        skipped += result.skipped + source_skipped
    return candidates, skipped


def build_demand_outlook(
    candidates: Sequence[CandidateEvent],
    date_range: DateRange,
    host_settings: HostPricingSettings | None = None,
    *,
    settings: Settings | None = None,
) -> tuple[
    list[CanonicalEvent], DeduplicationStats, list[DailyDemand], list[PriceSuggestion]
]:
    """Synchronous core: dedup, score, aggregate and price a candidate set.

    Args:
        candidates: Validated candidates from all sources
        date_range: Dates to aggregate and price
        host_settings: Host rate bounds (absent values use configured defaults)
        settings: Application settings (defaults to global settings)

    Returns:
        Tuple of (canonical events, dedup stats, daily demand, price suggestions)
    """
    settings = settings or get_settings()
    resolver = PricingResolver(
        default_base_rate=settings.default_base_rate,
        default_min_rate=settings.default_min_rate,
        default_max_rate=settings.default_max_rate,
    )
    resolver.resolve_settings(host_settings)

    with _stage("dedup"):
        dedup = deduplicate_candidates(candidates)

    with _stage("score"):
        canonical = score_events(dedup.events, settings)

    with _stage("aggregate"):
        daily = calculate_demand_for_range(date_range, canonical)

    with _stage("price"):
        suggestions = [
            resolver.suggest_for_demand(day, host_settings) for day in daily
        ]

    return canonical, dedup.stats, daily, suggestions


async def run_demand_pipeline(
    adapters: Sequence[SourceAdapterProtocol],
    start_date: date,
    end_date: date | None = None,
    host_settings: HostPricingSettings | None = None,
    *,
    settings: Settings | None = None,
    repository: DailyDemandRepositoryProtocol | None = None,
    correlation_id: str | None = None,
) -> PipelineResult:
    """Run the full demand pipeline for a date range.

    1. Fetch every enabled source concurrently (failures isolated)
    2. Skip malformed candidates individually
    3. Deduplicate into canonical events
    4. Score each canonical event
    5. Aggregate demand per date, including dates without events
    6. Resolve a price suggestion per date
    7. Upsert daily demand when a repository is given

    Args:
        adapters: Source adapters
        start_date: First date of the range
        end_date: Last date (defaults to start + sync horizon)
        host_settings: Host rate bounds
        settings: Application settings (defaults to global settings)
        repository: Optional daily demand sink
        correlation_id: Existing run identifier to reuse

    Returns:
        PipelineResult with events, demand, prices and per-source reports

    Raises:
        ValidationError: If host settings are inconsistent (min above max)

    Example:
        >>> result = asyncio.run(run_demand_pipeline(adapters, date(2025, 3, 1)))
        >>> result.failed_sources
        ['seatgeek']
    """
    settings = settings or get_settings()
    date_range = resolve_date_range(start_date, end_date, settings)
    enabled = [a for a in adapters if settings.is_source_enabled(a.source_name)]

    with correlation_scope(correlation_id) as bound_correlation_id:
        logger.info(
            "demand_pipeline_started",
            sources=[adapter.source_name for adapter in enabled],
            start_date=date_range.start.isoformat(),
            end_date=date_range.end.isoformat(),
        )

        with _stage("fetch"):
            results = await fetch_all_sources(
                enabled, date_range, timeout_seconds=settings.source_timeout_seconds
            )

        candidates, skipped = collect_candidates(results)

        canonical, stats, daily, suggestions = build_demand_outlook(
            candidates, date_range, host_settings, settings=settings
        )

        if repository is not None:
            with _stage("persist"):
                for demand in daily:
                    repository.upsert_daily_demand(demand)

        result = PipelineResult(
            correlation_id=bound_correlation_id,
            date_range=date_range,
            sources=results,
            skipped_candidates=skipped,
            dedup_stats=stats,
            canonical_events=canonical,
            daily_demand=daily,
            price_suggestions=suggestions,
        )

        logger.info(
            "demand_pipeline_finished",
            total_fetched=sum(r.fetched for r in results),
            failed_sources=result.failed_sources,
            skipped_candidates=skipped,
            unique_events=stats.unique,
            duplicates_removed=stats.duplicates,
            days=len(daily),
        )
        return result
