"""Fetch candidate events from every source concurrently.

One task per source. Each task captures its own failure or timeout into a
SourceFetchResult, so a failing source contributes zero candidates and never
aborts its siblings. Records that do not parse into candidates are dropped
one at a time and counted on the result. The gather completes once every
source has settled.
"""

import asyncio
from collections.abc import Sequence
from time import perf_counter

from event_demand.config.logging_config import get_logger
from event_demand.domain.exceptions import SourceTimeoutError
from event_demand.domain.models import DateRange, Pagination, SourceFetchResult
from event_demand.domain.protocols import SourceAdapterProtocol
from event_demand.observability.metrics import (
    SOURCE_CANDIDATES_TOTAL,
    SOURCE_FETCH_DURATION_SECONDS,
    SOURCE_FETCH_TOTAL,
)
from event_demand.services.validators import CandidateValidator

logger = get_logger(__name__)

_CANDIDATE_VALIDATOR = CandidateValidator()


async def fetch_from_source(
    adapter: SourceAdapterProtocol,
    date_range: DateRange,
    *,
    timeout_seconds: float | None = None,
    pagination: Pagination | None = None,
) -> SourceFetchResult:
    """Fetch one source, capturing any failure instead of raising.

    Args:
        adapter: Source adapter
        date_range: Inclusive range of event start dates
        timeout_seconds: Abort the fetch after this many seconds (None = no limit)
        pagination: Optional window forwarded to the adapter

    Returns:
        SourceFetchResult with candidates, or with ``error`` set on failure
    """
    source_name = adapter.source_name
    started = perf_counter()
    logger.info(
        "source_fetch_started",
        source=source_name,
        start_date=date_range.start.isoformat(),
        end_date=date_range.end.isoformat(),
    )

    try:
        fetch = adapter.fetch(date_range, pagination)
        if timeout_seconds is not None:
            try:
                records = await asyncio.wait_for(fetch, timeout=timeout_seconds)
            except asyncio.TimeoutError as exc:
                raise SourceTimeoutError(source_name, timeout_seconds) from exc
        else:
            records = await fetch
        events, dropped = _CANDIDATE_VALIDATOR.coerce_all(records, source_name)
    except Exception as exc:
        duration = perf_counter() - started
        SOURCE_FETCH_TOTAL.labels(source=source_name, outcome="failed").inc()
        SOURCE_FETCH_DURATION_SECONDS.labels(source=source_name).observe(duration)
        logger.error(
            "source_fetch_failed",
            source=source_name,
            error=str(exc),
            error_type=type(exc).__name__,
            duration_seconds=duration,
        )
        return SourceFetchResult(
            source_name=source_name,
            error=str(exc) or type(exc).__name__,
            error_type=type(exc).__name__,
            duration_seconds=duration,
        )

    duration = perf_counter() - started
    SOURCE_FETCH_TOTAL.labels(source=source_name, outcome="succeeded").inc()
    SOURCE_FETCH_DURATION_SECONDS.labels(source=source_name).observe(duration)
    SOURCE_CANDIDATES_TOTAL.labels(source=source_name).inc(len(events))
    logger.info(
        "source_fetch_completed",
        source=source_name,
        fetched=len(events),
        dropped=dropped,
        duration_seconds=duration,
    )
    return SourceFetchResult(
        source_name=source_name,
        events=events,
        skipped=dropped,
        duration_seconds=duration,
    )


async def fetch_all_sources(
    adapters: Sequence[SourceAdapterProtocol],
    date_range: DateRange,
    *,
    timeout_seconds: float | None = None,
) -> list[SourceFetchResult]:
    """Fetch every source concurrently and collect per-source outcomes.

    Args:
        adapters: Source adapters to run, one task each
        date_range: Inclusive range of event start dates
        timeout_seconds: Per-source timeout

    Returns:
        One SourceFetchResult per adapter, in adapter order

    Example:
        >>> results = asyncio.run(fetch_all_sources([tm, seatgeek], date_range))
        >>> [r.succeeded for r in results]
        [True, False]
    """
    if not adapters:
        return []

    return list(
        await asyncio.gather(
            *(
                fetch_from_source(adapter, date_range, timeout_seconds=timeout_seconds)
                for adapter in adapters
            )
        )
    )
