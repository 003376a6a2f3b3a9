"""Tests for concurrent source fan-out with failure isolation."""

import asyncio

from structlog.testing import capture_logs

from event_demand.domain.exceptions import RateLimitError, SourceAuthError
from event_demand.domain.models import DateRange
from event_demand.observability.metrics import SOURCE_FETCH_TOTAL
from event_demand.use_cases.fetch_sources import fetch_all_sources, fetch_from_source
from tests.conftest import (
    FailingSourceAdapter,
    RawPayloadAdapter,
    SlowSourceAdapter,
    StaticSourceAdapter,
    create_candidate,
)


def _fetch_count(source: str, outcome: str) -> float:
    for metric in SOURCE_FETCH_TOTAL.collect():
        for sample in metric.samples:
            if (
                sample.name.endswith("_total")
                and sample.labels.get("source") == source
                and sample.labels.get("outcome") == outcome
            ):
                return sample.value
    return 0.0


def test_fetch_from_source_success(march_week: DateRange) -> None:
    """Test candidates are returned with no error."""
    adapter = StaticSourceAdapter("ticketmaster", [create_candidate()])

    result = asyncio.run(fetch_from_source(adapter, march_week))

    assert result.succeeded
    assert result.fetched == 1
    assert result.error is None
    assert result.duration_seconds >= 0


def test_fetch_from_source_captures_error(march_week: DateRange) -> None:
    """Test a raising adapter yields an error result instead of raising."""
    adapter = FailingSourceAdapter("seatgeek", RateLimitError("seatgeek", retry_after=30))
    before = _fetch_count("seatgeek", "failed")

    with capture_logs() as logs:
        result = asyncio.run(fetch_from_source(adapter, march_week))

    assert not result.succeeded
    assert result.events == []
    assert result.error_type == "RateLimitError"
    assert "Retry after: 30s" in (result.error or "")
    assert _fetch_count("seatgeek", "failed") == before + 1
    assert any(log["event"] == "source_fetch_failed" for log in logs)


def test_fetch_from_source_timeout(march_week: DateRange) -> None:
    """Test a source exceeding its timeout is reported as failed."""
    adapter = SlowSourceAdapter("predicthq", delay_seconds=1.0)

    result = asyncio.run(fetch_from_source(adapter, march_week, timeout_seconds=0.01))

    assert not result.succeeded
    assert result.error_type == "SourceTimeoutError"
    assert result.fetched == 0


def test_fetch_all_sources_isolates_failures(march_week: DateRange) -> None:
    """Test one failing source never aborts its siblings."""
    adapters = [
        StaticSourceAdapter(
            "ticketmaster",
            [create_candidate(source_event_id="1"), create_candidate(source_event_id="2")],
        ),
        FailingSourceAdapter("seatgeek", SourceAuthError("bad key")),
        StaticSourceAdapter(
            "predicthq", [create_candidate(source_name="predicthq", source_event_id="p")]
        ),
    ]

    results = asyncio.run(fetch_all_sources(adapters, march_week))

    assert [r.source_name for r in results] == ["ticketmaster", "seatgeek", "predicthq"]
    assert [r.fetched for r in results] == [2, 0, 1]
    assert [r.succeeded for r in results] == [True, False, True]


def test_fetch_all_sources_all_failing(march_week: DateRange) -> None:
    """Test every source failing still yields a result per source."""
    adapters = [
        FailingSourceAdapter("seatgeek", RuntimeError("down")),
        FailingSourceAdapter("ticketmaster", ConnectionError()),
    ]

    results = asyncio.run(fetch_all_sources(adapters, march_week))

    assert all(not r.succeeded for r in results)
    assert results[1].error == "ConnectionError"


def test_fetch_all_sources_runs_concurrently(march_week: DateRange) -> None:
    """Test slow sources overlap instead of running back to back."""
    adapters = [SlowSourceAdapter(f"source_{i}", delay_seconds=0.2) for i in range(5)]

    async def timed() -> float:
        loop = asyncio.get_running_loop()
        started = loop.time()
        await fetch_all_sources(adapters, march_week)
        return loop.time() - started

    assert asyncio.run(timed()) < 0.9


def test_fetch_all_sources_empty(march_week: DateRange) -> None:
    """Test no adapters means no results."""
    assert asyncio.run(fetch_all_sources([], march_week)) == []


def test_fetch_from_source_parses_raw_mappings(march_week: DateRange) -> None:
    """Test raw records are parsed one by one and bad ones are dropped."""
    adapter = RawPayloadAdapter(
        "memphis_travel",
        [
            {"source_event_id": "ok", "title": "Jazz", "start_date": "2025-03-14"},
            {"title": "X", "start_date": "not-a-date"},
            "not a record",
        ],
    )

    with capture_logs() as logs:
        result = asyncio.run(fetch_from_source(adapter, march_week))

    assert result.succeeded
    assert [e.source_event_id for e in result.events] == ["ok"]
    assert result.events[0].source_name == "memphis_travel"
    assert result.skipped == 2
    assert [log["reason"] for log in logs if log["event"] == "candidate_skipped"] == [
        "invalid_record",
        "unsupported_record",
    ]


def test_fetch_from_source_bad_return_shape_is_a_failure(march_week: DateRange) -> None:
    """Test an adapter returning None fails only its own source."""
    adapter = RawPayloadAdapter("seatgeek", None)

    result = asyncio.run(fetch_from_source(adapter, march_week))

    assert not result.succeeded
    assert result.error_type == "TypeError"
    assert result.events == []


def test_fetch_all_sources_malformed_source_keeps_siblings(march_week: DateRange) -> None:
    """Test malformed payloads from one source leave sibling results intact."""
    adapters = [
        StaticSourceAdapter("ticketmaster", [create_candidate()]),
        RawPayloadAdapter("seatgeek", [{"title": "X", "start_date": "not-a-date"}]),
        RawPayloadAdapter("predicthq", None),
    ]

    results = asyncio.run(fetch_all_sources(adapters, march_week))

    assert [r.fetched for r in results] == [1, 0, 0]
    assert [r.succeeded for r in results] == [True, True, False]
    assert results[1].skipped == 1
