"""Pytest configuration and shared fixtures."""

from __future__ import annotations

import asyncio
from datetime import date, time
from pathlib import Path
from typing import Any
from unittest.mock import Mock

import pytest

from event_demand.adapters.paginated_source import PaginatedSourceAdapter
from event_demand.config.settings import Settings
from event_demand.domain.models import (
    CandidateEvent,
    CanonicalEvent,
    DailyDemand,
    DateRange,
    EventType,
    Pagination,
    SourcePage,
    Venue,
)
from event_demand.domain.protocols import DailyDemandRepositoryProtocol

# FedExForum, downtown Memphis
FEDEX_FORUM_LAT = 35.1382
FEDEX_FORUM_LNG = -90.0506


def create_candidate(
    source_name: str = "ticketmaster",
    source_event_id: str | None = "tm-1",
    title: str = "Grizzlies vs Lakers",
    start_date: date | None = date(2025, 3, 10),
    **kwargs: Any,
) -> CandidateEvent:
    """Helper to create a candidate listing with sensible defaults."""
    defaults: dict[str, Any] = {
        "source_name": source_name,
        "source_event_id": source_event_id,
        "title": title,
        "start_date": start_date,
    }
    defaults.update(kwargs)
    return CandidateEvent(**defaults)


def create_canonical(
    title: str = "Grizzlies vs Lakers",
    start_date: date | None = date(2025, 3, 10),
    demand_impact_score: int | None = None,
    **kwargs: Any,
) -> CanonicalEvent:
    """Helper to create a canonical event, optionally pre-scored."""
    defaults: dict[str, Any] = {
        "source_name": "ticketmaster",
        "source_event_id": kwargs.pop("source_event_id", f"tm-{title}"),
        "title": title,
        "start_date": start_date,
        "demand_impact_score": demand_impact_score,
    }
    defaults.update(kwargs)
    return CanonicalEvent(**defaults)


def forum_venue(**kwargs: Any) -> Venue:
    """Venue at the FedExForum coordinates."""
    defaults: dict[str, Any] = {
        "name": "FedExForum",
        "latitude": FEDEX_FORUM_LAT,
        "longitude": FEDEX_FORUM_LNG,
    }
    defaults.update(kwargs)
    return Venue(**defaults)


class StaticSourceAdapter:
    """Source adapter returning a fixed list of candidates."""

    def __init__(self, source_name: str, events: list[CandidateEvent]) -> None:
        self.source_name = source_name
        self.events = events
        self.calls = 0

    async def fetch(
        self, date_range: DateRange, pagination: Pagination | None = None
    ) -> list[CandidateEvent]:
        self.calls += 1
        return [event for event in self.events if event.start_date in date_range]


class FailingSourceAdapter:
    """Source adapter that raises on every fetch."""

    def __init__(self, source_name: str, error: Exception) -> None:
        self.source_name = source_name
        self.error = error

    async def fetch(
        self, date_range: DateRange, pagination: Pagination | None = None
    ) -> list[CandidateEvent]:
        raise self.error


class RawPayloadAdapter:
    """Source adapter returning whatever payload it was given, unparsed."""

    def __init__(self, source_name: str, payload: Any) -> None:
        self.source_name = source_name
        self.payload = payload

    async def fetch(
        self, date_range: DateRange, pagination: Pagination | None = None
    ) -> Any:
        return self.payload


class SlowSourceAdapter:
    """Source adapter that sleeps before answering."""

    def __init__(self, source_name: str, delay_seconds: float) -> None:
        self.source_name = source_name
        self.delay_seconds = delay_seconds

    async def fetch(
        self, date_range: DateRange, pagination: Pagination | None = None
    ) -> list[CandidateEvent]:
        await asyncio.sleep(self.delay_seconds)
        return [create_candidate(source_name=self.source_name)]


class ScriptedPageAdapter(PaginatedSourceAdapter):
    """Paginated adapter serving pre-built pages."""

    source_name = "seatgeek"

    def __init__(self, pages: list[SourcePage], **kwargs: Any) -> None:
        kwargs.setdefault("page_delay_seconds", 0)
        super().__init__(**kwargs)
        self.pages = pages
        self.requested: list[Pagination] = []

    async def fetch_page(
        self, date_range: DateRange, pagination: Pagination
    ) -> SourcePage:
        self.requested.append(pagination)
        index = len(self.requested) - 1
        if index >= len(self.pages):
            return SourcePage()
        return self.pages[index]


class InMemoryDailyDemandRepository:
    """Daily demand store keyed by date."""

    def __init__(self) -> None:
        self.rows: dict[date, DailyDemand] = {}

    def upsert_daily_demand(self, demand: DailyDemand) -> None:
        self.rows[demand.date] = demand


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from any config/*.yaml in the working directory."""
    return Settings(config_dir=tmp_path / "config", source_page_delay_seconds=0)


@pytest.fixture
def march_week() -> DateRange:
    """Monday 2025-03-10 through Sunday 2025-03-16."""
    return DateRange(start=date(2025, 3, 10), end=date(2025, 3, 16))


@pytest.fixture
def grizzlies_listings() -> list[CandidateEvent]:
    """Same game listed by two sources with slightly different titles."""
    return [
        create_candidate(
            source_name="seatgeek",
            source_event_id="sg-77",
            title="Grizzlies vs Lakers",
            event_type="sports",
            start_time=time(19, 0),
            venue=forum_venue(),
            ticket_price_min=35.0,
        ),
        create_candidate(
            source_name="ticketmaster",
            source_event_id="tm-1",
            title="Grizzlies vs. Lakers!",
            event_type="sports",
            start_time=time(19, 0),
            venue=forum_venue(latitude=FEDEX_FORUM_LAT + 0.004),
            expected_attendance=17_000,
            event_url="https://tm.example/grizzlies",
        ),
    ]


@pytest.fixture
def mock_repository() -> Mock:
    """Mock daily demand repository."""
    mock = Mock(spec=DailyDemandRepositoryProtocol)
    mock.upsert_daily_demand.return_value = None
    return mock
