"""Protocol definitions for dependency inversion.

These abstract interfaces define contracts that adapters must implement.
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from event_demand.domain.models import (
    CandidateEvent,
    DailyDemand,
    DateRange,
    Pagination,
)


@runtime_checkable
class SourceAdapterProtocol(Protocol):
    """Contract for an event source (API client or scraper)."""

    source_name: str

    async def fetch(
        self, date_range: DateRange, pagination: Pagination | None = None
    ) -> list[CandidateEvent | Mapping[str, Any]]:
        """Fetch candidate events for a date range.

        Args:
            date_range: Inclusive range of event start dates
            pagination: Optional window; None means every available page

        Returns:
            Candidate events (or raw candidate mappings) in source order

        Raises:
            SourceAuthError: Credentials missing or rejected
            RateLimitError: Source throttled the request
            SourceParseError: Response could not be parsed
            SourceFetchError: Any other communication failure
        """
        ...


class DailyDemandRepositoryProtocol(Protocol):
    """Storage for daily demand, upserted by date."""

    def upsert_daily_demand(self, demand: DailyDemand) -> None:
        """Insert or replace the record for ``demand.date``.

        Must be idempotent: writing the same record twice leaves one row.
        """
        ...
