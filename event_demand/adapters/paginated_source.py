"""Base class for sources that serve candidates page by page."""

import asyncio
from abc import ABC, abstractmethod

from event_demand.config.logging_config import get_logger
from event_demand.config.settings import (
    SOURCE_MAX_PAGES_DEFAULT,
    SOURCE_PAGE_DELAY_SECONDS_DEFAULT,
    SOURCE_PAGE_SIZE_DEFAULT,
)
from event_demand.domain.models import CandidateEvent, DateRange, Pagination, SourcePage

logger = get_logger(__name__)


class PaginatedSourceAdapter(ABC):
    """Turns a single-page fetch into a full ``fetch`` over every page.

    Subclasses set ``source_name`` and implement ``fetch_page``. Pages are
    requested sequentially until the source reports no more, or
    ``max_pages`` is reached, sleeping ``page_delay_seconds`` in between.
    """

    source_name: str = ""

    def __init__(
        self,
        *,
        page_size: int = SOURCE_PAGE_SIZE_DEFAULT,
        max_pages: int = SOURCE_MAX_PAGES_DEFAULT,
        page_delay_seconds: float = SOURCE_PAGE_DELAY_SECONDS_DEFAULT,
    ) -> None:
        if not self.source_name:
            raise ValueError(f"{type(self).__name__} must define source_name")
        if max_pages < 1:
            raise ValueError("max_pages must be positive")

        self.page_size = page_size
        self.max_pages = max_pages
        self.page_delay_seconds = page_delay_seconds

    @abstractmethod
    async def fetch_page(
        self, date_range: DateRange, pagination: Pagination
    ) -> SourcePage:
        """Fetch one page of candidates."""

    async def fetch(
        self, date_range: DateRange, pagination: Pagination | None = None
    ) -> list[CandidateEvent]:
        """Fetch candidates for a date range.

        Args:
            date_range: Inclusive range of event start dates
            pagination: Fetch only this window when given

        Returns:
            Candidates from every fetched page, in page order
        """
        if pagination is not None:
            page = await self.fetch_page(date_range, pagination)
            return list(page.events)

        events: list[CandidateEvent] = []
        window = Pagination(offset=0, limit=self.page_size)

        for page_number in range(1, self.max_pages + 1):
            page = await self.fetch_page(date_range, window)
            events.extend(page.events)

            logger.debug(
                "source_page_fetched",
                source=self.source_name,
                page=page_number,
                offset=window.offset,
                page_events=len(page.events),
                has_more=page.has_more,
            )

            if not page.has_more:
                break

            if page_number == self.max_pages:
                logger.info(
                    "source_page_limit_reached",
                    source=self.source_name,
                    max_pages=self.max_pages,
                    fetched=len(events),
                )
                break

            window = window.next()
            if self.page_delay_seconds > 0:
                await asyncio.sleep(self.page_delay_seconds)

        return events
