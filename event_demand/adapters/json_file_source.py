"""Source adapter serving candidate records from a local JSON file.

The file holds a JSON array of candidate mappings (or an object with an
``events`` array), as exported by an upstream scraper or API client.
"""

import json
from pathlib import Path
from typing import Any

from event_demand.adapters.paginated_source import PaginatedSourceAdapter
from event_demand.config.logging_config import get_logger
from event_demand.domain.exceptions import SourceFetchError, SourceParseError
from event_demand.domain.models import CandidateEvent, DateRange, Pagination, SourcePage
from event_demand.services.validators import CandidateValidator

logger = get_logger(__name__)


class JsonFileSourceAdapter(PaginatedSourceAdapter):
    """Paginated view over a JSON export of one source's listings.

    Records whose start date falls outside the requested range are left
    out. Undated records are passed through so the pipeline can report
    them as skipped.
    """

    def __init__(self, source_name: str, path: Path, **kwargs: Any) -> None:
        """Initialize adapter.

        Args:
            source_name: Name used for provenance and merge priority
            path: JSON file to read
            **kwargs: Pagination options forwarded to PaginatedSourceAdapter
        """
        self.source_name = source_name
        self.path = Path(path)
        self._validator = CandidateValidator()
        self._records: list[dict[str, Any]] | None = None
        super().__init__(**kwargs)

    def _load_records(self) -> list[dict[str, Any]]:
        if self._records is not None:
            return self._records

        try:
            with open(self.path, encoding="utf-8") as f:
                payload = json.load(f)
        except OSError as e:
            raise SourceFetchError(
                self.source_name, f"cannot read {self.path}: {e}"
            ) from e
        except json.JSONDecodeError as e:
            raise SourceParseError(
                f"{self.source_name}: invalid JSON in {self.path}"
            ) from e

        if isinstance(payload, dict):
            payload = payload.get("events", [])
        if not isinstance(payload, list):
            raise SourceParseError(
                f"{self.source_name}: expected a list of events in {self.path}"
            )

        self._records = [record for record in payload if isinstance(record, dict)]
        logger.debug(
            "source_file_loaded",
            source=self.source_name,
            path=str(self.path),
            records=len(self._records),
        )
        return self._records

    def _in_range(self, candidate: CandidateEvent, date_range: DateRange) -> bool:
        return candidate.start_date is None or candidate.start_date in date_range

    async def fetch_page(
        self, date_range: DateRange, pagination: Pagination
    ) -> SourcePage:
        """Serve one window of the file's records."""
        records = self._load_records()
        window = records[pagination.offset : pagination.offset + pagination.limit]

        events: list[CandidateEvent] = []
        for record in window:
            candidate = self._validator.coerce(record, self.source_name)
            if candidate is not None and self._in_range(candidate, date_range):
                events.append(candidate)

        return SourcePage(
            events=events,
            has_more=pagination.offset + pagination.limit < len(records),
        )
