"""Candidate validation service.

Checks candidate listings before deduplication and turns raw source
mappings into CandidateEvent models. Invalid records are reported, never
raised, so one bad listing cannot abort a batch.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from event_demand.config.logging_config import get_logger
from event_demand.domain.models import CandidateEvent

logger = get_logger(__name__)


class CandidateValidator:
    """Validates candidate listings for the demand pipeline."""

    def validate(self, candidate: CandidateEvent) -> list[str]:
        """Blocking problems for a candidate.

        Checks:
        - Start date present (required to place the event on a day)

        Args:
            candidate: Candidate to check

        Returns:
            List of errors (empty if usable)

        Example:
            >>> CandidateValidator().validate(CandidateEvent(source_name="x"))
            ['Missing start date']
        """
        errors: list[str] = []

        if candidate.start_date is None:
            errors.append("Missing start date")

        return errors

    def coerce(
        self, record: CandidateEvent | Mapping[str, Any], source_name: str
    ) -> CandidateEvent | None:
        """Parse a raw record into a CandidateEvent.

        Args:
            record: Model instance or raw mapping from an adapter
            source_name: Source used when the mapping does not name one

        Returns:
            Parsed candidate, or None if the record is not a mapping or fails
            model validation
        """
        if isinstance(record, CandidateEvent):
            return record

        if not isinstance(record, Mapping):
            logger.warning(
                "candidate_skipped",
                source=source_name,
                reason="unsupported_record",
                record_type=type(record).__name__,
            )
            return None

        payload = {"source_name": source_name, **record}
        try:
            return CandidateEvent.model_validate(payload)
        except PydanticValidationError as exc:
            logger.warning(
                "candidate_skipped",
                source=source_name,
                source_event_id=payload.get("source_event_id"),
                reason="invalid_record",
                errors=[error["msg"] for error in exc.errors()],
            )
            return None

    def coerce_all(
        self, records: Iterable[Any], source_name: str
    ) -> tuple[list[CandidateEvent], int]:
        """Parse every record an adapter returned, dropping unparseable ones.

        Returns:
            Tuple of (parsed candidates, number dropped)
        """
        parsed: list[CandidateEvent] = []
        dropped = 0
        for record in records:
            candidate = self.coerce(record, source_name)
            if candidate is None:
                dropped += 1
            else:
                parsed.append(candidate)
        return parsed, dropped

    def filter_valid(
        self,
        records: Iterable[CandidateEvent | Mapping[str, Any]],
        source_name: str,
    ) -> tuple[list[CandidateEvent], int]:
        """Keep usable candidates, logging each skipped one.

        Args:
            records: Candidates or raw mappings from one source
            source_name: Source the records came from

        Returns:
            Tuple of (valid candidates, number skipped)
        """
        valid: list[CandidateEvent] = []
        skipped = 0

        for record in records:
            candidate = self.coerce(record, source_name)
            if candidate is None:
                skipped += 1
                continue

            errors = self.validate(candidate)
            if errors:
                skipped += 1
                logger.warning(
                    "candidate_skipped",
                    source=candidate.source_name,
                    source_event_id=candidate.source_event_id,
                    title=candidate.title,
                    reason="validation_failed",
                    errors=errors,
                )
                continue

            valid.append(candidate)

        return valid, skipped
