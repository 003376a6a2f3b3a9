"""Prometheus metrics for source fan-out and pipeline stages.

Metrics are registered on import; exposing them over HTTP is left to the
hosting process via ``ensure_metrics_exporter``.
"""

from __future__ import annotations

import os
import threading
from typing import Final

from prometheus_client import Counter, Histogram, start_http_server

from event_demand.config.logging_config import get_logger

logger = get_logger(__name__)

SOURCE_FETCH_TOTAL: Final[Counter] = Counter(
    "event_source_fetch_total",
    "Source fetch attempts by outcome",
    labelnames=("source", "outcome"),
)

SOURCE_CANDIDATES_TOTAL: Final[Counter] = Counter(
    "event_source_candidates_total",
    "Candidate events returned by each source",
    labelnames=("source",),
)

SOURCE_FETCH_DURATION_SECONDS: Final[Histogram] = Histogram(
    "event_source_fetch_duration_seconds",
    "Duration of source fetches in seconds",
    labelnames=("source",),
)

PIPELINE_STAGE_DURATION_SECONDS: Final[Histogram] = Histogram(
    "demand_pipeline_stage_duration_seconds",
    "Duration of demand pipeline stages in seconds",
    labelnames=("stage",),
)

_EXPORTER_LOCK = threading.Lock()
_EXPORTER_STARTED = False
_DEFAULT_METRICS_PORT: Final[int] = 9000
_METRICS_PORT_ENV: Final[str] = "METRICS_PORT"


def _resolve_metrics_port() -> int:
    port_raw = os.getenv(_METRICS_PORT_ENV)
    try:
        return int(port_raw) if port_raw else _DEFAULT_METRICS_PORT
    except ValueError:
        logger.warning("invalid_metrics_port", port=port_raw)
        return _DEFAULT_METRICS_PORT


def ensure_metrics_exporter() -> None:
    """Start the Prometheus HTTP exporter once per process."""

    global _EXPORTER_STARTED
    with _EXPORTER_LOCK:
        if _EXPORTER_STARTED:
            return

        port = _resolve_metrics_port()
        try:
            start_http_server(port)
        except OSError as exc:
            logger.error("metrics_exporter_start_failed", port=port, error=str(exc))
            raise

        _EXPORTER_STARTED = True
        logger.info("metrics_exporter_started", port=port)


__all__ = [
    "PIPELINE_STAGE_DURATION_SECONDS",
    "SOURCE_CANDIDATES_TOTAL",
    "SOURCE_FETCH_DURATION_SECONDS",
    "SOURCE_FETCH_TOTAL",
    "ensure_metrics_exporter",
]
