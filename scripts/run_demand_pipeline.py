"""Demand pipeline runner script.

Runs the demand pipeline once over exported source files:
1. Read each source's JSON export (one adapter per ``--source``)
2. Deduplicate, score and aggregate demand per date
3. Print price suggestions (or the full result) as JSON

Examples:
  # One week, two sources, host rates
  python -m scripts.run_demand_pipeline \\
      --source ticketmaster=exports/tm.json --source seatgeek=exports/sg.json \\
      --start 2025-03-10 --end 2025-03-16 \\
      --base-rate 150 --min-rate 100 --max-rate 350
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence
from datetime import date
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from event_demand.adapters.json_file_source import JsonFileSourceAdapter
from event_demand.config.logging_config import get_logger, setup_logging
from event_demand.config.settings import Settings, get_settings
from event_demand.domain.exceptions import EventDemandError
from event_demand.domain.models import HostPricingSettings
from event_demand.observability.metrics import ensure_metrics_exporter
from event_demand.use_cases.run_demand_pipeline import run_demand_pipeline

logger = get_logger(__name__)


def _source_spec(value: str) -> tuple[str, Path]:
    name, separator, path = value.partition("=")
    if not separator or not name or not path:
        raise argparse.ArgumentTypeError(f"expected NAME=PATH, got {value!r}")
    return name.strip(), Path(path)


def parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the event demand pipeline")
    parser.add_argument(
        "--source",
        dest="sources",
        action="append",
        type=_source_spec,
        default=[],
        metavar="NAME=PATH",
        help="Source name and JSON export path (repeatable)",
    )
    parser.add_argument(
        "--start",
        type=date.fromisoformat,
        default=None,
        help="First date YYYY-MM-DD (default: today)",
    )
    parser.add_argument(
        "--end",
        type=date.fromisoformat,
        default=None,
        help="Last date YYYY-MM-DD (default: start + sync horizon)",
    )
    parser.add_argument("--base-rate", type=float, default=None)
    parser.add_argument("--min-rate", type=float, default=None)
    parser.add_argument("--max-rate", type=float, default=None)
    parser.add_argument(
        "--full",
        action="store_true",
        help="Print the full pipeline result instead of price suggestions",
    )
    parser.add_argument(
        "--output", type=Path, default=None, help="Write JSON here instead of stdout"
    )
    parser.add_argument("--json-logs", action="store_true", help="Render logs as JSON")
    parser.add_argument(
        "--metrics",
        action="store_true",
        help="Expose Prometheus metrics on METRICS_PORT while running",
    )
    return parser.parse_args(argv)


def initialize_logging(settings: Settings, *, json_logs: bool = False) -> None:
    """Initialize structlog-based logging for scripts."""
    setup_logging(
        log_level=settings.log_level, json_logs=json_logs or settings.json_logs
    )
    logger.info("logging_initialized", level=settings.log_level, json_logs=json_logs)


def main(argv: Sequence[str] | None = None) -> int:
    """Run the pipeline once.

    Returns:
        Exit code (0 = success, 1 = error)
    """
    args = parse_args(argv)
    settings = get_settings()
    initialize_logging(settings, json_logs=args.json_logs)

    if not args.sources:
        logger.error("no_sources_configured")
        return 1

    if args.metrics:
        ensure_metrics_exporter()

    adapters = [
        JsonFileSourceAdapter(
            name,
            path,
            page_size=settings.source_page_size,
            max_pages=settings.source_max_pages,
            page_delay_seconds=0,
        )
        for name, path in args.sources
    ]
    try:
        host = HostPricingSettings(
            base_rate=args.base_rate, min_rate=args.min_rate, max_rate=args.max_rate
        )
    except PydanticValidationError as e:
        logger.error(
            "invalid_host_rates",
            errors=[f"{error['loc'][0]}: {error['msg']}" for error in e.errors()],
        )
        return 1

    try:
        result = asyncio.run(
            run_demand_pipeline(
                adapters,
                args.start or date.today(),
                args.end,
                host,
                settings=settings,
            )
        )
    except EventDemandError as e:
        logger.error(
            "demand_pipeline_failed", error=str(e), error_type=type(e).__name__
        )
        return 1

    if args.full:
        rendered = result.model_dump_json(indent=2)
    else:
        suggestions = [s.model_dump(mode="json") for s in result.price_suggestions]
        rendered = json.dumps(suggestions, indent=2)

    if args.output is not None:
        args.output.write_text(rendered + "\n", encoding="utf-8")
        logger.info("demand_pipeline_output_written", path=str(args.output))
    else:
        sys.stdout.write(rendered + "\n")

    return 0


if __name__ == "__main__":
    sys.exit(main())
