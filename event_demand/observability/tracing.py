"""Correlation identifiers for pipeline runs."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from uuid import uuid4

import structlog

CORRELATION_ID_KEY = "correlation_id"


@contextmanager
def correlation_scope(existing_id: str | None = None) -> Iterator[str]:
    """Bind a run identifier to every log entry emitted inside the block.

    Nested scopes restore the enclosing run's identifier on exit.
    """
    correlation_id = existing_id or uuid4().hex
    with structlog.contextvars.bound_contextvars(**{CORRELATION_ID_KEY: correlation_id}):
        yield correlation_id


__all__ = ["CORRELATION_ID_KEY", "correlation_scope"]
