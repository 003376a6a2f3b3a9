"""Custom exception hierarchy for the event demand engine.

Following error taxonomy: retryable, non-retryable, validation, rate-limit.
"""


class EventDemandError(Exception):
    """Base exception for all application errors."""

    pass


class RetryableError(EventDemandError):
    """Errors that can be retried (network issues, temporary failures)."""

    pass


class NonRetryableError(EventDemandError):
    """Errors that should not be retried (validation, auth, logic errors)."""

    pass


class ValidationError(NonRetryableError):
    """Data validation errors."""

    pass


class SourceFetchError(RetryableError):
    """Event source communication errors."""

    def __init__(self, source_name: str, message: str) -> None:
        """Initialize with the failing source name."""
        self.source_name = source_name
        super().__init__(f"{source_name}: {message}")


class RateLimitError(SourceFetchError):
    """Source API rate limit exceeded."""

    def __init__(self, source_name: str, retry_after: int | None = None) -> None:
        """Initialize with optional retry_after seconds."""
        self.retry_after = retry_after
        super().__init__(
            source_name, f"Rate limit exceeded. Retry after: {retry_after}s"
        )


class SourceTimeoutError(SourceFetchError):
    """Source did not answer within the configured timeout."""

    def __init__(self, source_name: str, timeout_seconds: float) -> None:
        """Initialize with the timeout that elapsed."""
        self.timeout_seconds = timeout_seconds
        super().__init__(source_name, f"Timed out after {timeout_seconds}s")


class SourceAuthError(NonRetryableError):
    """Source rejected or is missing credentials."""

    pass


class SourceParseError(NonRetryableError):
    """Source returned a payload that could not be parsed."""

    pass
