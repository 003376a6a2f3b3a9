"""Text normalization service for event listings.

Handles:
- Lowercasing
- Punctuation and non-ASCII removal
- Whitespace normalization
"""

import re
from typing import Final

_NON_ALNUM_PATTERN: Final[re.Pattern[str]] = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_PATTERN: Final[re.Pattern[str]] = re.compile(r"\s+")


def normalize_title(text: str | None) -> str:
    """Normalize a title or venue name for comparison.

    Args:
        text: Raw text, may be None

    Returns:
        Lowercased text with only ASCII letters, digits and single spaces

    Example:
        >>> normalize_title("Memphis Grizzlies vs. Lakers!")
        'memphis grizzlies vs lakers'
    """
    if not text:
        return ""

    text = text.lower()
    text = _NON_ALNUM_PATTERN.sub("", text)
    text = _WHITESPACE_PATTERN.sub(" ", text)
    return text.strip()


def title_prefix(normalized: str, length: int) -> str:
    """Leading ``length`` characters of an already normalized title.

    Example:
        >>> title_prefix("memphis grizzlies vs lakers", 10)
        'memphis gr'
    """
    return normalized[:length]
