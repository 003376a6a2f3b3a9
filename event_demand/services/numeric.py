"""Numeric helpers shared by the scoring and pricing services."""

import math


def clamp(value: float, lower: float, upper: float) -> float:
    """Bound ``value`` to ``[lower, upper]`` (``lower`` wins if inverted).

    Example:
        >>> clamp(202.5, 100, 350)
        202.5
        >>> clamp(-4, 0, 100)
        0
    """
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves rounded up.

    Unlike ``round``, ``202.5`` becomes ``203``, not ``202``.

    Example:
        >>> round_half_up(202.5)
        203
    """
    return math.floor(value + 0.5)
