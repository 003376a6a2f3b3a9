"""Tests for title normalization."""

import pytest

from event_demand.services.text_normalizer import normalize_title, title_prefix


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("Memphis Grizzlies vs. Lakers!", "memphis grizzlies vs lakers"),
        ("  Beale   Street\tMusic  Festival ", "beale street music festival"),
        ("Café Olé 2025", "caf ol 2025"),
        ("!!!", ""),
        ("", ""),
        (None, ""),
    ],
)
def test_normalize_title(raw: str | None, expected: str) -> None:
    """Test lowercase, ASCII alphanumerics and single spaces."""
    assert normalize_title(raw) == expected


def test_normalize_title_idempotent() -> None:
    """Test normalizing twice changes nothing."""
    once = normalize_title("Elvis Week: Candlelight Vigil (2025)")

    assert normalize_title(once) == once


def test_title_prefix_shorter_than_length() -> None:
    """Test prefix of a short title is the whole title."""
    assert title_prefix("jazz", 10) == "jazz"
    assert title_prefix("memphis grizzlies", 10) == "memphis gr"
