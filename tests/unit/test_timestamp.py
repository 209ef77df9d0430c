"""Unit tests for timestamp helpers."""

from datetime import date

import pytest

from cvrender.utils.timestamp import format_month_year, now


@pytest.mark.unit
@pytest.mark.parametrize(
    "locale_code, expected",
    [
        ("en", "March 2024"),
        ("es", "marzo de 2024"),
        ("fr", "March 2024"),
    ],
)
def test_format_month_year(locale_code, expected):
    """Test localized month and year formatting."""
    assert format_month_year(locale_code, date(2024, 3, 9)) == expected


@pytest.mark.unit
def test_now_is_sortable():
    """Test the compact timestamp format."""
    stamp = now()
    assert len(stamp) == 15
    assert stamp[8] == "_"
