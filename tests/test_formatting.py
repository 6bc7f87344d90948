from budget_engine.domain import currency_by_code
from budget_engine.formatting import (
    format_compact,
    format_currency,
    format_indian,
    format_international,
    format_previews,
    format_with_denomination,
)


def test_international_boundaries():
    assert format_international(999) == "999"
    assert format_international(1000) == "1K"
    assert format_international(1000, show_zero_decimals=True) == "1.0K"
    assert format_international(1_000_000) == "1M"
    assert format_international(1500) == "1.5K"
    assert format_international(1_250_000_000) == "1.3B"
    assert format_international(2 * 10 ** 12) == "2T"


def test_international_negative_and_symbol():
    assert format_international(-2500, "$") == "$-2.5K"
    assert format_international(12.5, "$") == "$13"
    assert format_international(12.5, "$", show_zero_decimals=True) == "$12.5"


def test_indian_lakh_crore():
    assert format_indian(500, "₹") == "₹500"
    assert format_indian(1500, "₹") == "₹1.5k"
    assert format_indian(250_000, "₹") == "₹2.5L"
    assert format_indian(15_000_000, "₹") == "₹1.5Cr"
    assert format_indian(100_000, "₹") == "₹1L"


def test_none_format_groups_thousands_without_decimals():
    assert format_with_denomination(1234567.89, "none", "$") == "$1,234,568"
    assert format_with_denomination(0, "none", "€") == "€0"


def test_nan_and_garbage_format_as_zero():
    for value in (float("nan"), None, "abc", float("inf")):
        for fmt in ("none", "international", "indian", "compact"):
            assert format_with_denomination(value, fmt, "$") == "$0"


def test_compact_uses_locale_notation():
    assert format_compact(1_500_000, "$") == "$1.5M"
    assert format_compact(2_000_000) == "2M"
    assert format_compact(2_000_000, show_zero_decimals=True) == "2.0M"


def test_previews_cover_every_format():
    previews = format_previews(1234567, "$")
    assert previews == {
        "none": "$1,234,567",
        "compact": "$1.2M",
        "indian": "$12.3L",
        "international": "$1.2M",
    }


def test_format_currency():
    assert format_currency(1234.5) == "$1,234.50"
    inr = currency_by_code("INR")
    assert format_currency(1234.5, inr, 0, 2) == "₹1,234.5"
    assert format_currency(1000, inr, 0, 2) == "₹1,000"
    assert format_currency(float("nan"), inr) == "₹0"
