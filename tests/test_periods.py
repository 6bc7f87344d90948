from datetime import date, datetime

from budget_engine.domain import Expense
from budget_engine.periods import (
    QUARTER,
    YEAR,
    available_months,
    current_month_key,
    filter_by_month,
    filter_by_period,
    format_month_year,
    month_key,
    parse_date,
    parse_month_key,
    period_income,
    period_label,
)


def make_exp(id, date_value, amount=10, bucket="Needs"):
    return Expense(id=id, title=id, amount=amount, bucket=bucket, subcategory="Housing", date=date_value)


def test_filter_by_month_returns_only_january():
    records = (
        make_exp("jan", "2025-01-15T10:00:00"),
        make_exp("feb", "2025-02-03T10:00:00"),
    )
    result = filter_by_month(records, "2025-1")
    assert [e.id for e in result] == ["jan"]


def test_filter_by_month_skips_bad_dates():
    records = (
        make_exp("ok", "2025-01-15"),
        make_exp("bad", "not a date"),
        make_exp("empty", ""),
    )
    result = filter_by_month(records, "2025-1")
    assert [e.id for e in result] == ["ok"]


def test_filter_by_month_accepts_zulu_and_date_values():
    records = (
        make_exp("z", "2025-03-01T00:00:00.000Z"),
        make_exp("d", date(2025, 3, 9)),
        make_exp("dt", datetime(2025, 3, 31, 23, 59)),
    )
    assert len(filter_by_month(records, "2025-3")) == 3


def test_filter_by_month_without_key_returns_everything():
    records = (make_exp("a", "2025-01-15"), make_exp("b", "garbage"))
    assert filter_by_month(records, None) == records
    assert filter_by_month(records, "") == records
    assert filter_by_month(records, "2025-13") == records
    assert filter_by_month(records, "January") == records


def test_filter_by_month_does_not_mutate_input():
    records = [make_exp("a", "2025-01-15"), make_exp("b", "2025-02-15")]
    filter_by_month(records, "2025-2")
    assert len(records) == 2


def test_month_key_has_no_zero_padding():
    assert month_key("2025-01-05") == "2025-1"
    assert month_key("2024-12-31T23:00:00") == "2024-12"
    assert month_key("nope") is None


def test_parse_month_key():
    assert parse_month_key("2025-1").get_or_else(None) == (2025, 1)
    assert parse_month_key("2025-01").get_or_else(None) == (2025, 1)
    assert parse_month_key("2025-0").is_none()
    assert parse_month_key("2025").is_none()
    assert parse_month_key(None).is_none()


def test_parse_date_rejects_non_strings():
    assert parse_date(None) is None
    assert parse_date(12345) is None
    assert parse_date("   ") is None


def test_available_months_sorted_newest_first_with_current():
    records = (
        make_exp("a", "2024-11-02"),
        make_exp("b", "2025-02-10"),
        make_exp("c", "2025-02-20"),
        make_exp("d", "2024-2-31"),
        make_exp("e", "2025-10-01"),
    )
    months = available_months(records, today=date(2025, 3, 5))
    assert months == ["2025-10", "2025-3", "2025-2", "2024-11"]


def test_available_months_empty_records_gives_current_month():
    assert available_months((), today=date(2026, 7, 1)) == ["2026-7"]
    assert current_month_key(date(2026, 7, 1)) == "2026-7"


def test_format_month_year():
    assert format_month_year("2025-5") == "May 2025"
    assert format_month_year("bad") == "bad"


def test_filter_by_period_quarter_and_year():
    records = (
        make_exp("mar", "2025-03-31"),
        make_exp("apr", "2025-04-01"),
        make_exp("jun", "2025-06-30"),
        make_exp("jul", "2025-07-01"),
        make_exp("old", "2024-05-01"),
    )
    today = date(2025, 5, 15)
    assert [e.id for e in filter_by_period(records, QUARTER, today)] == ["apr", "jun"]
    assert [e.id for e in filter_by_period(records, YEAR, today)] == ["mar", "apr", "jun", "jul"]


def test_period_income_and_label():
    assert period_income(1000, "Month") == 1000
    assert period_income(1000, QUARTER) == 3000
    assert period_income(1000, YEAR) == 12000
    today = date(2025, 5, 15)
    assert period_label("Month", today) == "May 2025"
    assert period_label(QUARTER, today) == "April - June 2025"
    assert period_label(YEAR, today) == "2025"
