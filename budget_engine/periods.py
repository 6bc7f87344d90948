"""Year-month keys and period filtering for expense and income records.

A year-month key looks like ``"2025-1"``: four-digit year, 1-indexed month,
no zero padding. Records carry ISO-8601 ``date`` strings (or ``date`` /
``datetime`` values); anything unparseable is skipped, never raised.
"""
import calendar
import logging
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Tuple, TypeVar

from budget_engine.functional import Maybe, Nothing, Some, parse_int

logger = logging.getLogger(__name__)

R = TypeVar('R')

MONTH = "Month"
QUARTER = "Quarter"
YEAR = "Year"
PERIOD_MONTHS = {MONTH: 1, QUARTER: 3, YEAR: 12}


def parse_date(value) -> Optional[date]:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        logger.debug("unparseable record date %r", value)
        return None


def make_month_key(year: int, month: int) -> str:
    return f"{year}-{month}"


def month_key(value) -> Optional[str]:
    d = parse_date(value)
    if d is None:
        return None
    return make_month_key(d.year, d.month)


def current_month_key(today: Optional[date] = None) -> str:
    today = today or date.today()
    return make_month_key(today.year, today.month)


def parse_month_key(key: Optional[str]) -> Maybe[Tuple[int, int]]:
    if not key or not isinstance(key, str) or key.count("-") != 1:
        return Nothing()
    year_text, month_text = key.split("-")
    year = parse_int(year_text).get_or_else(None)
    month = parse_int(month_text).get_or_else(None)
    if year is None or month is None or not 1 <= month <= 12:
        return Nothing()
    return Some((year, month))


def in_month(year: int, month: int) -> Callable[[object], bool]:
    def _filter(record) -> bool:
        d = parse_date(getattr(record, "date", None))
        return d is not None and d.year == year and d.month == month

    return _filter


def in_range(start: date, end: date) -> Callable[[object], bool]:
    def _filter(record) -> bool:
        d = parse_date(getattr(record, "date", None))
        return d is not None and start <= d <= end

    return _filter


def filter_by_month(records: Iterable[R], key: Optional[str]) -> Tuple[R, ...]:
    """Records dated in the month named by ``key``.

    An absent or malformed key deliberately returns every record unfiltered,
    so a broken month selector shows all data instead of none.
    """
    records = tuple(records)
    parsed = parse_month_key(key)
    if parsed.is_none():
        if key:
            logger.warning("invalid month key %r, returning all %d records", key, len(records))
        return records
    year, month = parsed.get_or_else((0, 0))
    return tuple(filter(in_month(year, month), records))


def available_months(records: Iterable, today: Optional[date] = None) -> list[str]:
    """Distinct month keys present in ``records`` plus the current month, newest first."""
    keys = {current_month_key(today)}
    for r in records:
        key = month_key(getattr(r, "date", None))
        if key is not None:
            keys.add(key)
    parsed = [parse_month_key(k).get_or_else(None) for k in keys]
    return [make_month_key(y, m) for y, m in sorted(parsed, reverse=True)]


def format_month_year(key: str) -> str:
    parsed = parse_month_key(key)
    if parsed.is_none():
        return key
    year, month = parsed.get_or_else((0, 0))
    return f"{calendar.month_name[month]} {year}"


def period_bounds(period: str, today: Optional[date] = None) -> Tuple[date, date]:
    """First and last day of the Month / Quarter / Year containing ``today``."""
    today = today or date.today()
    if period == YEAR:
        return date(today.year, 1, 1), date(today.year, 12, 31)
    if period == QUARTER:
        first_month = (today.month - 1) // 3 * 3 + 1
        last_month = first_month + 2
    else:
        first_month = last_month = today.month
    last_day = calendar.monthrange(today.year, last_month)[1]
    return date(today.year, first_month, 1), date(today.year, last_month, last_day)


def filter_by_period(records: Iterable[R], period: str, today: Optional[date] = None) -> Tuple[R, ...]:
    start, end = period_bounds(period, today)
    return tuple(filter(in_range(start, end), records))


def period_income(monthly_income: float, period: str) -> float:
    return monthly_income * PERIOD_MONTHS.get(period, 1)


def period_label(period: str, today: Optional[date] = None) -> str:
    today = today or date.today()
    start, end = period_bounds(period, today)
    if period == YEAR:
        return str(today.year)
    if period == QUARTER:
        return f"{calendar.month_name[start.month]} - {calendar.month_name[end.month]} {today.year}"
    return f"{calendar.month_name[today.month]} {today.year}"
