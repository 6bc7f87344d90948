"""Money and denomination formatting.

Four denomination formats are supported:

* ``none`` - whole units with thousands separators, e.g. ``$1,234,567``
* ``international`` - ``K`` / ``M`` / ``B`` / ``T`` suffixes, e.g. ``$1.2M``
* ``indian`` - ``k`` / ``L`` (lakh) / ``Cr`` (crore) suffixes, e.g. ``₹12.3L``
* ``compact`` - locale-aware compact notation from Babel's CLDR data

Rounding matches half-up on the exact binary value of the float, the same
as a ``toFixed`` call would give.
"""
import math
import re
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import Dict, Optional

from babel.numbers import format_compact_decimal

from budget_engine.domain import CURRENCIES, Currency

NONE = "none"
COMPACT = "compact"
INDIAN = "indian"
INTERNATIONAL = "international"
DENOMINATION_FORMATS = (NONE, COMPACT, INDIAN, INTERNATIONAL)

INTERNATIONAL_STEPS = ((10 ** 12, "T"), (10 ** 9, "B"), (10 ** 6, "M"), (10 ** 3, "K"))
INDIAN_STEPS = ((10 ** 7, "Cr"), (10 ** 5, "L"), (10 ** 3, "k"))

_TRAILING_ZEROS = re.compile(r"\.0+$")
_COMPACT_PARTS = re.compile(r"^(-?[\d,]+)(?:\.(\d+))?(.*)$")
# wide enough for any float written out in full
_WIDE = Context(prec=400)


def _finite(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def to_fixed(value: float, places: int) -> str:
    quantum = Decimal(1).scaleb(-places)
    return str(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP, context=_WIDE))


def _with_suffix(scaled: float, suffix: str, symbol: str, places: int, show_zero_decimals: bool) -> str:
    text = to_fixed(scaled, places)
    if not show_zero_decimals:
        text = _TRAILING_ZEROS.sub("", text)
    return f"{symbol}{text}{suffix}"


def _denominate(value: float, steps, symbol: str, places: int, show_zero_decimals: bool) -> str:
    magnitude = abs(value)
    for threshold, suffix in steps:
        if magnitude >= threshold:
            return _with_suffix(value / threshold, suffix, symbol, places, show_zero_decimals)
    return f"{symbol}{to_fixed(value, places if show_zero_decimals else 0)}"


def format_international(value, symbol: str = "", places: int = 1, show_zero_decimals: bool = False) -> str:
    number = _finite(value)
    if number is None:
        return f"{symbol}0"
    return _denominate(number, INTERNATIONAL_STEPS, symbol, places, show_zero_decimals)


def format_indian(value, symbol: str = "", places: int = 1, show_zero_decimals: bool = False) -> str:
    number = _finite(value)
    if number is None:
        return f"{symbol}0"
    return _denominate(number, INDIAN_STEPS, symbol, places, show_zero_decimals)


def format_compact(
    value,
    symbol: str = "",
    places: int = 1,
    show_zero_decimals: bool = False,
    locale: str = "en",
) -> str:
    number = _finite(value)
    if number is None:
        return f"{symbol}0"
    text = format_compact_decimal(number, format_type="short", locale=locale, fraction_digits=places)
    if show_zero_decimals and places > 0:
        match = _COMPACT_PARTS.match(text)
        if match:
            whole, fraction, rest = match.groups()
            text = f"{whole}.{(fraction or '').ljust(places, '0')}{rest}"
    return f"{symbol}{text}"


def format_plain(value, symbol: str = "") -> str:
    number = _finite(value)
    if number is None:
        return f"{symbol}0"
    return f"{symbol}{Decimal(to_fixed(number, 0)):,f}"


def format_with_denomination(
    value,
    format: str = NONE,
    currency_symbol: str = "",
    decimal_places: int = 1,
    show_zero_decimals: bool = False,
) -> str:
    if format == NONE:
        return format_plain(value, currency_symbol)
    if format == INDIAN:
        return format_indian(value, currency_symbol, decimal_places, show_zero_decimals)
    if format == COMPACT:
        return format_compact(value, currency_symbol, decimal_places, show_zero_decimals)
    return format_international(value, currency_symbol, decimal_places, show_zero_decimals)


def format_previews(value, currency_symbol: str = "$") -> Dict[str, str]:
    return {f: format_with_denomination(value, f, currency_symbol) for f in DENOMINATION_FORMATS}


def format_currency(
    amount,
    currency: Optional[Currency] = None,
    min_fraction_digits: int = 2,
    max_fraction_digits: int = 2,
) -> str:
    """Grouped amount with the currency symbol, e.g. ``$1,234.56``."""
    symbol = (currency or CURRENCIES[0]).symbol
    number = _finite(amount)
    if number is None:
        return f"{symbol}0"
    text = f"{Decimal(to_fixed(number, max_fraction_digits)):,f}"
    if "." in text and max_fraction_digits > min_fraction_digits:
        whole, fraction = text.split(".")
        fraction = fraction.rstrip("0").ljust(min_fraction_digits, "0")
        text = f"{whole}.{fraction}" if fraction else whole
    return f"{symbol}{text}"
