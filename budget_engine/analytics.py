from collections import defaultdict
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Iterator, List, Tuple

from budget_engine.allocation import ratio_percent, safe_amount
from budget_engine.domain import BUCKETS, WANTS, Category, Expense
from budget_engine.functional import find_category
from budget_engine.periods import month_key

UNKNOWN_ICON = "📝"


@dataclass(frozen=True)
class CategorySpending:
    category_id: str
    name: str
    icon: str
    bucket: str
    amount: float
    percentage: float  # share of total spend in the period


def iter_expenses(
    records: Iterable[Expense], pred: Callable[[Expense], bool]
) -> Iterator[Expense]:
    for e in records:
        if pred(e):
            yield e


def category_spending(records: Iterable[Expense], cats: Tuple[Category, ...]) -> List[CategorySpending]:
    """Spend per subcategory, largest first.

    Subcategories are matched to the registry case-insensitively; names with
    no registered category are reported under their own name as Wants.
    """
    totals: Dict[str, float] = defaultdict(float)
    labels: Dict[str, str] = {}
    for e in records:
        key = (e.subcategory or "").strip().casefold()
        totals[key] += safe_amount(e.amount)
        labels.setdefault(key, (e.subcategory or "").strip())

    grand_total = sum(totals.values())
    rows = []
    for key, amount in totals.items():
        label = labels[key]
        cat = find_category(cats, label).get_or_else(Category(label, label, UNKNOWN_ICON, WANTS))
        rows.append(CategorySpending(
            category_id=cat.id,
            name=cat.name,
            icon=cat.icon,
            bucket=cat.bucket,
            amount=amount,
            percentage=ratio_percent(amount, grand_total),
        ))
    return sorted(rows, key=lambda r: r.amount, reverse=True)


def top_categories(records: Iterable[Expense], cats: Tuple[Category, ...], k: int) -> Iterator[CategorySpending]:
    for row in category_spending(records, cats)[: max(0, k)]:
        yield row


def share_of(rows: Iterable[CategorySpending]) -> List[Tuple[CategorySpending, float]]:
    """Each row's percentage of the rows' own total, for pie charts of a top-N slice."""
    rows = list(rows)
    subtotal = sum(r.amount for r in rows)
    return [(r, ratio_percent(r.amount, subtotal)) for r in rows]


def monthly_totals(records: Iterable[Expense], months: Iterable[str]) -> Dict[str, Dict[str, float]]:
    """Per-bucket spend for each requested month key; months with no records are all zero."""
    result = {m: {b: 0.0 for b in BUCKETS} for m in months}
    for e in records:
        key = month_key(e.date)
        if key in result and e.bucket in BUCKETS:
            result[key][e.bucket] += safe_amount(e.amount)
    return result
