"""Budget allocation: per-bucket targets and per-bucket / per-category spending.

Everything here is a pure function of its arguments. Inputs are read-only
tuples and mappings; results are frozen dataclasses.
"""
import math
from dataclasses import dataclass
from typing import Dict, Iterable, Mapping, Optional, Tuple

from budget_engine.domain import BUCKETS, AdditionalIncome, BudgetRule, Category, Expense
from budget_engine.periods import filter_by_month


@dataclass(frozen=True)
class CategoryBreakdown:
    category_id: str
    name: str
    icon: str
    spent: float
    limit: Optional[float]
    is_over_limit: bool
    percent_of_limit: float


@dataclass(frozen=True)
class BucketSummary:
    bucket: str
    target: float
    spent: float
    remaining: float
    percent_used: float  # clamped to 100 for progress bars
    raw_percent: float   # unclamped, > 100 when over budget
    categories: Tuple[CategoryBreakdown, ...] = ()

    @property
    def is_over_budget(self) -> bool:
        return self.remaining < 0


def safe_amount(value) -> float:
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return 0.0
    return amount if math.isfinite(amount) else 0.0


def ratio_percent(part: float, whole: float) -> float:
    if not whole or whole <= 0 or not math.isfinite(whole):
        return 0.0
    return safe_amount(part) * 100 / whole


def status_band(percent: float) -> str:
    if percent < 85:
        return "ok"
    if percent < 100:
        return "warning"
    return "over"


def total_income(
    monthly_income: float,
    additional: Iterable[AdditionalIncome] = (),
    month: Optional[str] = None,
) -> float:
    """Monthly income plus additional income dated in ``month``."""
    extra = filter_by_month(additional, month) if month else tuple(additional)
    return safe_amount(monthly_income) + sum(safe_amount(i.amount) for i in extra)


def bucket_target(
    bucket: str,
    income: float,
    rule: BudgetRule,
    cats: Iterable[Category] = (),
    category_limits: Optional[Mapping[str, float]] = None,
    use_limit_mode: bool = False,
) -> float:
    if use_limit_mode:
        limits = category_limits or {}
        return sum(safe_amount(limits.get(c.id, 0)) for c in cats if c.bucket == bucket)
    return safe_amount(income) * rule.percentage(bucket) / 100


def spent_by_bucket(records: Iterable[Expense]) -> Dict[str, float]:
    totals = {b: 0.0 for b in BUCKETS}
    for e in records:
        if e.bucket in totals:
            totals[e.bucket] += safe_amount(e.amount)
    return totals


def spent_by_category(records: Iterable[Expense], name: str) -> float:
    wanted = name.strip().casefold()
    return sum(safe_amount(e.amount) for e in records if (e.subcategory or "").strip().casefold() == wanted)


def category_breakdown(
    bucket: str,
    records: Iterable[Expense],
    cats: Iterable[Category],
    category_limits: Optional[Mapping[str, float]] = None,
    use_limit_mode: bool = False,
) -> Tuple[CategoryBreakdown, ...]:
    """One row per configured category of ``bucket``, zero-spent rows included."""
    records = tuple(e for e in records if e.bucket == bucket)
    limits = category_limits or {}
    rows = []
    for c in cats:
        if c.bucket != bucket:
            continue
        spent = spent_by_category(records, c.name)
        limit = safe_amount(limits.get(c.id, 0)) if use_limit_mode else None
        has_limit = limit is not None and limit > 0
        rows.append(CategoryBreakdown(
            category_id=c.id,
            name=c.name,
            icon=c.icon,
            spent=spent,
            limit=limit,
            is_over_limit=has_limit and spent > limit,
            percent_of_limit=ratio_percent(spent, limit) if has_limit else 0.0,
        ))
    return tuple(rows)


def summarize_bucket(
    bucket: str,
    income: float,
    rule: BudgetRule,
    records: Iterable[Expense],
    cats: Iterable[Category],
    category_limits: Optional[Mapping[str, float]] = None,
    use_limit_mode: bool = False,
) -> BucketSummary:
    records = tuple(records)
    cats = tuple(cats)
    target = bucket_target(bucket, income, rule, cats, category_limits, use_limit_mode)
    spent = spent_by_bucket(records).get(bucket, 0.0)
    raw = ratio_percent(spent, target)
    return BucketSummary(
        bucket=bucket,
        target=target,
        spent=spent,
        remaining=target - spent,
        percent_used=min(100.0, raw),
        raw_percent=raw,
        categories=category_breakdown(bucket, records, cats, category_limits, use_limit_mode),
    )


def allocate(
    income: float,
    rule: BudgetRule,
    records: Iterable[Expense],
    cats: Iterable[Category] = (),
    category_limits: Optional[Mapping[str, float]] = None,
    use_limit_mode: bool = False,
) -> Dict[str, BucketSummary]:
    """Summaries for Needs, Savings and Wants, in that order.

    Each bucket's target is computed on its own, so a rule that does not add
    up to 100 still gives well-defined numbers. Records whose bucket is not
    one of the three are ignored.
    """
    records = tuple(records)
    cats = tuple(cats)
    return {
        b: summarize_bucket(b, income, rule, records, cats, category_limits, use_limit_mode)
        for b in BUCKETS
    }


def overall(summaries: Mapping[str, BucketSummary]) -> Dict[str, float]:
    target = sum(s.target for s in summaries.values())
    spent = sum(s.spent for s in summaries.values())
    raw = ratio_percent(spent, target)
    return {
        "target": target,
        "spent": spent,
        "remaining": target - spent,
        "percent_used": min(100.0, raw),
        "raw_percent": raw,
    }
