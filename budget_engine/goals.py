"""Savings goals: monthly contribution planning, pacing and progress."""
import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, Iterable, Mapping, Optional, Tuple

from budget_engine.allocation import ratio_percent, safe_amount, spent_by_category
from budget_engine.domain import SAVINGS, Category, Expense, SavingsGoal
from budget_engine.functional import Maybe, Nothing, Some, parse_int

logger = logging.getLogger(__name__)

DEFAULT_HORIZON_MONTHS = 12


@dataclass(frozen=True)
class ContributionPlan:
    monthly_amount: float
    months_remaining: int
    goal_met: bool


@dataclass(frozen=True)
class GoalProgress:
    category_id: str
    name: str
    goal: SavingsGoal
    saved: float
    progress: float  # percent, clamped to 100, one decimal
    remaining: float
    complete: bool
    plan: ContributionPlan
    contributed_this_month: float
    status: str


def parse_target_date(text: Optional[str]) -> Maybe[Tuple[int, int]]:
    """``"MM/YYYY"`` -> ``Some((month, year))``; anything else -> ``Nothing()``."""
    if not text or not isinstance(text, str):
        return Nothing()
    parts = text.split("/")
    if len(parts) != 2:
        return Nothing()
    month = parse_int(parts[0]).get_or_else(None)
    year = parse_int(parts[1]).get_or_else(None)
    if month is None or year is None or not 1 <= month <= 12:
        return Nothing()
    return Some((month, year))


def _default_plan(outstanding: float) -> ContributionPlan:
    return ContributionPlan(outstanding / DEFAULT_HORIZON_MONTHS, DEFAULT_HORIZON_MONTHS, False)


def plan_monthly_contribution(
    target_amount: float,
    current_amount: float,
    target_date: Optional[str] = None,
    today: Optional[date] = None,
) -> ContributionPlan:
    target_amount = safe_amount(target_amount)
    current_amount = safe_amount(current_amount)
    if current_amount >= target_amount:
        return ContributionPlan(0, 0, True)

    outstanding = target_amount - current_amount
    if not target_date:
        return _default_plan(outstanding)

    parsed = parse_target_date(target_date)
    if parsed.is_none():
        logger.debug("unparseable goal target date %r, using %d-month horizon", target_date, DEFAULT_HORIZON_MONTHS)
        return _default_plan(outstanding)

    target_month, target_year = parsed.get_or_else((0, 0))
    today = today or date.today()
    months_remaining = (target_year - today.year) * 12 + (target_month - today.month)
    if months_remaining <= 0:
        return ContributionPlan(outstanding, 0, False)
    return ContributionPlan(outstanding / months_remaining, months_remaining, False)


def contribution_status(recommended: float, actual: float) -> str:
    # ahead at >= 110% of the plan, on track at >= 90%
    if actual * 10 >= recommended * 11:
        return "ahead"
    if actual * 10 >= recommended * 9:
        return "on-track"
    return "behind"


def set_goal(goals: Mapping[str, SavingsGoal], cat_id: str, goal: SavingsGoal) -> Dict[str, SavingsGoal]:
    return {**goals, cat_id: goal}


def update_goal(goals: Mapping[str, SavingsGoal], cat_id: str, **updates) -> Dict[str, SavingsGoal]:
    if cat_id not in goals:
        return dict(goals)
    return {**goals, cat_id: replace(goals[cat_id], **updates)}


def delete_goal(goals: Mapping[str, SavingsGoal], cat_id: str) -> Dict[str, SavingsGoal]:
    return {k: v for k, v in goals.items() if k != cat_id}


def goal_progress(
    category: Category,
    goal: SavingsGoal,
    saved: float,
    contributed_this_month: float = 0.0,
    today: Optional[date] = None,
) -> GoalProgress:
    saved = safe_amount(saved)
    amount = safe_amount(goal.amount)
    plan = plan_monthly_contribution(amount, saved, goal.target_date, today)
    return GoalProgress(
        category_id=category.id,
        name=category.name,
        goal=goal,
        saved=saved,
        progress=round(min(100.0, ratio_percent(saved, amount)), 1),
        remaining=max(0.0, amount - saved),
        complete=saved >= amount,
        plan=plan,
        contributed_this_month=contributed_this_month,
        status="ahead" if plan.goal_met else contribution_status(plan.monthly_amount, contributed_this_month),
    )


def savings_progress(
    goals: Mapping[str, SavingsGoal],
    cats: Iterable[Category],
    all_records: Iterable[Expense],
    month_records: Iterable[Expense] = (),
    today: Optional[date] = None,
) -> Tuple[GoalProgress, ...]:
    """Progress for every Savings category that has a goal.

    ``saved`` counts all Savings records ever filed under the category;
    the pacing status compares this month's contributions with the plan.
    """
    saved_records = tuple(e for e in all_records if e.bucket == SAVINGS)
    month_saved = tuple(e for e in month_records if e.bucket == SAVINGS)
    result = []
    for c in cats:
        if c.bucket != SAVINGS or c.id not in goals:
            continue
        result.append(goal_progress(
            c,
            goals[c.id],
            spent_by_category(saved_records, c.name),
            spent_by_category(month_saved, c.name),
            today,
        ))
    return tuple(result)
