import logging
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from budget_engine.allocation import allocate, overall, total_income
from budget_engine.analytics import category_spending
from budget_engine.domain import Expense
from budget_engine.functional import validate_budget_rule, validate_expense
from budget_engine.goals import savings_progress
from budget_engine.periods import filter_by_month
from budget_engine.settings import BudgetConfig

logger = logging.getLogger(__name__)

Validator = Callable[[str, BudgetConfig, Sequence[Expense]], Sequence[str]]
Calculator = Callable[..., Dict[str, Any]]


class BudgetService:
    """Facade that builds a monthly budget report from injected validators and calculators.

    validators: functions taking (month, config, month_expenses) -> list of warning messages
    calculators: functions taking (month, config, month_expenses, all_expenses, acc, today) -> dict
    (partial results, merged into ``acc`` in order so later calculators can read earlier output)
    """

    def __init__(self, validators: Sequence[Validator], calculators: Sequence[Calculator]):
        self.validators = validators
        self.calculators = calculators

    def monthly_report(
        self,
        month: str,
        config: BudgetConfig,
        expenses: Iterable[Expense],
        today: Optional[date] = None,
    ) -> Dict[str, Any]:
        all_expenses = tuple(expenses)
        month_expenses = filter_by_month(all_expenses, month)
        report = {
            "month": month,
            "validation": [],
            "steps": [],
            "result": {},
        }

        for v in self.validators:
            name = getattr(v, "__name__", str(v))
            try:
                msgs = list(v(month, config, month_expenses))
            except Exception as e:
                logger.exception("validator %s failed", name)
                msgs = [f"validator_error: {e}"]
            report["validation"].append({"validator": name, "messages": msgs})

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            out = calc(month, config, month_expenses, all_expenses, acc, today)
            report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            if isinstance(out, dict):
                acc.update(out)

        report["result"] = acc
        return report

    def warnings(self, report: Dict[str, Any]) -> List[str]:
        return [m for entry in report["validation"] for m in entry["messages"]]


def rule_total_validator(month, config, expenses):
    if config.use_limit_mode:
        return []
    checked = validate_budget_rule(config.rule)
    return [] if checked.is_right() else [checked.error["message"]]


def expense_validator(month, config, expenses):
    results = (validate_expense(e, config.categories) for e in expenses)
    return [r.error["message"] for r in results if r.is_left()]


def income_validator(month, config, expenses):
    if config.use_limit_mode:
        return []
    if config.monthly_income < 0:
        return ["Monthly income cannot be negative"]
    if config.monthly_income == 0:
        return ["Monthly income is not set"]
    return []


def income_calculator(month, config, expenses, all_expenses, acc, today):
    return {"income": total_income(config.monthly_income, config.additional_income, month)}


def allocation_calculator(month, config, expenses, all_expenses, acc, today):
    income = acc.get("income", config.monthly_income)
    buckets = allocate(income, config.rule, expenses, config.categories,
                       config.category_limits, config.use_limit_mode)
    return {"buckets": buckets, "overall": overall(buckets)}


def spending_calculator(month, config, expenses, all_expenses, acc, today):
    return {"spending": category_spending(expenses, config.categories)}


def savings_calculator(month, config, expenses, all_expenses, acc, today):
    return {"goals": savings_progress(config.savings_goals, config.categories, all_expenses, expenses, today)}


def default_budget_service() -> BudgetService:
    return BudgetService(
        validators=[rule_total_validator, income_validator, expense_validator],
        calculators=[income_calculator, allocation_calculator, spending_calculator, savings_calculator],
    )
