"""Runtime settings and persisted budget configuration.

Paths come from environment variables; the budget configuration itself is a
frozen ``BudgetConfig`` that callers pass into every calculation. Loading
never fails: a missing or unreadable file yields the defaults.
"""
import json
import logging
import os
from dataclasses import dataclass, field, replace
from functools import lru_cache
from pathlib import Path
from typing import Dict, Optional, Tuple

from budget_engine.categories import DEFAULT_CATEGORIES
from budget_engine.domain import (
    BUCKETS,
    AdditionalIncome,
    BudgetRule,
    Category,
    Currency,
    Expense,
    OnboardingState,
    SavingsGoal,
    currency_by_code,
)
from budget_engine.formatting import DENOMINATION_FORMATS, INDIAN
from budget_engine.store import expense_from_dict, expense_to_dict, normalize_date

logger = logging.getLogger(__name__)


class Settings:
    def __init__(self, data_dir: Path, state_file: Path, sample_file: Path, log_level: str) -> None:
        self.data_dir = data_dir
        self.state_file = state_file
        self.sample_file = sample_file
        self.log_level = log_level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    data_dir = Path(os.getenv("BUDGET_DATA_DIR", "./data")).resolve()
    state_file = Path(os.getenv("BUDGET_SETTINGS_FILE", data_dir / "budget.json"))
    sample_file = Path(os.getenv("BUDGET_SAMPLE_FILE", data_dir / "sample.json"))
    log_level = os.getenv("BUDGET_LOG_LEVEL", "INFO").upper()
    return Settings(data_dir=data_dir, state_file=state_file, sample_file=sample_file, log_level=log_level)


@dataclass(frozen=True)
class BudgetConfig:
    monthly_income: float = 0.0
    rule: BudgetRule = BudgetRule()
    categories: Tuple[Category, ...] = DEFAULT_CATEGORIES
    category_limits: Dict[str, float] = field(default_factory=dict)
    use_limit_mode: bool = False
    savings_goals: Dict[str, SavingsGoal] = field(default_factory=dict)
    additional_income: Tuple[AdditionalIncome, ...] = ()
    currency: Currency = currency_by_code("INR")
    denomination_format: str = INDIAN
    category_sort: str = "name_asc"
    onboarding: OnboardingState = OnboardingState.NOT_ONBOARDED


def needs_onboarding(config: BudgetConfig) -> bool:
    return config.onboarding is OnboardingState.NOT_ONBOARDED


def complete_onboarding(config: BudgetConfig) -> BudgetConfig:
    return replace(config, onboarding=OnboardingState.ONBOARDED)


def config_to_dict(config: BudgetConfig) -> dict:
    return {
        "monthly_income": config.monthly_income,
        "rule": {"needs": config.rule.needs, "savings": config.rule.savings, "wants": config.rule.wants},
        "categories": [
            {"id": c.id, "name": c.name, "icon": c.icon, "bucket": c.bucket} for c in config.categories
        ],
        "category_limits": dict(config.category_limits),
        "use_limit_mode": config.use_limit_mode,
        "savings_goals": {
            cat_id: {"amount": g.amount, "target_date": g.target_date, "note": g.note}
            for cat_id, g in config.savings_goals.items()
        },
        "additional_income": [
            {"id": i.id, "description": i.description, "amount": i.amount, "date": i.date}
            for i in config.additional_income
        ],
        "currency": config.currency.code,
        "denomination_format": config.denomination_format,
        "category_sort": config.category_sort,
        "onboarding": config.onboarding.value,
    }


def _parse_categories(raw) -> Tuple[Category, ...]:
    if not isinstance(raw, list):
        return DEFAULT_CATEGORIES
    cats = []
    seen = set()
    for item in raw:
        try:
            if item["bucket"] not in BUCKETS:
                raise ValueError(item["bucket"])
            cat = Category(str(item["id"]), str(item["name"]), str(item.get("icon", "")), item["bucket"])
        except (KeyError, TypeError, ValueError):
            logger.warning("skipping malformed category %r", item)
            continue
        if cat.id in seen:
            logger.warning("skipping category %r, id already taken", cat.name)
            continue
        seen.add(cat.id)
        cats.append(cat)
    return tuple(cats)


def _parse_goals(raw) -> Dict[str, SavingsGoal]:
    if not isinstance(raw, dict):
        return {}
    goals = {}
    for cat_id, item in raw.items():
        try:
            goals[str(cat_id)] = SavingsGoal(
                amount=float(item["amount"]),
                target_date=item.get("target_date"),
                note=item.get("note"),
            )
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("skipping malformed savings goal for %r", cat_id)
    return goals


def _parse_income(raw) -> Tuple[AdditionalIncome, ...]:
    if not isinstance(raw, list):
        return ()
    items = []
    for item in raw:
        try:
            items.append(AdditionalIncome(
                id=str(item["id"]),
                description=str(item.get("description", "")),
                amount=float(item["amount"]),
                date=normalize_date(item["date"]),
            ))
        except (KeyError, TypeError, ValueError, AttributeError):
            logger.warning("skipping malformed income item %r", item)
    return tuple(items)


def _parse_limits(raw) -> Dict[str, float]:
    if not isinstance(raw, dict):
        return {}
    limits = {}
    for cat_id, value in raw.items():
        try:
            limits[str(cat_id)] = float(value)
        except (TypeError, ValueError):
            logger.warning("skipping malformed limit for %r", cat_id)
    return limits


def config_from_dict(data: dict) -> BudgetConfig:
    defaults = BudgetConfig()
    rule_raw = data.get("rule") if isinstance(data.get("rule"), dict) else {}
    try:
        rule = BudgetRule(
            needs=int(rule_raw.get("needs", defaults.rule.needs)),
            savings=int(rule_raw.get("savings", defaults.rule.savings)),
            wants=int(rule_raw.get("wants", defaults.rule.wants)),
        )
    except (TypeError, ValueError):
        logger.warning("malformed budget rule %r, using defaults", rule_raw)
        rule = defaults.rule
    try:
        income = float(data.get("monthly_income", defaults.monthly_income))
    except (TypeError, ValueError):
        income = defaults.monthly_income
    try:
        onboarding = OnboardingState(data.get("onboarding", defaults.onboarding.value))
    except ValueError:
        onboarding = defaults.onboarding
    denomination = data.get("denomination_format", defaults.denomination_format)
    return BudgetConfig(
        monthly_income=income,
        rule=rule,
        categories=_parse_categories(data.get("categories")),
        category_limits=_parse_limits(data.get("category_limits")),
        use_limit_mode=data.get("use_limit_mode") is True,
        savings_goals=_parse_goals(data.get("savings_goals")),
        additional_income=_parse_income(data.get("additional_income")),
        currency=currency_by_code(data.get("currency", defaults.currency.code)),
        denomination_format=denomination if denomination in DENOMINATION_FORMATS else defaults.denomination_format,
        category_sort=str(data.get("category_sort", defaults.category_sort)),
        onboarding=onboarding,
    )


def load_state(path: Optional[Path] = None) -> Tuple[BudgetConfig, Tuple[Expense, ...]]:
    target = Path(path or get_settings().state_file)
    if not target.exists():
        return BudgetConfig(), ()
    try:
        with target.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("could not read %s (%s), falling back to defaults", target, exc)
        return BudgetConfig(), ()
    if not isinstance(data, dict):
        logger.warning("%s does not hold an object, falling back to defaults", target)
        return BudgetConfig(), ()
    config = config_from_dict(data.get("config") if isinstance(data.get("config"), dict) else {})
    raw_expenses = data.get("expenses") if isinstance(data.get("expenses"), list) else []
    expenses = tuple(
        e for e in (expense_from_dict(r) for r in raw_expenses if isinstance(r, dict)) if e is not None
    )
    return config, expenses


def save_state(config: BudgetConfig, expenses: Tuple[Expense, ...], path: Optional[Path] = None) -> None:
    target = Path(path or get_settings().state_file)
    target.parent.mkdir(parents=True, exist_ok=True)
    payload = {
        "config": config_to_dict(config),
        "expenses": [expense_to_dict(e) for e in expenses],
    }
    with target.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=True, ensure_ascii=False)
