import json
import logging
from dataclasses import asdict, replace
from datetime import date, datetime, timedelta
from typing import Optional, Tuple
from uuid import uuid4

from budget_engine.domain import NEEDS, AdditionalIncome, Category, Expense

logger = logging.getLogger(__name__)

SAMPLE_PREFIX = "sample-"


def new_id() -> str:
    return str(uuid4())


def normalize_date(value) -> str:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day).isoformat()
    return str(value)


def add_expense(expenses: Tuple[Expense, ...], e: Expense) -> Tuple[Expense, ...]:
    # newest first
    return (replace(e, date=normalize_date(e.date)),) + expenses


def update_expense(expenses: Tuple[Expense, ...], expense_id: str, **updates) -> Tuple[Expense, ...]:
    updates.pop("id", None)
    if "date" in updates:
        updates["date"] = normalize_date(updates["date"])
    return tuple(replace(e, **updates) if e.id == expense_id else e for e in expenses)


def delete_expense(expenses: Tuple[Expense, ...], expense_id: str) -> Tuple[Expense, ...]:
    return tuple(e for e in expenses if e.id != expense_id)


def clear_sample_expenses(expenses: Tuple[Expense, ...]) -> Tuple[Expense, ...]:
    return tuple(e for e in expenses if not e.id.startswith(SAMPLE_PREFIX))


def has_sample_expenses(expenses: Tuple[Expense, ...]) -> bool:
    return any(e.id.startswith(SAMPLE_PREFIX) for e in expenses)


def sample_expenses(today: Optional[date] = None) -> Tuple[Expense, ...]:
    today = today or date.today()
    return (
        Expense("sample-1", "Rent", 1200, NEEDS, "Housing", normalize_date(today), "🏠"),
        Expense("sample-2", "Grocery Shopping", 185.5, NEEDS, "Groceries",
                normalize_date(today - timedelta(days=2)), "🛒"),
    )


def add_income(items: Tuple[AdditionalIncome, ...], item: AdditionalIncome) -> Tuple[AdditionalIncome, ...]:
    return items + (replace(item, date=normalize_date(item.date)),)


def update_income(items: Tuple[AdditionalIncome, ...], income_id: str, **updates) -> Tuple[AdditionalIncome, ...]:
    updates.pop("id", None)
    if "date" in updates:
        updates["date"] = normalize_date(updates["date"])
    return tuple(replace(i, **updates) if i.id == income_id else i for i in items)


def delete_income(items: Tuple[AdditionalIncome, ...], income_id: str) -> Tuple[AdditionalIncome, ...]:
    return tuple(i for i in items if i.id != income_id)


def expense_to_dict(e: Expense) -> dict:
    return asdict(e)


def expense_from_dict(data: dict) -> Optional[Expense]:
    try:
        return Expense(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            amount=float(data.get("amount", 0)),
            bucket=str(data.get("bucket") or data.get("category", "")),
            subcategory=str(data.get("subcategory", "")),
            date=normalize_date(data.get("date", "")),
            icon=str(data.get("icon", "")),
        )
    except (KeyError, TypeError, ValueError):
        logger.warning("skipping malformed expense record %r", data)
        return None


def load_seed(path: str) -> Tuple[Tuple[Category, ...], Tuple[Expense, ...]]:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    categories = tuple(Category(**c) for c in data.get("categories", []))
    expenses = tuple(
        e for e in (expense_from_dict(raw) for raw in data.get("expenses", [])) if e is not None
    )
    return categories, expenses
