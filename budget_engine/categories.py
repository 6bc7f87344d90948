import re
from typing import Iterable, Optional, Tuple

from budget_engine.domain import NEEDS, SAVINGS, WANTS, BUCKETS, Category

DEFAULT_CATEGORIES: Tuple[Category, ...] = (
    Category("housing", "Housing", "🏠", NEEDS),
    Category("work", "Work", "💼", NEEDS),
    Category("groceries", "Groceries", "🛒", NEEDS),
    Category("transportation", "Transportation", "🚗", NEEDS),
    Category("emergency", "Emergency Fund", "💰", SAVINGS),
    Category("investments", "Investments", "📈", SAVINGS),
    Category("dining", "Dining Out", "🍽️", WANTS),
    Category("shopping", "Shopping", "🛍️", WANTS),
    Category("entertainment", "Entertainment", "🎬", WANTS),
    Category("other", "Other", "💡", WANTS),
)

SORT_OPTIONS = ("type", "name_asc", "name_desc")


def category_id_for(name: str) -> str:
    return re.sub(r"\s+", "-", name.strip().lower())


def add_category(cats: Tuple[Category, ...], c: Category) -> Tuple[Category, ...]:
    if any(existing.id == c.id for existing in cats):
        raise ValueError(f"Category id {c.id!r} already exists")
    return cats + (c,)


def update_category(cats: Tuple[Category, ...], cat_id: str, **updates) -> Tuple[Category, ...]:
    updates.pop("id", None)
    return tuple(
        Category(
            id=c.id,
            name=updates.get("name", c.name),
            icon=updates.get("icon", c.icon),
            bucket=updates.get("bucket", c.bucket),
        )
        if c.id == cat_id else c
        for c in cats
    )


def delete_category(cats: Tuple[Category, ...], cat_id: str) -> Tuple[Category, ...]:
    return tuple(c for c in cats if c.id != cat_id)


def categories_in_bucket(cats: Iterable[Category], bucket: str) -> Tuple[Category, ...]:
    return tuple(c for c in cats if c.bucket == bucket)


def category_by_id(cats: Iterable[Category], cat_id: str) -> Optional[Category]:
    return next((c for c in cats if c.id == cat_id), None)


def sort_categories(cats: Iterable[Category], option: str = "name_asc") -> Tuple[Category, ...]:
    cats = tuple(cats)
    if option == "type":
        order = {b: i for i, b in enumerate(BUCKETS)}
        return tuple(sorted(cats, key=lambda c: (order.get(c.bucket, len(order)), c.name.casefold())))
    return tuple(sorted(cats, key=lambda c: c.name.casefold(), reverse=option == "name_desc"))


def search_categories(cats: Iterable[Category], query: str) -> Tuple[Category, ...]:
    q = (query or "").strip().casefold()
    if not q:
        return tuple(cats)
    return tuple(c for c in cats if q in c.name.casefold() or q in c.bucket.casefold())
