from datetime import datetime

from budget_engine.allocation import allocate
from budget_engine.domain import BudgetRule, Category, Expense
from budget_engine.events import (
    EXPENSE_ADDED,
    Event,
    EventBus,
    bucket_alert_handler,
    expense_alerts,
    limit_alert_handler,
    register_default_handlers,
)

CATS = (
    Category("groceries", "Groceries", "🛒", "Needs"),
    Category("dining", "Dining Out", "🍽️", "Wants"),
)


def make_payload(expense, records, limits=None, use_limit_mode=False):
    buckets = allocate(1000, BudgetRule(50, 30, 20), records, CATS, limits, use_limit_mode)
    return {"expense": expense, "buckets": buckets, "symbol": "$"}


def test_subscribe_publish_unsubscribe():
    bus = EventBus()
    seen = []

    def handler(event: Event, payload: dict) -> dict:
        seen.append(event.name)
        return {"ok": True}

    bus.subscribe(EXPENSE_ADDED, handler)
    bus.subscribe(EXPENSE_ADDED, handler)
    assert bus.publish(EXPENSE_ADDED, {}) == [{"ok": True}]
    bus.unsubscribe(EXPENSE_ADDED, handler)
    assert bus.publish(EXPENSE_ADDED, {}) == []
    assert bus.publish("UNKNOWN", {}) == []
    assert seen == [EXPENSE_ADDED]


def test_bucket_alert_only_when_over_budget():
    event = Event(EXPENSE_ADDED, datetime.now().isoformat(), {})
    small = Expense("a", "Snack", 50, "Wants", "Dining Out", "2025-01-01")
    assert bucket_alert_handler(event, make_payload(small, (small,))) == {}

    big = Expense("b", "Feast", 250, "Wants", "Dining Out", "2025-01-01")
    result = bucket_alert_handler(event, make_payload(big, (big,)))
    assert result["bucket"] == "Wants"
    assert result["alert"] == "Wants is over budget: $250 of $200"


def test_limit_alert_uses_case_insensitive_category_match():
    event = Event(EXPENSE_ADDED, datetime.now().isoformat(), {})
    e = Expense("a", "Market", 120, "Needs", "groceries", "2025-01-01")
    payload = make_payload(e, (e,), {"groceries": 100}, use_limit_mode=True)
    result = limit_alert_handler(event, payload)
    assert result["category_id"] == "groceries"
    assert result["limit"] == 100

    assert limit_alert_handler(event, make_payload(e, (e,))) == {}


def test_expense_alerts_collects_messages():
    bus = register_default_handlers(EventBus())
    e = Expense("a", "Market", 120, "Needs", "Groceries", "2025-01-01")
    payload = make_payload(e, (e,), {"groceries": 100}, use_limit_mode=True)
    alerts = expense_alerts(bus, e, payload["buckets"], "$")
    assert alerts == [
        "Needs is over budget: $120 of $100",
        "Groceries is over its limit: $120 of $100",
    ]
