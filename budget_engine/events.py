from datetime import datetime
from typing import Callable, Dict, List, Mapping, NamedTuple

from budget_engine.allocation import BucketSummary
from budget_engine.domain import Expense

__all__ = [
    'event_bus', 'EXPENSE_ADDED', 'Event', 'EventBus',
    'bucket_alert_handler', 'limit_alert_handler', 'register_default_handlers', 'expense_alerts',
]

EXPENSE_ADDED = "EXPENSE_ADDED"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, [])
        if handler not in self._subscribers[name]:
            self._subscribers[name].append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in self._subscribers.get(name, [])]


# payload: {"expense": Expense, "buckets": {bucket: BucketSummary}, "symbol": str}

def bucket_alert_handler(event: Event, payload: dict) -> dict:
    expense: Expense = payload["expense"]
    summary = payload["buckets"].get(expense.bucket)
    if summary is None or not summary.is_over_budget:
        return {}
    symbol = payload.get("symbol", "")
    return {
        "alert": f"{expense.bucket} is over budget: {symbol}{summary.spent:,.0f} of {symbol}{summary.target:,.0f}",
        "bucket": expense.bucket,
        "spent": summary.spent,
        "target": summary.target,
    }


def limit_alert_handler(event: Event, payload: dict) -> dict:
    expense: Expense = payload["expense"]
    summary = payload["buckets"].get(expense.bucket)
    if summary is None:
        return {}
    wanted = expense.subcategory.strip().casefold()
    for row in summary.categories:
        if row.name.strip().casefold() == wanted and row.is_over_limit:
            symbol = payload.get("symbol", "")
            return {
                "alert": f"{row.name} is over its limit: {symbol}{row.spent:,.0f} of {symbol}{row.limit:,.0f}",
                "category_id": row.category_id,
                "spent": row.spent,
                "limit": row.limit,
            }
    return {}


def register_default_handlers(bus: EventBus) -> EventBus:
    bus.subscribe(EXPENSE_ADDED, bucket_alert_handler)
    bus.subscribe(EXPENSE_ADDED, limit_alert_handler)
    return bus


def expense_alerts(
    bus: EventBus, expense: Expense, buckets: Mapping[str, BucketSummary], symbol: str = ""
) -> List[str]:
    results = bus.publish(EXPENSE_ADDED, {"expense": expense, "buckets": buckets, "symbol": symbol})
    return [r["alert"] for r in results if r.get("alert")]


event_bus = register_default_handlers(EventBus())
