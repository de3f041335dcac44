from datetime import datetime
from typing import Callable, Dict, List, NamedTuple

from ledger.categories import label
from ledger.domain import ZERO
from ledger.evaluator import GoalKind, budget_status, goal_progress

__all__ = [
    'event_bus', 'Event', 'EventBus',
    'TRANSACTION_ADDED', 'TRANSACTION_UPDATED', 'BUDGET_ALERT', 'GOAL_ALERT',
    'check_budget_handler', 'check_expense_limit_handler', 'register_default_handlers',
]


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event, dict], dict]


class EventBus:
    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def publish(self, name: str, payload: dict) -> List[dict]:
        if name not in self._subscribers:
            return []

        event = Event(name=name, ts=datetime.now().isoformat(), payload=payload)
        return [handler(event, payload) for handler in list(self._subscribers[name])]

    def unsubscribe(self, name: str, handler: Handler) -> None:
        if handler in self._subscribers.get(name, []):
            self._subscribers[name].remove(handler)


TRANSACTION_ADDED = "TRANSACTION_ADDED"
TRANSACTION_UPDATED = "TRANSACTION_UPDATED"
BUDGET_ALERT = "BUDGET_ALERT"
GOAL_ALERT = "GOAL_ALERT"


def check_budget_handler(event: Event, payload: dict) -> dict:
    budget = payload.get("budget")
    if budget is None or not budget.alerts_enabled:
        return {}

    status = budget_status(budget, payload.get("spent", ZERO))
    if status.overspent:
        return {
            "kind": "budget",
            "alert": f"Budget exceeded for {label(budget.category)}: {status.spent} / {status.limit}",
            "budget_id": budget.id,
            "category": budget.category.value,
            "spent": status.spent,
            "limit": status.limit,
            "over_budget": -status.remaining,
        }
    return {"spent": status.spent}


def check_expense_limit_handler(event: Event, payload: dict) -> dict:
    goals = payload.get("goals")
    summary = payload.get("summary")
    # goals that were never configured raise nothing
    if goals is None or summary is None or goals.is_empty:
        return {}

    progress = goal_progress(goals.monthly_expense_limit, summary.expenses, GoalKind.CEILING)
    if not progress.achieved:
        return {
            "kind": "goal",
            "alert": f"Monthly expense limit exceeded: {progress.current} / {progress.target}",
            "spent": progress.current,
            "limit": progress.target,
        }
    return {}


def register_default_handlers(bus: "EventBus") -> None:
    for name in (TRANSACTION_ADDED, TRANSACTION_UPDATED):
        bus.subscribe(name, check_budget_handler)
        bus.subscribe(name, check_expense_limit_handler)


event_bus = EventBus()
register_default_handlers(event_bus)
