from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from ledger.domain import ZERO, Budget, to_decimal

ONE = Decimal("1")


class GoalKind(str, Enum):
    ACCUMULATION = "accumulation"  # income, savings: reach or exceed
    CEILING = "ceiling"            # expense limit: stay at or under


@dataclass(frozen=True)
class BudgetStatus:
    spent: Decimal
    limit: Decimal
    remaining: Decimal
    consumption_ratio: Decimal  # clamped to [0, 1] for progress bars
    raw_ratio: Decimal
    overspent: bool


@dataclass(frozen=True)
class GoalProgress:
    current: Decimal
    target: Decimal
    ratio: Decimal
    achieved: bool
    active: bool  # False only for an unset accumulation goal

    @property
    def display_ratio(self) -> Decimal:
        return _clamp(self.ratio)


def _clamp(value: Decimal) -> Decimal:
    return min(max(value, ZERO), ONE)


def budget_status(budget: Budget, spent) -> BudgetStatus:
    spent = to_decimal(spent, "spent")
    limit = budget.monthly_limit
    # a zero limit is a placeholder budget, never "overspent"
    raw = spent / limit if limit > 0 else ZERO
    return BudgetStatus(
        spent=spent,
        limit=limit,
        remaining=limit - spent,
        consumption_ratio=_clamp(raw),
        raw_ratio=raw,
        overspent=limit > 0 and spent > limit,
    )


def goal_progress(target, actual, kind: GoalKind) -> GoalProgress:
    """Progress of one goal.

    A zero accumulation target means no goal: ratio 0, ``active`` False, and
    callers should hide it. A zero ceiling is a real limit that any spend
    breaks.
    """
    target = to_decimal(target, "target")
    actual = to_decimal(actual, "actual")
    ratio = actual / target if target > 0 else ZERO

    if kind == GoalKind.CEILING:
        return GoalProgress(current=actual, target=target, ratio=ratio,
                            achieved=actual <= target, active=True)

    return GoalProgress(current=actual, target=target, ratio=ratio,
                        achieved=actual >= target, active=target > 0)
