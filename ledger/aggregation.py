from dataclasses import dataclass
from decimal import Decimal
from functools import reduce
from typing import Dict, Iterable, List, Optional, Sequence

from ledger.categories import Category, TransactionType
from ledger.domain import ZERO, Transaction
from ledger.periods import Period, partition


@dataclass(frozen=True)
class PeriodSummary:
    income: Decimal
    expenses: Decimal
    balance: Decimal
    count: int
    period: Optional[Period] = None


@dataclass(frozen=True)
class CategoryTotal:
    category: Category
    total: Decimal


def _total(trans: Iterable[Transaction], tx_type: TransactionType) -> Decimal:
    return reduce(lambda acc, t: acc + t.amount if t.type == tx_type else acc, trans, ZERO)


def summarize(trans: Sequence[Transaction], period: Optional[Period] = None) -> PeriodSummary:
    """Income, expenses and balance of an already period-filtered set.

    Amounts are summed unrounded; rounding belongs to presentation.
    """
    trans = tuple(trans)
    income = _total(trans, TransactionType.INCOME)
    expenses = _total(trans, TransactionType.EXPENSE)
    return PeriodSummary(
        income=income,
        expenses=expenses,
        balance=income - expenses,
        count=len(trans),
        period=period,
    )


def by_category(trans: Iterable[Transaction], tx_type: TransactionType) -> List[CategoryTotal]:
    """Per-category totals for one type, in order of first appearance."""
    totals: Dict[Category, Decimal] = {}
    for t in trans:
        if t.type == tx_type:
            totals[t.category] = totals.get(t.category, ZERO) + t.amount
    return [CategoryTotal(category=c, total=v) for c, v in totals.items()]


def trend(trans: Sequence[Transaction], periods: Iterable[Period]) -> List[PeriodSummary]:
    """Summaries for the supplied periods, in the order supplied.

    Callers build the period list (see ``periods.periods_ending``).
    """
    trans = tuple(trans)
    return [summarize(partition(trans, p.month, p.year), period=Period(*p)) for p in periods]
