from __future__ import annotations

from datetime import date
from typing import Callable, Iterable, List, NamedTuple, Set, TypeVar

from ledger.categories import Category, TransactionType
from ledger.domain import Transaction

R = TypeVar("R")


class Period(NamedTuple):
    month: int  # 1 = January
    year: int

    def shift(self, months: int) -> "Period":
        """Move by a number of calendar months, crossing year boundaries."""
        total = self.year * 12 + (self.month - 1) + months
        return Period(month=total % 12 + 1, year=total // 12)

    def previous(self) -> "Period":
        return self.shift(-1)

    @classmethod
    def of(cls, day: date) -> "Period":
        return cls(month=day.month, year=day.year)


def partition(records: Iterable[R], month: int, year: int) -> List[R]:
    """Return the records (transactions or budgets) whose period is month/year.

    An out-of-range month matches nothing.
    """
    if not 1 <= month <= 12:
        return []
    return list(filter(by_period(month, year), records))


def distinct_periods(records: Iterable) -> Set[Period]:
    return {Period(r.month, r.year) for r in records}


def periods_ending(month: int, year: int, count: int) -> List[Period]:
    """``count`` consecutive periods, oldest first, the last one being month/year."""
    end = Period(month, year)
    return [end.shift(-offset) for offset in range(count - 1, -1, -1)]


def by_period(month: int, year: int) -> Callable[[object], bool]:
    def _filter(r) -> bool:
        return r.month == month and r.year == year

    return _filter


def by_type(tx_type: TransactionType) -> Callable[[Transaction], bool]:
    def _filter(t: Transaction) -> bool:
        return t.type == tx_type

    return _filter


def by_category(category: Category) -> Callable[[object], bool]:
    def _filter(r) -> bool:
        return r.category == category

    return _filter


def by_date_range(start: date, end: date) -> Callable[[Transaction], bool]:
    def _filter(t: Transaction) -> bool:
        return start <= t.date <= end

    return _filter
