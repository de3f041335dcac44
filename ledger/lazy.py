from decimal import Decimal
from typing import Callable, Iterable, Iterator, Tuple

from ledger.aggregation import by_category
from ledger.categories import TransactionType, label
from ledger.domain import Transaction


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t


def matches_term(term: str) -> Callable[[Transaction], bool]:
    """Case-insensitive match on description or category label."""
    needle = term.strip().lower()

    def _filter(t: Transaction) -> bool:
        if not needle:
            return True
        return needle in t.description.lower() or needle in label(t.category).lower()

    return _filter


def search(trans: Iterable[Transaction], term: str) -> Iterator[Transaction]:
    return iter_transactions(trans, matches_term(term))


def lazy_top_categories(
    trans: Iterable[Transaction], k: int, tx_type: TransactionType = TransactionType.EXPENSE
) -> Iterator[Tuple[str, Decimal]]:
    """Yield (label, total) for the ``k`` largest categories of one type."""
    ordered = sorted(by_category(trans, tx_type), key=lambda item: item.total, reverse=True)

    for item in ordered[: max(0, k)]:
        yield label(item.category), item.total
