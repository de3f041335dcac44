from __future__ import annotations

from typing import Iterable, List

import pandas as pd

from ledger.aggregation import PeriodSummary
from ledger.domain import Transaction
from ledger.formatting import round_for_display

EXPORT_COLUMNS = ["date", "type", "category", "description", "amount"]
TREND_COLUMNS = ["period", "income", "expenses", "balance", "count"]


def transactions_frame(trans: Iterable[Transaction]) -> pd.DataFrame:
    rows = [
        {
            "date": t.date.isoformat(),
            "type": t.type.value,
            "category": t.category.value,
            "description": t.description,
            # strings keep the two decimals exactly as displayed
            "amount": f"{round_for_display(t.amount):.2f}",
        }
        for t in trans
    ]
    return pd.DataFrame(rows, columns=EXPORT_COLUMNS)


def export_transactions(trans: Iterable[Transaction], sep: str = ",") -> str:
    """Delimited text table of the given (already partitioned) transactions.

    An empty input still produces the header line.
    """
    return transactions_frame(trans).to_csv(index=False, sep=sep, lineterminator="\n")


def export_filename(month: int, year: int) -> str:
    return f"transactions_{month}_{year}.csv"


def trend_frame(summaries: List[PeriodSummary]) -> pd.DataFrame:
    rows = [
        {
            "period": f"{s.period.year}-{s.period.month:02d}" if s.period else "",
            "income": float(s.income),
            "expenses": float(s.expenses),
            "balance": float(s.balance),
            "count": s.count,
        }
        for s in summaries
    ]
    return pd.DataFrame(rows, columns=TREND_COLUMNS)
