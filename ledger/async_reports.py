import asyncio
from typing import Iterable, List, Sequence

from ledger.aggregation import PeriodSummary, summarize
from ledger.domain import Transaction
from ledger.periods import Period, partition


async def trend_async(trans: Sequence[Transaction], periods: Iterable[Period]) -> List[PeriodSummary]:
    """Same result as ``aggregation.trend``, one task per period.

    ``asyncio.gather`` keeps results in the order the periods were given.
    """
    trans = tuple(trans)

    async def period_summary(p: Period) -> PeriodSummary:
        subset = partition(trans, p.month, p.year)
        await asyncio.sleep(0)  # cooperate
        return summarize(subset, period=Period(*p))

    return list(await asyncio.gather(*(period_summary(p) for p in periods)))
