import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ledger.aggregation import PeriodSummary, by_category, summarize, trend
from ledger.categories import ExpenseCategory, TransactionType, label
from ledger.domain import ZERO, FinancialGoals, Profile, Transaction
from ledger.errors import OwnershipError
from ledger.evaluator import GoalKind, budget_status, goal_progress
from ledger.events import (
    BUDGET_ALERT,
    GOAL_ALERT,
    TRANSACTION_ADDED,
    TRANSACTION_UPDATED,
    EventBus,
    event_bus,
)
from ledger.lazy import search as search_transactions
from ledger.periods import Period, partition, periods_ending
from ledger.reports import export_transactions
from ledger.store import LedgerStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PeriodContext:
    period: Period
    transactions: tuple
    budgets: tuple
    goals: FinancialGoals


def expense_totals(trans: Iterable[Transaction]) -> Dict[ExpenseCategory, Decimal]:
    return {ct.category: ct.total for ct in by_category(trans, TransactionType.EXPENSE)}


# -- validators: (ctx) -> messages ---------------------------------------------

def validate_has_budgets(ctx: PeriodContext) -> Sequence[str]:
    if not ctx.budgets:
        return [f"No budgets defined for {ctx.period.month:02d}/{ctx.period.year}"]
    return []


def validate_goals_configured(ctx: PeriodContext) -> Sequence[str]:
    if ctx.goals.is_empty:
        return ["No financial goals set"]
    return []


# -- calculators: (ctx, acc) -> partial result -----------------------------------

def calc_summary(ctx: PeriodContext, acc: dict) -> dict:
    return {"summary": summarize(ctx.transactions, period=ctx.period)}


def calc_expense_breakdown(ctx: PeriodContext, acc: dict) -> dict:
    return {"expenses_by_category": by_category(ctx.transactions, TransactionType.EXPENSE)}


def calc_income_breakdown(ctx: PeriodContext, acc: dict) -> dict:
    return {"income_by_category": by_category(ctx.transactions, TransactionType.INCOME)}


def calc_budget_statuses(ctx: PeriodContext, acc: dict) -> dict:
    spent = expense_totals(ctx.transactions)
    budgets = sorted(ctx.budgets, key=lambda b: label(b.category))
    return {"budgets": [(b, budget_status(b, spent.get(b.category, ZERO))) for b in budgets]}


def calc_goal_progress(ctx: PeriodContext, acc: dict) -> dict:
    summary: PeriodSummary = acc.get("summary") or summarize(ctx.transactions, period=ctx.period)
    # potential savings never go below zero
    savings = max(ZERO, summary.income - summary.expenses)
    goals = ctx.goals
    return {
        "goals": {
            "income": goal_progress(goals.monthly_income_target, summary.income, GoalKind.ACCUMULATION),
            "expenses": goal_progress(goals.monthly_expense_limit, summary.expenses, GoalKind.CEILING),
            "savings": goal_progress(goals.savings_target, savings, GoalKind.ACCUMULATION),
        }
    }


DEFAULT_VALIDATORS = (validate_has_budgets, validate_goals_configured)
DEFAULT_CALCULATORS = (
    calc_summary,
    calc_expense_breakdown,
    calc_income_breakdown,
    calc_budget_statuses,
    calc_goal_progress,
)


class ReportService:
    """Facade for period reports built from injected validators and calculators.

    validators: functions taking a PeriodContext -> Sequence[str]
    calculators: functions taking (PeriodContext, accumulated result) -> dict
    """

    def __init__(
        self,
        validators: Optional[Sequence[Callable[..., Sequence[str]]]] = None,
        calculators: Optional[Sequence[Callable[..., Dict[str, Any]]]] = None,
    ):
        self.validators = list(DEFAULT_VALIDATORS if validators is None else validators)
        self.calculators = list(DEFAULT_CALCULATORS if calculators is None else calculators)

    def monthly_report(self, ctx: PeriodContext) -> Dict[str, Any]:
        """Run validators and calculators and return the report with intermediate steps."""
        report = {
            "period": ctx.period,
            "validation": [],
            "steps": [],
            "result": {},
        }

        # a failing validator becomes a message, the report still gets built
        for v in self.validators:
            name = getattr(v, "__name__", str(v))
            try:
                msgs = v(ctx)
            except Exception as e:
                logger.warning("Validator %s failed: %s", name, e)
                msgs = [f"validator_error: {e}"]
            report["validation"].append({"validator": name, "messages": list(msgs)})

        acc: Dict[str, Any] = {}
        for calc in self.calculators:
            out = calc(ctx, acc)
            report["steps"].append({"calculator": getattr(calc, "__name__", str(calc)), "output": out})
            acc.update(out)

        report["result"] = acc
        return report


class LedgerService:
    """Entry point for presentation code: one owner's store, profile and alerts."""

    def __init__(
        self,
        store: LedgerStore,
        profile: Profile,
        bus: Optional[EventBus] = None,
        reports: Optional[ReportService] = None,
    ):
        if profile.owner != store.owner:
            raise OwnershipError(f"Profile {profile.owner} cannot act on the ledger of {store.owner}")
        self.store = store
        self.profile = profile
        self.bus = bus if bus is not None else event_bus
        self.reports = reports or ReportService()

    def context(self, month: int, year: int) -> PeriodContext:
        return PeriodContext(
            period=Period(month, year),
            transactions=tuple(partition(self.store.transactions, month, year)),
            budgets=tuple(partition(self.store.budgets, month, year)),
            goals=self.profile.goals,
        )

    def record_transaction(self, draft: Transaction) -> Transaction:
        created = self.store.create(draft)
        self._notify(TRANSACTION_ADDED, created)
        return created

    def edit_transaction(self, transaction: Transaction) -> Transaction:
        updated = self.store.update(transaction)
        self._notify(TRANSACTION_UPDATED, updated)
        return updated

    def _notify(self, name: str, t: Transaction) -> None:
        results = self.bus.publish(name, self._alert_payload(t))
        if not self.profile.notifications_enabled:
            return
        for result in results:
            if not result.get("alert"):
                continue
            alert_name = BUDGET_ALERT if result.get("kind") == "budget" else GOAL_ALERT
            logger.info("%s: %s", alert_name, result["alert"])
            self.bus.publish(alert_name, result)

    def _alert_payload(self, t: Transaction) -> dict:
        payload = {"transaction": t, "budget": None, "spent": ZERO, "goals": None, "summary": None}
        if t.type != TransactionType.EXPENSE:
            return payload
        ctx = self.context(t.month, t.year)
        payload["budget"] = next((b for b in ctx.budgets if b.category == t.category), None)
        payload["spent"] = expense_totals(ctx.transactions).get(t.category, ZERO)
        payload["goals"] = ctx.goals
        payload["summary"] = summarize(ctx.transactions, period=ctx.period)
        return payload

    def monthly_report(self, month: int, year: int) -> Dict[str, Any]:
        return self.reports.monthly_report(self.context(month, year))

    def trend(self, month: int, year: int, count: int = 6) -> List[PeriodSummary]:
        """The ``count`` periods ending at month/year, oldest first."""
        return trend(self.store.transactions, periods_ending(month, year, count))

    def budget_alerts(self, month: int, year: int) -> List[dict]:
        if not self.profile.notifications_enabled:
            return []
        ctx = self.context(month, year)
        spent = expense_totals(ctx.transactions)
        alerts = []
        for b in ctx.budgets:
            if not b.alerts_enabled:
                continue
            status = budget_status(b, spent.get(b.category, ZERO))
            if status.overspent:
                alerts.append({
                    "budget_id": b.id,
                    "category": b.category.value,
                    "spent": status.spent,
                    "limit": status.limit,
                    "over_budget": -status.remaining,
                })
        return alerts

    def available_budget_categories(self, month: int, year: int) -> List[ExpenseCategory]:
        """Expense categories that have no budget yet in month/year."""
        taken = {b.category for b in partition(self.store.budgets, month, year)}
        return [c for c in ExpenseCategory if c not in taken]

    def search(self, month: int, year: int, term: str) -> List[Transaction]:
        return list(search_transactions(partition(self.store.transactions, month, year), term))

    def export_period(self, month: int, year: int, sep: str = ",") -> str:
        return export_transactions(partition(self.store.transactions, month, year), sep=sep)
