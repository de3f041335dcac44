from dataclasses import replace
from decimal import Decimal

import pytest

from ledger.categories import ExpenseCategory
from ledger.domain import Budget, FinancialGoals, Profile, Transaction
from ledger.errors import OwnershipError
from ledger.events import BUDGET_ALERT, GOAL_ALERT, EventBus, register_default_handlers
from ledger.periods import Period
from ledger.services import (
    LedgerService,
    PeriodContext,
    ReportService,
    calc_summary,
    validate_has_budgets,
)
from ledger.storage import InMemorySnapshotRepository
from ledger.store import LedgerStore

OWNER = "ana@example.com"


def make_service(goals=None, notifications_enabled=True):
    store = LedgerStore(OWNER, repository=InMemorySnapshotRepository())
    profile = Profile(
        owner=OWNER,
        goals=goals or FinancialGoals(),
        notifications_enabled=notifications_enabled,
    )
    bus = EventBus()
    register_default_handlers(bus)
    return LedgerService(store, profile, bus=bus)


def collect(bus, name):
    seen = []
    bus.subscribe(name, lambda event, payload: seen.append(payload) or {})
    return seen


def make_tx(amount, category="food", tx_type="expense", day="2024-05-10", description=""):
    return Transaction(tx_type, category, amount, day, description=description)


def test_profile_must_match_store_owner():
    store = LedgerStore(OWNER, repository=InMemorySnapshotRepository())
    with pytest.raises(OwnershipError):
        LedgerService(store, Profile(owner="bob@example.com"))


def test_monthly_report_result():
    service = make_service(goals=FinancialGoals(
        monthly_income_target=4000, monthly_expense_limit=2000, savings_target=1000,
    ))
    service.store.create(Budget("food", 300, 5, 2024))
    service.store.create(Budget("bills", 200, 5, 2024))
    service.record_transaction(make_tx("3000", "salary", "income"))
    service.record_transaction(make_tx("350", "food"))
    service.record_transaction(make_tx("100", "bills"))
    service.record_transaction(make_tx("999", "food", day="2024-04-10"))

    report = service.monthly_report(5, 2024)
    result = report["result"]

    assert report["period"] == Period(5, 2024)
    assert [v["messages"] for v in report["validation"]] == [[], []]
    assert [s["calculator"] for s in report["steps"]] == [
        "calc_summary",
        "calc_expense_breakdown",
        "calc_income_breakdown",
        "calc_budget_statuses",
        "calc_goal_progress",
    ]
    assert result["summary"].expenses == Decimal("450")
    assert result["summary"].balance == Decimal("2550")

    # sorted by category label: Bills before Food
    statuses = result["budgets"]
    assert [b.category for b, _ in statuses] == [ExpenseCategory.BILLS, ExpenseCategory.FOOD]
    assert statuses[1][1].overspent
    assert statuses[1][1].remaining == Decimal("-50")

    goals = result["goals"]
    assert goals["income"].ratio == Decimal("0.75")
    assert goals["expenses"].achieved
    assert goals["savings"].current == Decimal("2550")
    assert goals["savings"].achieved


def test_savings_never_negative():
    service = make_service(goals=FinancialGoals(savings_target=500))
    service.record_transaction(make_tx("100", "salary", "income"))
    service.record_transaction(make_tx("400", "food"))

    savings = service.monthly_report(5, 2024)["result"]["goals"]["savings"]
    assert savings.current == 0
    assert not savings.achieved


def test_report_flags_missing_budgets_and_goals():
    report = make_service().monthly_report(1, 2030)
    messages = [m for v in report["validation"] for m in v["messages"]]
    assert messages == ["No budgets defined for 01/2030", "No financial goals set"]
    assert report["result"]["summary"].count == 0
    assert not report["result"]["goals"]["income"].active


def test_failing_validator_becomes_a_message():
    def broken(ctx):
        raise RuntimeError("boom")

    reports = ReportService(validators=[broken, validate_has_budgets], calculators=[calc_summary])
    ctx = PeriodContext(period=Period(5, 2024), transactions=(), budgets=(), goals=FinancialGoals())

    report = reports.monthly_report(ctx)

    assert report["validation"][0] == {"validator": "broken", "messages": ["validator_error: boom"]}
    assert list(report["result"]) == ["summary"]


def test_recording_an_expense_over_budget_publishes_alert():
    service = make_service()
    alerts = collect(service.bus, BUDGET_ALERT)
    service.store.create(Budget("food", 300, 5, 2024))

    service.record_transaction(make_tx("200"))
    assert alerts == []

    service.record_transaction(make_tx("150"))
    assert len(alerts) == 1
    assert alerts[0]["over_budget"] == Decimal("50")
    assert alerts[0]["category"] == "food"


def test_editing_a_transaction_can_raise_goal_alert():
    service = make_service(goals=FinancialGoals(monthly_expense_limit=500))
    alerts = collect(service.bus, GOAL_ALERT)
    created = service.record_transaction(make_tx("400", "shopping"))
    assert alerts == []

    service.edit_transaction(replace(created, amount=Decimal("650")))

    assert len(alerts) == 1
    assert alerts[0]["spent"] == Decimal("650")


def test_notifications_disabled_suppresses_alerts():
    service = make_service(goals=FinancialGoals(monthly_expense_limit=10), notifications_enabled=False)
    budget_alerts = collect(service.bus, BUDGET_ALERT)
    goal_alerts = collect(service.bus, GOAL_ALERT)
    service.store.create(Budget("food", 5, 5, 2024))

    service.record_transaction(make_tx("50"))

    assert budget_alerts == []
    assert goal_alerts == []
    assert service.budget_alerts(5, 2024) == []


def test_budget_alerts_lists_overspent_budgets_with_alerts_enabled():
    service = make_service()
    food = service.store.create(Budget("food", 100, 5, 2024))
    service.store.create(Budget("bills", 100, 5, 2024, alerts_enabled=False))
    service.store.create(Budget("transport", 100, 5, 2024))
    service.record_transaction(make_tx("120", "food"))
    service.record_transaction(make_tx("500", "bills"))
    service.record_transaction(make_tx("20", "transport"))

    assert service.budget_alerts(5, 2024) == [{
        "budget_id": food.id,
        "category": "food",
        "spent": Decimal("120"),
        "limit": Decimal("100"),
        "over_budget": Decimal("20"),
    }]


def test_available_budget_categories():
    service = make_service()
    service.store.create(Budget("food", 100, 5, 2024))

    available = service.available_budget_categories(5, 2024)
    assert ExpenseCategory.FOOD not in available
    assert len(available) == len(ExpenseCategory) - 1
    assert ExpenseCategory.FOOD in service.available_budget_categories(6, 2024)


def test_trend_covers_requested_window():
    service = make_service()
    service.record_transaction(make_tx("1000", "salary", "income", day="2024-03-05"))
    service.record_transaction(make_tx("800", day="2024-03-06"))
    service.record_transaction(make_tx("1200", "salary", "income", day="2024-04-05"))
    service.record_transaction(make_tx("900", day="2024-04-06"))

    summaries = service.trend(5, 2024, count=3)
    assert [s.period for s in summaries] == [Period(3, 2024), Period(4, 2024), Period(5, 2024)]
    assert [s.balance for s in summaries] == [Decimal("200"), Decimal("300"), Decimal("0")]


def test_search_and_export_stay_in_period():
    service = make_service()
    service.record_transaction(make_tx("30", description="Supermarket"))
    service.record_transaction(make_tx("40", description="Supermarket", day="2024-06-01"))

    assert [t.amount for t in service.search(5, 2024, "super")] == [Decimal("30")]
    assert service.export_period(5, 2024).splitlines() == [
        "date,type,category,description,amount",
        "2024-05-10,expense,food,Supermarket,30.00",
    ]
