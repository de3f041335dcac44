from typing import Tuple

from ledger.domain import Budget, Snapshot, Transaction
from ledger.errors import LedgerError, PersistenceError

SNAPSHOT_FIELDS = ("transactions", "budgets")


def transaction_to_dict(t: Transaction) -> dict:
    return {
        "id": t.id,
        "owner": t.owner,
        "type": t.type.value,
        "category": t.category.value,
        "amount": str(t.amount),
        "date": t.date.isoformat(),
        "month": t.month,
        "year": t.year,
        "description": t.description,
        "tags": sorted(t.tags),
        "location": t.location,
        "receipt_url": t.receipt_url,
        "recurring": t.recurring,
        "recurring_type": t.recurring_type.value if t.recurring_type else None,
    }


def transaction_from_dict(data: dict) -> Transaction:
    # month/year are derived from date, never trusted from storage
    fields = {k: v for k, v in data.items() if k not in ("month", "year")}
    return Transaction(**fields)


def budget_to_dict(b: Budget) -> dict:
    return {
        "id": b.id,
        "owner": b.owner,
        "category": b.category.value,
        "monthly_limit": str(b.monthly_limit),
        "month": b.month,
        "year": b.year,
        "alerts_enabled": b.alerts_enabled,
    }


def budget_from_dict(data: dict) -> Budget:
    return Budget(**data)


def snapshot_to_dict(snapshot: Snapshot) -> dict:
    return {
        "transactions": [transaction_to_dict(t) for t in snapshot.transactions],
        "budgets": [budget_to_dict(b) for b in snapshot.budgets],
    }


def snapshot_from_dict(data: dict) -> Snapshot:
    """Rebuild a snapshot; any structural problem surfaces as PersistenceError."""
    if not isinstance(data, dict):
        raise PersistenceError(f"Snapshot must be an object, got {type(data).__name__}")
    try:
        transactions = tuple(transaction_from_dict(t) for t in data.get("transactions") or [])
        budgets = tuple(budget_from_dict(b) for b in data.get("budgets") or [])
    except (LedgerError, TypeError, AttributeError) as e:
        raise PersistenceError(f"Corrupt snapshot: {e}") from e
    return Snapshot(transactions=sort_by_date_desc(transactions), budgets=budgets)



def add_record(records: Tuple, record) -> Tuple:
    return records + (record,)


def replace_record(records: Tuple, record) -> Tuple:
    return tuple(record if r.id == record.id else r for r in records)


def remove_record(records: Tuple, record_id: str) -> Tuple:
    return tuple(filter(lambda r: r.id != record_id, records))


def sort_by_date_desc(trans: Tuple[Transaction, ...]) -> Tuple[Transaction, ...]:
    return tuple(sorted(trans, key=lambda t: t.date, reverse=True))
