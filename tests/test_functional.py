from decimal import Decimal

import pytest

from ledger.domain import Budget, Transaction
from ledger.errors import ValidationError
from ledger.functional import Left, Right, unwrap, validate_budget, validate_transaction


def test_either_map():
    right_value = Right(5)
    doubled = right_value.map(lambda x: x * 2)

    assert doubled.is_right()
    assert doubled.get_or_else(0) == 10

    left_value = Left("error")
    mapped_left = left_value.map(lambda x: x * 2)
    assert mapped_left.is_left()
    assert mapped_left.get_or_else(0) == 0
    assert mapped_left.get_error() == "error"


def test_either_bind_short_circuits_on_left():
    calls = []

    def step(x):
        calls.append(x)
        return Right(x + 1)

    result = Left("stop").bind(step)
    assert result == Left("stop")
    assert calls == []
    assert Right(1).bind(step) == Right(2)


def test_unwrap_raises_validation_error_with_message():
    assert unwrap(Right(3)) == 3
    with pytest.raises(ValidationError, match="bad input"):
        unwrap(Left({"error": "x", "message": "bad input"}))


def test_validate_transaction_success():
    t = Transaction("expense", "food", "20", "2024-05-01")
    result = validate_transaction(t)
    assert result.is_right()
    assert result.get_or_else(None) is t


def test_validate_transaction_category_type_mismatch():
    result = validate_transaction(Transaction("income", "food", "20", "2024-05-01"))
    assert result.is_left()
    assert result.get_error()["error"] == "category_type_mismatch"

    result2 = validate_transaction(Transaction("expense", "salary", "20", "2024-05-01"))
    assert result2.get_error()["error"] == "category_type_mismatch"


def test_validate_transaction_amount_rules():
    zero = Transaction("expense", "food", 0, "2024-05-01")
    negative = Transaction("expense", "food", "-5", "2024-05-01")

    assert validate_transaction(zero, is_new=True).get_error()["error"] == "invalid_amount"
    assert validate_transaction(zero, is_new=False).is_right()
    assert validate_transaction(negative, is_new=False).get_error()["message"] == "Amount cannot be negative"


def test_validate_transaction_requires_recurrence_when_recurring():
    t = Transaction("expense", "bills", 90, "2024-05-01", recurring=True)
    assert validate_transaction(t).get_error()["error"] == "missing_recurring_type"


def test_validate_budget_rules():
    existing = (Budget("food", 300, 5, 2024, id="b1", owner="u"),)

    assert validate_budget(Budget("salary", 300, 5, 2024, owner="u"), ()).get_error()["error"] == "category_not_expense"
    assert validate_budget(Budget("food", -1, 5, 2024, owner="u"), ()).get_error()["error"] == "invalid_limit"
    assert validate_budget(Budget("food", 1, 13, 2024, owner="u"), ()).get_error()["error"] == "invalid_period"

    dup = validate_budget(Budget("food", 100, 5, 2024, id="b2", owner="u"), existing)
    assert dup.get_error()["error"] == "duplicate_budget"
    assert dup.get_error()["budget_id"] == "b1"


def test_validate_budget_allows_editing_itself_and_other_periods():
    existing = (Budget("food", 300, 5, 2024, id="b1", owner="u"),)
    assert validate_budget(Budget("food", Decimal("350"), 5, 2024, id="b1", owner="u"), existing).is_right()
    assert validate_budget(Budget("food", 300, 6, 2024, id="b2", owner="u"), existing).is_right()
    assert validate_budget(Budget("food", 300, 5, 2024, id="b3", owner="other"), existing).is_right()
