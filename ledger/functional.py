from abc import ABC, abstractmethod
from typing import Callable, Generic, Iterable, TypeVar

from ledger.categories import label, type_of
from ledger.domain import Budget, Transaction
from ledger.errors import ValidationError

T = TypeVar('T')
U = TypeVar('U')
E = TypeVar('E')


class Either(Generic[E, T], ABC):

    @abstractmethod
    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        pass

    @abstractmethod
    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        pass

    @abstractmethod
    def get_or_else(self, default: T) -> T:
        pass

    @abstractmethod
    def is_right(self) -> bool:
        pass

    def is_left(self) -> bool:
        return not self.is_right()

    @abstractmethod
    def get_error(self) -> E:
        pass


class Right(Either[E, T]):

    def __init__(self, value: T):
        self._value = value

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return Right(f(self._value))

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return f(self._value)

    def get_or_else(self, default: T) -> T:
        return self._value

    def is_right(self) -> bool:
        return True

    def get_error(self) -> E:
        raise ValueError("Cannot get error from Right")

    def __repr__(self) -> str:
        return f"Right({self._value})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Right) and self._value == other._value


class Left(Either[E, T]):

    def __init__(self, error: E):
        self._error = error

    def map(self, f: Callable[[T], U]) -> 'Either[E, U]':
        return self

    def bind(self, f: Callable[[T], 'Either[E, U]']) -> 'Either[E, U]':
        return self

    def get_or_else(self, default: T) -> T:
        return default

    def is_right(self) -> bool:
        return False

    def get_error(self) -> E:
        return self._error

    def __repr__(self) -> str:
        return f"Left({self._error})"

    def __eq__(self, other) -> bool:
        return isinstance(other, Left) and self._error == other._error


def unwrap(result: Either[dict, T]) -> T:
    """Return the Right value or raise the Left as a ValidationError."""
    if result.is_left():
        raise ValidationError(result.get_error()["message"])
    return result.get_or_else(None)


def _check_category_matches_type(t: Transaction) -> Either[dict, Transaction]:
    if type_of(t.category) != t.type:
        return Left({
            "error": "category_type_mismatch",
            "message": f"Category {label(t.category)} cannot be used for {t.type.value} transactions",
            "category": t.category.value,
            "type": t.type.value,
        })
    return Right(t)


def _check_amount(is_new: bool) -> Callable[[Transaction], Either[dict, Transaction]]:
    def _check(t: Transaction) -> Either[dict, Transaction]:
        if is_new and t.amount <= 0:
            return Left({
                "error": "invalid_amount",
                "message": "Amount must be greater than zero",
                "amount": t.amount,
            })
        if t.amount < 0:
            return Left({
                "error": "invalid_amount",
                "message": "Amount cannot be negative",
                "amount": t.amount,
            })
        return Right(t)

    return _check


def _check_recurrence(t: Transaction) -> Either[dict, Transaction]:
    if t.recurring and t.recurring_type is None:
        return Left({
            "error": "missing_recurring_type",
            "message": "Recurring transactions need a recurrence (monthly, weekly or yearly)",
        })
    return Right(t)


def validate_transaction(t: Transaction, is_new: bool = True) -> Either[dict, Transaction]:
    return (
        Right(t)
        .bind(_check_category_matches_type)
        .bind(_check_amount(is_new))
        .bind(_check_recurrence)
    )


def validate_budget(b: Budget, existing: Iterable[Budget]) -> Either[dict, Budget]:
    if not b.is_expense_budget:
        return Left({
            "error": "category_not_expense",
            "message": f"Budgets only apply to expense categories, not {label(b.category)}",
            "category": b.category.value,
        })

    if b.monthly_limit < 0:
        return Left({
            "error": "invalid_limit",
            "message": "Monthly limit cannot be negative",
            "limit": b.monthly_limit,
        })

    if not 1 <= b.month <= 12:
        return Left({
            "error": "invalid_period",
            "message": f"Month must be between 1 and 12, got {b.month}",
            "month": b.month,
        })

    duplicate = next((e for e in existing if e.id != b.id and e.key == b.key), None)
    if duplicate is not None:
        return Left({
            "error": "duplicate_budget",
            "message": (
                f"A budget for {label(b.category)} in {b.month:02d}/{b.year} already exists. "
                "Edit the existing one."
            ),
            "budget_id": duplicate.id,
        })

    return Right(b)
