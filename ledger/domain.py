from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Optional

from ledger.categories import Category, ExpenseCategory, TransactionType, find_category
from ledger.config import DEFAULT_CURRENCY
from ledger.errors import ValidationError

ZERO = Decimal("0")


class RecurringType(str, Enum):
    MONTHLY = "monthly"
    WEEKLY = "weekly"
    YEARLY = "yearly"


def to_decimal(value, name: str = "amount") -> Decimal:
    """Coerce a monetary input to Decimal without going through binary floats."""
    if isinstance(value, bool):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(value) if not isinstance(value, Decimal) else value
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError(f"{name} must be a number, got {value!r}") from None
    if not result.is_finite():
        raise ValidationError(f"{name} must be a finite number, got {value!r}")
    return result


def to_date(value) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            # "2024-03-15" or "2024-03-15T10:00:00"; only the day matters
            return date.fromisoformat(value.strip()[:10])
        except ValueError:
            pass
    raise ValidationError(f"date must be an ISO calendar date, got {value!r}")


def _to_enum(enum_cls, value, name: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(f"Unknown {name}: {value!r}") from None


def _to_category(value) -> Category:
    category = find_category(value)
    if category is None:
        raise ValidationError(f"Unknown category: {value!r}")
    return category


@dataclass(frozen=True)
class Transaction:
    type: TransactionType
    category: Category
    amount: Decimal          # magnitude; the sign comes from type
    date: date
    description: str = ""
    tags: frozenset = frozenset()
    location: Optional[str] = None
    receipt_url: Optional[str] = None
    recurring: bool = False
    recurring_type: Optional[RecurringType] = None
    id: Optional[str] = None     # assigned by the store
    owner: Optional[str] = None  # stamped by the store
    month: int = field(init=False)
    year: int = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "type", _to_enum(TransactionType, self.type, "transaction type"))
        object.__setattr__(self, "category", _to_category(self.category))
        object.__setattr__(self, "amount", to_decimal(self.amount))
        object.__setattr__(self, "date", to_date(self.date))
        object.__setattr__(self, "description", self.description or "")
        tags = (self.tags,) if isinstance(self.tags, str) else (self.tags or ())
        object.__setattr__(self, "tags", frozenset(str(t).strip() for t in tags if str(t).strip()))
        object.__setattr__(self, "recurring", bool(self.recurring))
        if self.recurring_type is not None:
            object.__setattr__(
                self, "recurring_type", _to_enum(RecurringType, self.recurring_type, "recurring type")
            )
        # partition key, always in step with date
        object.__setattr__(self, "month", self.date.month)
        object.__setattr__(self, "year", self.date.year)


@dataclass(frozen=True)
class Budget:
    category: Category
    monthly_limit: Decimal
    month: int
    year: int
    alerts_enabled: bool = True
    id: Optional[str] = None
    owner: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "category", _to_category(self.category))
        object.__setattr__(self, "monthly_limit", to_decimal(self.monthly_limit, "monthly limit"))
        try:
            object.__setattr__(self, "month", int(self.month))
            object.__setattr__(self, "year", int(self.year))
        except (TypeError, ValueError):
            raise ValidationError(
                f"Budget period must be numeric, got {self.month!r}/{self.year!r}"
            ) from None
        object.__setattr__(self, "alerts_enabled", bool(self.alerts_enabled))

    @property
    def key(self) -> tuple:
        return (self.owner, self.category, self.month, self.year)

    @property
    def is_expense_budget(self) -> bool:
        return isinstance(self.category, ExpenseCategory)


@dataclass(frozen=True)
class FinancialGoals:
    """Per-user targets; a zero income or savings target means "not set"."""

    monthly_income_target: Decimal = ZERO
    monthly_expense_limit: Decimal = ZERO
    savings_target: Decimal = ZERO

    def __post_init__(self):
        for name in ("monthly_income_target", "monthly_expense_limit", "savings_target"):
            value = to_decimal(getattr(self, name) or ZERO, name.replace("_", " "))
            if value < 0:
                raise ValidationError(f"{name.replace('_', ' ')} cannot be negative")
            object.__setattr__(self, name, value)

    @property
    def is_empty(self) -> bool:
        return not (self.monthly_income_target or self.monthly_expense_limit or self.savings_target)


@dataclass(frozen=True)
class Profile:
    """What the identity collaborator tells the engine about the acting user."""

    owner: str
    goals: FinancialGoals = field(default_factory=FinancialGoals)
    currency: str = DEFAULT_CURRENCY
    notifications_enabled: bool = True


@dataclass(frozen=True)
class Snapshot:
    transactions: tuple = ()
    budgets: tuple = ()
