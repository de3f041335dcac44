from enum import Enum
from typing import Optional, Union


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class IncomeCategory(str, Enum):
    SALARY = "salary"
    FREELANCE = "freelance"
    INVESTMENTS = "investments"
    GIFTS = "gifts"
    OTHER = "other_income"


class ExpenseCategory(str, Enum):
    FOOD = "food"
    TRANSPORT = "transport"
    HOUSING = "housing"
    BILLS = "bills"
    HEALTH = "health"
    EDUCATION = "education"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    SAVINGS_TRANSFER = "savings_transfer"
    OTHER = "other_expense"


Category = Union[IncomeCategory, ExpenseCategory]

INCOME_LABELS: dict[IncomeCategory, str] = {
    IncomeCategory.SALARY: "Salary",
    IncomeCategory.FREELANCE: "Freelance",
    IncomeCategory.INVESTMENTS: "Investments",
    IncomeCategory.GIFTS: "Gifts",
    IncomeCategory.OTHER: "Other income",
}

EXPENSE_LABELS: dict[ExpenseCategory, str] = {
    ExpenseCategory.FOOD: "Food",
    ExpenseCategory.TRANSPORT: "Transport",
    ExpenseCategory.HOUSING: "Housing",
    ExpenseCategory.BILLS: "Bills",
    ExpenseCategory.HEALTH: "Health",
    ExpenseCategory.EDUCATION: "Education",
    ExpenseCategory.ENTERTAINMENT: "Entertainment",
    ExpenseCategory.SHOPPING: "Shopping",
    ExpenseCategory.SAVINGS_TRANSFER: "Transfer to savings",
    ExpenseCategory.OTHER: "Other expense",
}

ALL_LABELS: dict[Category, str] = {**INCOME_LABELS, **EXPENSE_LABELS}


def find_category(value) -> Optional[Category]:
    """Resolve a raw value (enum member or its string value) to a category.

    Returns None when the value belongs to neither set.
    """
    if isinstance(value, (IncomeCategory, ExpenseCategory)):
        return value
    for enum_cls in (IncomeCategory, ExpenseCategory):
        try:
            return enum_cls(value)
        except ValueError:
            continue
    return None


def categories_for(tx_type: TransactionType) -> tuple[Category, ...]:
    if tx_type == TransactionType.INCOME:
        return tuple(IncomeCategory)
    return tuple(ExpenseCategory)


def type_of(category: Category) -> TransactionType:
    if isinstance(category, IncomeCategory):
        return TransactionType.INCOME
    return TransactionType.EXPENSE


def label(category: Category) -> str:
    return ALL_LABELS.get(category, str(getattr(category, "value", category)))
