from __future__ import annotations

import calendar
from decimal import ROUND_HALF_UP, Decimal

from ledger.config import DEFAULT_CURRENCY
from ledger.domain import to_decimal

CENT = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "BRL": "R$",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}


def round_for_display(amount) -> Decimal:
    """Round half-up to two decimal places.

    Example:
        >>> round_for_display("10.005")
        Decimal('10.01')
    """
    return to_decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def format_currency(amount, currency: str = DEFAULT_CURRENCY) -> str:
    """Format an amount with the currency symbol (or code) and separators.

    Example:
        >>> format_currency(Decimal("-1234.5"), "BRL")
        '-R$ 1,234.50'
    """
    value = round_for_display(amount)
    symbol = CURRENCY_SYMBOLS.get(currency.upper(), currency.upper())
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol} {abs(value):,.2f}"


def format_percent(ratio) -> str:
    return f"{(to_decimal(ratio, 'ratio') * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP)}%"


def month_name(month: int) -> str:
    if not 1 <= month <= 12:
        raise ValueError(f"month must be 1-12, got {month}")
    return calendar.month_name[month]
