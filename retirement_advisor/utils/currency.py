"""
Currency display helpers used in recommendation text.

``format_currency(1234.5)`` → ``"$1,234.50"``; negative values put the sign
before the symbol (``"-$12.00"``).
"""

from __future__ import annotations


def format_currency(value: float, symbol: str = "$", decimals: int = 2) -> str:
    """Format ``value`` with thousands separators and a currency symbol."""
    sign = "-" if value < 0 else ""
    return f"{sign}{symbol}{abs(value):,.{decimals}f}"


def format_amount(value: float) -> str:
    """Whole-unit amount with thousands separators, no symbol (``"12,346"``)."""
    return f"{value:,.0f}"
