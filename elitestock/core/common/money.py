"""
Money precision - every stored amount has 8 decimal places (Numeric(24, 8))
"""

from decimal import ROUND_HALF_UP, Decimal

MONEY_QUANTUM = Decimal("0.00000001")


def quantize_money(value, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Round a derived amount (cost, profit, copy size) to the stored precision."""
    return Decimal(value).quantize(MONEY_QUANTUM, rounding=rounding)


def is_money_precision(value) -> bool:
    """True when the amount carries no digits beyond the stored precision."""
    value = Decimal(value)
    return value == value.quantize(MONEY_QUANTUM)
