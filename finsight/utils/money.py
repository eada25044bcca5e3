"""Fixed-point helpers for two-digit monetary amounts"""

from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal("0.01")
ZERO = Decimal("0.00")


def round_money(value) -> Decimal:
    """Round to two fractional digits, half-up"""
    return Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP)
