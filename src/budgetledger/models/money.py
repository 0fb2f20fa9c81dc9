"""Decimal helpers shared by the ledger tables and validators."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

CENT = Decimal("0.01")
ZERO = Decimal("0.00")

# NUMERIC(12, 2): up to ten integer digits.
MAX_DIGITS = 12
DECIMAL_PLACES = 2


def quantize(amount: Decimal) -> Decimal:
    """Round to whole cents using HALF_UP."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def format_money(amount: Decimal | None) -> str | None:
    if amount is None:
        return None
    return f"{quantize(Decimal(amount)):.2f}"
