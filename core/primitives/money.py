"""
POS Money Primitive — Integer Minor Units
===========================================
Every amount inside the engine is an integer number of cents.

RULES (NON-NEGOTIABLE):
- Engine arithmetic is integer-only (1050 = $10.50)
- Decimal dollars exist only at the boundary (persistence, validators, display)
- Rounding is half-up to the cent, applied at the documented points only:
  line tax, percent discounts, boundary conversion
- No floats inside the engine

This file contains NO persistence logic.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Union

CENT = Decimal("0.01")
HUNDRED = Decimal("100")

DollarsLike = Union[Decimal, int, float, str]


# ══════════════════════════════════════════════════════════════
# CONVERSION HELPERS
# ══════════════════════════════════════════════════════════════

def _as_decimal(value: DollarsLike) -> Decimal:
    if isinstance(value, bool):
        raise TypeError("bool is not a monetary value.")
    if isinstance(value, Decimal):
        return value
    if isinstance(value, float):
        # repr() gives the shortest round-tripping literal, so 19.99
        # becomes Decimal("19.99") and not its binary expansion.
        return Decimal(repr(value))
    try:
        return Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Not a monetary value: {value!r}") from exc


def to_cents(dollars: DollarsLike) -> int:
    """Convert a decimal dollar amount to integer cents (half-up)."""
    return int(
        (_as_decimal(dollars) * HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    )


def to_dollars(cents: int) -> Decimal:
    """Convert integer cents to a two-place Decimal dollar amount."""
    if not isinstance(cents, int) or isinstance(cents, bool):
        raise TypeError(
            f"cents must be int (minor units), got {type(cents).__name__}."
        )
    return (Decimal(cents) / HUNDRED).quantize(CENT)


def apply_rate(cents: int, rate: Decimal) -> int:
    """cents × rate, rounded half-up to the cent. Used for line tax."""
    return int(
        (Decimal(cents) * _as_decimal(rate)).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    )


def percent_of(cents: int, percent: DollarsLike) -> int:
    """cents × percent / 100, rounded half-up to the cent."""
    return apply_rate(cents, _as_decimal(percent) / HUNDRED)
