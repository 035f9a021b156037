"""
POS Core Config — Admin-Configurable Rules
=============================================
Doctrine: no hardcoded rates in engine logic.
Tax rate, loyalty conversion and quote validity come from
admin-configurable data, not from source code.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


# ══════════════════════════════════════════════════════════════
# TAX RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class TaxRule:
    """
    Sales tax rule.

    rate is a Decimal fraction (Decimal("0.1025") means 10.25%).
    products_only marks services as non-taxable by default; the catalog's
    per-item taxable flag still wins when it is known.
    """

    rate: Decimal = Decimal("0.1025")
    products_only: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.rate, Decimal):
            raise TypeError(
                f"Tax rate must be Decimal, got {type(self.rate).__name__}."
            )
        if not Decimal("0") <= self.rate <= Decimal("1"):
            raise ValueError(f"Tax rate must be between 0 and 1, got {self.rate}.")

    def default_taxable(self, is_product: bool) -> bool:
        """Whether an item is taxable when the catalog does not say."""
        return is_product or not self.products_only


# ══════════════════════════════════════════════════════════════
# LOYALTY RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LoyaltyRule:
    """
    Loyalty program conversion.

    redeem_rate_cents:  dollar value of one point, in cents (5 = $0.05).
    redeem_minimum:     smallest balance that may be redeemed.
    """

    redeem_rate_cents: int = 5
    redeem_minimum: int = 100

    def __post_init__(self) -> None:
        if self.redeem_rate_cents <= 0:
            raise ValueError("redeem_rate_cents must be > 0.")
        if self.redeem_minimum < 0:
            raise ValueError("redeem_minimum must be >= 0.")

    def points_value(self, points: int) -> int:
        """Dollar value of points, in cents."""
        return points * self.redeem_rate_cents


# ══════════════════════════════════════════════════════════════
# QUOTE RULE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class QuoteRule:
    """Quote defaults."""

    default_valid_days: int = 10

    def __post_init__(self) -> None:
        if self.default_valid_days < 1:
            raise ValueError("default_valid_days must be >= 1.")


# ══════════════════════════════════════════════════════════════
# BUNDLE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PosConfig:
    """Every rule the ticket/quote engine reads."""

    tax: TaxRule = field(default_factory=TaxRule)
    loyalty: LoyaltyRule = field(default_factory=LoyaltyRule)
    quote: QuoteRule = field(default_factory=QuoteRule)


DEFAULT_CONFIG = PosConfig()
