"""
POS Session Engine — Totals Calculator
======================================
Derive every displayed amount from the session, from scratch, on every read.

Fixed pipeline (order is load-bearing):
    1. subtotal         = Σ item.total_price
    2. tax_amount       = Σ item.tax_amount        (pre-discount price)
    3. after_coupon     = subtotal − coupon.discount
    4. after_loyalty    = after_coupon − loyalty_discount
    5. manual_amount    = PERCENT ? subtotal × pct/100 : value
                          (always against subtotal, never the running balance)
    6. total            = max(0, after_loyalty − manual_amount) + tax_amount

The clamp in step 6 is the only one. Coupon and loyalty may take the
running balance negative, and a percent discount may exceed what is left
after them; the final floor absorbs both. Tax is never reduced by
discounts.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.primitives.money import percent_of, to_cents, to_dollars
from engines.session.models import DiscountType, ManualDiscount

if TYPE_CHECKING:
    from engines.session.models import SessionState


@dataclass(frozen=True)
class Totals:
    """Every amount in integer cents."""
    subtotal: int
    tax_amount: int
    coupon_discount: int
    loyalty_discount: int
    manual_discount_amount: int
    after_coupon: int
    after_loyalty: int
    total: int

    @property
    def discount_amount(self) -> int:
        """Combined nominal discount (what the receipt lists as savings)."""
        return self.coupon_discount + self.loyalty_discount + self.manual_discount_amount

    def to_dict(self) -> dict:
        return {
            "subtotal": to_dollars(self.subtotal),
            "tax_amount": to_dollars(self.tax_amount),
            "coupon_discount": to_dollars(self.coupon_discount),
            "loyalty_discount": to_dollars(self.loyalty_discount),
            "manual_discount_amount": to_dollars(self.manual_discount_amount),
            "discount_amount": to_dollars(self.discount_amount),
            "total": to_dollars(self.total),
        }


def manual_discount_amount(discount: ManualDiscount | None, subtotal: int) -> int:
    """Dollar effect of a manual discount, in cents."""
    if discount is None:
        return 0
    if discount.discount_type is DiscountType.PERCENT:
        return percent_of(subtotal, discount.value)
    return to_cents(discount.value)


def compute_totals(state: SessionState) -> Totals:
    subtotal = sum(item.total_price for item in state.items)
    tax_amount = sum(item.tax_amount(state.tax_rate) for item in state.items)

    coupon_discount = state.coupon.discount if state.coupon is not None else 0
    after_coupon = subtotal - coupon_discount
    after_loyalty = after_coupon - state.loyalty_discount

    manual = manual_discount_amount(state.manual_discount, subtotal)
    total = max(0, after_loyalty - manual) + tax_amount

    return Totals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        coupon_discount=coupon_discount,
        loyalty_discount=state.loyalty_discount,
        manual_discount_amount=manual,
        after_coupon=after_coupon,
        after_loyalty=after_loyalty,
        total=total,
    )
