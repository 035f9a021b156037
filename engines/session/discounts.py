"""
POS Session Engine — Discount Stack
======================================
At most one coupon, one loyalty redemption and one manual discount,
all three allowed at once. Application order lives in
engines.session.totals; this module owns setting, clearing and the
value checks.

Value checks return Optional[RejectionReason] — bad discount input is an
everyday, user-correctable event, not an exception.
"""

from __future__ import annotations

from dataclasses import replace
from decimal import Decimal
from typing import Optional, Tuple

from core.commands.rejection import ReasonCode, RejectionReason
from core.config.rules import LoyaltyRule
from core.primitives.money import to_cents
from engines.session.models import Coupon, DiscountType, ManualDiscount, SessionState

MAX_PERCENT = Decimal("100")


# ══════════════════════════════════════════════════════════════
# LOYALTY AUTHORING HELPERS (used by the hosting UI)
# ══════════════════════════════════════════════════════════════

def loyalty_discount_for(points: int, rule: LoyaltyRule) -> int:
    """Dollar value of points at the program's fixed rate, in cents."""
    if points < 0:
        raise ValueError("points must be >= 0.")
    return rule.points_value(points)


def full_balance_redemption(balance: int, rule: LoyaltyRule) -> Tuple[int, int]:
    """
    Redemption is all-or-nothing: the full balance when it reaches the
    program minimum, otherwise nothing.

    Returns:
        (points_to_redeem, discount_cents)
    """
    if balance <= 0 or balance < rule.redeem_minimum:
        return 0, 0
    return balance, loyalty_discount_for(balance, rule)


# ══════════════════════════════════════════════════════════════
# VALIDATION
# ══════════════════════════════════════════════════════════════

def check_manual_discount(
    discount_type: DiscountType, value: Decimal,
) -> Optional[RejectionReason]:
    if not value.is_finite():
        return RejectionReason(
            code=ReasonCode.INVALID_DISCOUNT_VALUE,
            message="Discount value must be a number.",
            policy_name="manual_discount_value_policy",
        )
    # A dollar amount under half a cent would apply as $0.00.
    if value <= 0 or (discount_type is DiscountType.DOLLAR and to_cents(value) <= 0):
        return RejectionReason(
            code=ReasonCode.INVALID_DISCOUNT_VALUE,
            message="Discount value must be greater than 0.",
            policy_name="manual_discount_value_policy",
        )
    if discount_type is DiscountType.PERCENT and value > MAX_PERCENT:
        return RejectionReason(
            code=ReasonCode.PERCENT_OUT_OF_RANGE,
            message="Percent discount cannot exceed 100%.",
            policy_name="manual_discount_value_policy",
        )
    return None


def check_loyalty_redemption(points: int, discount: int) -> Optional[RejectionReason]:
    if points < 0 or discount < 0:
        return RejectionReason(
            code=ReasonCode.INVALID_LOYALTY_REDEMPTION,
            message="Loyalty points and discount cannot be negative.",
            policy_name="loyalty_redemption_policy",
        )
    if (points == 0) != (discount == 0):
        return RejectionReason(
            code=ReasonCode.INVALID_LOYALTY_REDEMPTION,
            message="Loyalty points and discount must be set or cleared together.",
            policy_name="loyalty_redemption_policy",
        )
    return None


# ══════════════════════════════════════════════════════════════
# STACK OPERATIONS
# ══════════════════════════════════════════════════════════════

def set_coupon(state: SessionState, coupon: Optional[Coupon]) -> SessionState:
    """Replace the coupon wholesale. None clears it."""
    return replace(state, coupon=coupon)


def set_loyalty_redemption(state: SessionState, points: int, discount: int) -> SessionState:
    return replace(state, loyalty_points_to_redeem=points, loyalty_discount=discount)


def clear_loyalty_redemption(state: SessionState) -> SessionState:
    return replace(state, loyalty_points_to_redeem=0, loyalty_discount=0)


def apply_manual_discount(
    state: SessionState,
    discount_type: DiscountType,
    value: Decimal,
    label: str,
) -> SessionState:
    """Overwrite any existing manual discount. Caller checks the value first."""
    return replace(
        state,
        manual_discount=ManualDiscount(
            discount_type=discount_type, value=value, label=label.strip(),
        ),
    )


def remove_manual_discount(state: SessionState) -> SessionState:
    return replace(state, manual_discount=None)
