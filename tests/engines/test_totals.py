"""
POS Session Engine — Totals Calculator Tests
==============================================
Fixed pipeline: subtotal → tax → coupon → loyalty → manual → clamp.
"""

from decimal import Decimal

import pytest

from core.config.rules import LoyaltyRule
from engines.session.discounts import loyalty_discount_for
from engines.session.models import (
    Coupon,
    Customer,
    DiscountType,
    ItemType,
    LineItem,
    ManualDiscount,
    SessionState,
)
from engines.session.totals import compute_totals, manual_discount_amount

RATE_8 = Decimal("0.08")
CUSTOMER = Customer(id="cust-1", name="Dana Reyes", loyalty_points_balance=500)


def product(item_id="p-line", price=5000, quantity=2, taxable=True):
    return LineItem(
        id=item_id, item_type=ItemType.PRODUCT, item_name="Wax Kit",
        unit_price=price, quantity=quantity, catalog_ref="p-wax", is_taxable=taxable,
    )


def service(item_id="s-line", price=10000):
    return LineItem(
        id=item_id, item_type=ItemType.SERVICE, item_name="Full Detail",
        unit_price=price, catalog_ref="svc-detail",
    )


def coupon(discount=1000):
    return Coupon(id="cpn-1", code="SAVE10", discount=discount)


def percent(value):
    return ManualDiscount(DiscountType.PERCENT, Decimal(value))


def dollars(value):
    return ManualDiscount(DiscountType.DOLLAR, Decimal(value))


# ══════════════════════════════════════════════════════════════
# WORKED EXAMPLES
# ══════════════════════════════════════════════════════════════

class TestWorkedExamples:
    def test_taxable_items_only(self):
        state = SessionState(tax_rate=RATE_8, items=(product(),))
        totals = compute_totals(state)
        assert totals.subtotal == 10000
        assert totals.tax_amount == 800
        assert totals.total == 10800

    def test_coupon_plus_percent_manual(self):
        state = SessionState(
            tax_rate=RATE_8, items=(product(),),
            coupon=coupon(1000), manual_discount=percent("20"),
        )
        totals = compute_totals(state)
        assert totals.after_coupon == 9000
        assert totals.manual_discount_amount == 2000
        assert totals.total == 7800

    def test_loyalty_after_coupon_before_manual(self):
        rule = LoyaltyRule(redeem_rate_cents=1)
        loyalty = loyalty_discount_for(500, rule)
        assert loyalty == 500
        state = SessionState(
            tax_rate=RATE_8, items=(product(),), customer=CUSTOMER,
            coupon=coupon(1000), loyalty_points_to_redeem=500, loyalty_discount=loyalty,
            manual_discount=percent("20"),
        )
        totals = compute_totals(state)
        assert totals.after_coupon == 9000
        assert totals.after_loyalty == 8500
        assert totals.manual_discount_amount == 2000
        assert totals.total == 7300
        assert totals.discount_amount == 3500

    def test_empty_session(self):
        totals = compute_totals(SessionState(tax_rate=RATE_8))
        assert totals.subtotal == totals.tax_amount == totals.total == 0


# ══════════════════════════════════════════════════════════════
# INVARIANTS
# ══════════════════════════════════════════════════════════════

class TestTaxIndependence:
    @pytest.mark.parametrize("manual", [None, percent("50"), dollars("30")])
    def test_tax_unchanged_by_discounts(self, manual):
        base = SessionState(tax_rate=RATE_8, items=(product(), service()))
        discounted = SessionState(
            tax_rate=RATE_8, items=(product(), service()),
            coupon=coupon(2500), manual_discount=manual,
        )
        assert compute_totals(discounted).tax_amount == compute_totals(base).tax_amount == 800

    def test_non_taxable_items_carry_no_tax(self):
        state = SessionState(tax_rate=RATE_8, items=(service(),))
        assert compute_totals(state).tax_amount == 0

    def test_tax_rounded_per_line(self):
        # 3 × 3.33 × 10.25% = 1.02398 → 1.02 ; 1 × 0.05 × 10.25% = 0.005125 → 0.01
        state = SessionState(
            tax_rate=Decimal("0.1025"),
            items=(product("a", price=333, quantity=3), product("b", price=5, quantity=1)),
        )
        assert compute_totals(state).tax_amount == 103


class TestNonNegativity:
    def test_huge_coupon_clamped_to_tax(self):
        state = SessionState(tax_rate=RATE_8, items=(product(),), coupon=coupon(50000))
        totals = compute_totals(state)
        assert totals.after_coupon == -40000
        assert totals.total == totals.tax_amount == 800

    def test_dollar_manual_exceeding_subtotal(self):
        state = SessionState(tax_rate=RATE_8, items=(product(),), manual_discount=dollars("250"))
        assert compute_totals(state).total == 800

    def test_hundred_percent_off_leaves_tax(self):
        state = SessionState(tax_rate=RATE_8, items=(product(),), manual_discount=percent("100"))
        assert compute_totals(state).total == 800


class TestPercentBase:
    def test_percent_anchored_to_subtotal_not_running_balance(self):
        state = SessionState(
            tax_rate=RATE_8, items=(product(),),
            coupon=coupon(5000), manual_discount=percent("10"),
        )
        totals = compute_totals(state)
        # 10% of 100.00, not 10% of the 50.00 left after the coupon
        assert totals.manual_discount_amount == 1000
        assert totals.total == 4000 + 800

    def test_percent_may_exceed_remaining_balance(self):
        state = SessionState(
            tax_rate=RATE_8, items=(product(),),
            coupon=coupon(9000), manual_discount=percent("50"),
        )
        totals = compute_totals(state)
        assert totals.after_loyalty == 1000
        assert totals.manual_discount_amount == 5000
        assert totals.total == 800

    @pytest.mark.parametrize("loyalty", [0, 500, 2500, 9000])
    def test_loyalty_does_not_move_percent_amount(self, loyalty):
        state = SessionState(
            tax_rate=RATE_8, items=(product(),), customer=CUSTOMER,
            loyalty_points_to_redeem=loyalty, loyalty_discount=loyalty,
            manual_discount=percent("25"),
        )
        assert compute_totals(state).manual_discount_amount == 2500

    def test_percent_rounds_half_up(self):
        # 15% of 9.99 = 1.4985 → 1.50
        assert manual_discount_amount(percent("15"), 999) == 150

    def test_dollar_value_converted_to_cents(self):
        assert manual_discount_amount(dollars("12.345"), 10000) == 1235

    def test_no_discount(self):
        assert manual_discount_amount(None, 10000) == 0


class TestTotalsRendering:
    def test_to_dict_in_dollars(self):
        state = SessionState(tax_rate=RATE_8, items=(product(),), coupon=coupon(1000))
        rendered = compute_totals(state).to_dict()
        assert rendered["subtotal"] == Decimal("100.00")
        assert rendered["coupon_discount"] == Decimal("10.00")
        assert rendered["total"] == Decimal("98.00")

    def test_state_totals_property(self):
        state = SessionState(tax_rate=RATE_8, items=(product(),))
        assert state.totals == compute_totals(state)
