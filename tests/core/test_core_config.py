"""
Tests for core.config — Admin-configurable rules.
"""

from decimal import Decimal

import pytest

from core.config.rules import (
    DEFAULT_CONFIG,
    LoyaltyRule,
    PosConfig,
    QuoteRule,
    TaxRule,
)


# ── TaxRule Tests ────────────────────────────────────────────

class TestTaxRule:
    def test_defaults(self):
        rule = TaxRule()
        assert rule.rate == Decimal("0.1025")
        assert rule.products_only is True

    def test_zero_rate_allowed(self):
        assert TaxRule(rate=Decimal("0")).rate == 0

    def test_invalid_rate_too_high(self):
        with pytest.raises(ValueError, match="between 0 and 1"):
            TaxRule(rate=Decimal("1.5"))

    def test_invalid_rate_negative(self):
        with pytest.raises(ValueError, match="between 0 and 1"):
            TaxRule(rate=Decimal("-0.1"))

    def test_float_rate_refused(self):
        with pytest.raises(TypeError, match="Decimal"):
            TaxRule(rate=0.08)

    def test_default_taxable(self):
        assert TaxRule().default_taxable(is_product=True)
        assert not TaxRule().default_taxable(is_product=False)
        assert TaxRule(products_only=False).default_taxable(is_product=False)

    def test_frozen_immutability(self):
        rule = TaxRule()
        with pytest.raises(AttributeError):
            rule.rate = Decimal("0.2")


# ── LoyaltyRule / QuoteRule Tests ────────────────────────────

class TestLoyaltyRule:
    def test_points_value(self):
        assert LoyaltyRule().points_value(100) == 500
        assert LoyaltyRule(redeem_rate_cents=1).points_value(500) == 500

    def test_redeem_rate_must_be_positive(self):
        with pytest.raises(ValueError, match="redeem_rate_cents"):
            LoyaltyRule(redeem_rate_cents=0)

    def test_minimum_not_negative(self):
        with pytest.raises(ValueError, match="redeem_minimum"):
            LoyaltyRule(redeem_minimum=-1)


class TestQuoteRule:
    def test_default_validity(self):
        assert QuoteRule().default_valid_days == 10

    def test_validity_must_be_positive(self):
        with pytest.raises(ValueError):
            QuoteRule(default_valid_days=0)


# ── PosConfig Tests ──────────────────────────────────────────

class TestPosConfig:
    def test_default_bundle(self):
        assert DEFAULT_CONFIG.tax == TaxRule()
        assert DEFAULT_CONFIG.loyalty.redeem_rate_cents == 5
        assert DEFAULT_CONFIG.loyalty.redeem_minimum == 100
        assert DEFAULT_CONFIG.quote.default_valid_days == 10

    def test_rules_override_independently(self):
        config = PosConfig(tax=TaxRule(rate=Decimal("0.095")))
        assert config.tax.rate == Decimal("0.095")
        assert config.quote == QuoteRule()
