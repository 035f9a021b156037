"""
POS Core Config — Public API
===============================
Admin-configurable rules (tax, loyalty, quotes).
Doctrine: No hardcoded rates in engine logic.
"""

from core.config.rules import (
    DEFAULT_CONFIG,
    LoyaltyRule,
    PosConfig,
    QuoteRule,
    TaxRule,
)

__all__ = [
    "TaxRule",
    "LoyaltyRule",
    "QuoteRule",
    "PosConfig",
    "DEFAULT_CONFIG",
]
