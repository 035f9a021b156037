"""
POS Pricing Engine
====================
Catalog snapshots and the pure price resolver.
"""

from engines.pricing.catalog import (
    SIZE_AWARE_MODELS,
    CatalogProduct,
    CatalogService,
    PricingModel,
    PricingTier,
    VehicleSizeClass,
)
from engines.pricing.resolver import (
    PriceResolution,
    PricingError,
    resolve_price,
)

__all__ = [
    "SIZE_AWARE_MODELS",
    "CatalogProduct",
    "CatalogService",
    "PricingModel",
    "PricingTier",
    "VehicleSizeClass",
    "PriceResolution",
    "PricingError",
    "resolve_price",
]
