"""
POS Pricing Engine — Price Resolver
=====================================
Resolve the unit price and tier of a catalog service for a vehicle.

RULES (NON-NEGOTIABLE):
- Deterministic: same input → same output always
- No I/O, no clock, no randomness
- Size-aware models use the vehicle size when one is known; without a
  vehicle they fall back to the default/base price and flag the result
  as incomplete so the UI can warn
- Flat, per-unit and custom models ignore the vehicle entirely

Tier selection for size-aware models:
    tier_name given              → that tier (unknown name is an error)
    VEHICLE_SIZE, size known and → the tier named after the size class;
    tier is size-named or absent   a size-named tier follows the vehicle
    otherwise                    → the default (first) tier
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from engines.pricing.catalog import (
    SIZE_AWARE_MODELS,
    SIZE_CLASS_NAMES,
    CatalogService,
    PricingModel,
    PricingTier,
    VehicleSizeClass,
)


class PricingError(ValueError):
    """The catalog record cannot price the request (programmer error)."""


@dataclass(frozen=True)
class PriceResolution:
    unit_price: int
    tier_name: Optional[str]
    tier_label: Optional[str]
    incomplete: bool = False


# ══════════════════════════════════════════════════════════════
# TIER SELECTION
# ══════════════════════════════════════════════════════════════

def _select_tier(
    service: CatalogService,
    tier_name: Optional[str],
    size_class: Optional[VehicleSizeClass],
) -> Optional[PricingTier]:
    follows_size = (
        size_class is not None
        and service.pricing_model is PricingModel.VEHICLE_SIZE
        and (tier_name is None or tier_name in SIZE_CLASS_NAMES)
    )
    if follows_size:
        tier = service.find_tier(size_class.value)
        if tier is not None:
            return tier

    if tier_name is not None:
        tier = service.find_tier(tier_name)
        if tier is None:
            raise PricingError(
                f"Service '{service.id}' has no pricing tier '{tier_name}'. "
                f"Available: {[t.tier_name for t in service.tiers]}"
            )
        return tier

    return service.default_tier


# ══════════════════════════════════════════════════════════════
# RESOLVERS PER MODEL
# ══════════════════════════════════════════════════════════════

def _resolve_per_unit(
    service: CatalogService,
    tier_name: Optional[str],
    per_unit_qty: Optional[int],
) -> PriceResolution:
    if service.per_unit_price is None:
        raise PricingError(f"Per-unit service '{service.id}' has no per_unit_price.")
    qty = 1 if per_unit_qty is None else per_unit_qty
    if qty < 1:
        raise PricingError("per_unit_qty must be >= 1.")
    if service.per_unit_max is not None and qty > service.per_unit_max:
        raise PricingError(
            f"per_unit_qty {qty} exceeds maximum {service.per_unit_max} "
            f"for service '{service.id}'."
        )
    tier = service.find_tier(tier_name) if tier_name else None
    return PriceResolution(
        unit_price=service.per_unit_price * qty,
        tier_name=tier.tier_name if tier else None,
        tier_label=tier.label if tier else service.per_unit_label,
    )


def _resolve_fixed(service: CatalogService, tier_name: Optional[str]) -> PriceResolution:
    tier = _select_tier(service, tier_name, None)
    if tier is not None:
        return PriceResolution(tier.price, tier.tier_name, tier.label)
    if service.flat_price is not None:
        return PriceResolution(service.flat_price, None, None)
    if service.pricing_model is PricingModel.CUSTOM:
        # Custom quotes are priced by hand after the line is added.
        return PriceResolution(0, None, None, incomplete=True)
    raise PricingError(f"Flat service '{service.id}' has no price.")


def _resolve_size_aware(
    service: CatalogService,
    tier_name: Optional[str],
    size_class: Optional[VehicleSizeClass],
) -> PriceResolution:
    tier = _select_tier(service, tier_name, size_class)
    if tier is None:
        if service.flat_price is not None:
            return PriceResolution(service.flat_price, None, None)
        raise PricingError(f"Service '{service.id}' has no pricing tiers.")

    if tier.is_vehicle_size_aware:
        if size_class is None:
            return PriceResolution(tier.price, tier.tier_name, tier.label, incomplete=True)
        size_price = tier.price_for(size_class)
        if size_price is None:
            return PriceResolution(tier.price, tier.tier_name, tier.label, incomplete=True)
        return PriceResolution(size_price, tier.tier_name, tier.label)

    incomplete = (
        size_class is None and service.pricing_model is PricingModel.VEHICLE_SIZE
    )
    return PriceResolution(tier.price, tier.tier_name, tier.label, incomplete=incomplete)


# ══════════════════════════════════════════════════════════════
# PUBLIC API
# ══════════════════════════════════════════════════════════════

def resolve_price(
    service: CatalogService,
    vehicle_size_class: Optional[VehicleSizeClass] = None,
    *,
    tier_name: Optional[str] = None,
    per_unit_qty: Optional[int] = None,
) -> PriceResolution:
    """
    Resolve unit price (cents) and tier for a service.

    Args:
        service:            catalog snapshot.
        vehicle_size_class: size of the selected vehicle, None if unknown.
        tier_name:          explicit tier chosen by the cashier.
        per_unit_qty:       units for per-unit services (defaults to 1).

    Raises:
        PricingError when the catalog record cannot price the request.
    """
    model = service.pricing_model
    if model is PricingModel.PER_UNIT:
        return _resolve_per_unit(service, tier_name, per_unit_qty)
    if model in SIZE_AWARE_MODELS:
        return _resolve_size_aware(service, tier_name, vehicle_size_class)
    return _resolve_fixed(service, tier_name)
