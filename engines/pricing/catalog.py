"""
POS Pricing Engine — Catalog Records
======================================
Read-only snapshots of catalog services and products as the catalog
service hands them over. The engine never fetches these itself.

RULES:
- Prices in integer minor units (cents); decimal dollars only in from_dict
- Records are immutable snapshots
- Tier order is display order; the first tier is the default tier
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

from core.primitives.money import to_cents


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class VehicleSizeClass(Enum):
    SEDAN = "sedan"
    TRUCK_SUV_2ROW = "truck_suv_2row"
    SUV_3ROW_VAN = "suv_3row_van"


SIZE_CLASS_NAMES = frozenset(s.value for s in VehicleSizeClass)


class PricingModel(Enum):
    VEHICLE_SIZE = "vehicle_size"  # one tier per size class
    SCOPE = "scope"                # named scope tiers, optionally size-aware
    SPECIALTY = "specialty"        # named specialty tiers, optionally size-aware
    PER_UNIT = "per_unit"          # price × units (seats, panels, ...)
    FLAT = "flat"                  # single price
    CUSTOM = "custom"              # quoted by hand


SIZE_AWARE_MODELS = frozenset({
    PricingModel.VEHICLE_SIZE,
    PricingModel.SCOPE,
    PricingModel.SPECIALTY,
})


def _optional_cents(value: Any) -> Optional[int]:
    if value is None or value == "":
        return None
    return to_cents(value)


# ══════════════════════════════════════════════════════════════
# PRICING TIER
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class PricingTier:
    """
    One named price row of a service.

    A size-aware tier carries an optional price per vehicle size class;
    `price` is the base price used when no size is known.
    """
    tier_name: str
    price: int
    tier_label: Optional[str] = None
    is_vehicle_size_aware: bool = False
    sedan_price: Optional[int] = None
    truck_suv_price: Optional[int] = None
    suv_van_price: Optional[int] = None
    display_order: int = 0

    def __post_init__(self):
        if not self.tier_name or not isinstance(self.tier_name, str):
            raise ValueError("tier_name must be non-empty string.")
        if not isinstance(self.price, int) or self.price < 0:
            raise ValueError("price must be non-negative integer (cents).")
        for size_price in (self.sedan_price, self.truck_suv_price, self.suv_van_price):
            if size_price is not None and (not isinstance(size_price, int) or size_price < 0):
                raise ValueError("size prices must be non-negative integers (cents).")

    @property
    def label(self) -> str:
        return self.tier_label or self.tier_name

    def price_for(self, size_class: VehicleSizeClass) -> Optional[int]:
        if size_class is VehicleSizeClass.SEDAN:
            return self.sedan_price
        if size_class is VehicleSizeClass.TRUCK_SUV_2ROW:
            return self.truck_suv_price
        if size_class is VehicleSizeClass.SUV_3ROW_VAN:
            return self.suv_van_price
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> PricingTier:
        return cls(
            tier_name=data["tier_name"],
            tier_label=data.get("tier_label") or None,
            price=to_cents(data.get("price") or 0),
            is_vehicle_size_aware=bool(data.get("is_vehicle_size_aware", False)),
            sedan_price=_optional_cents(data.get("vehicle_size_sedan_price")),
            truck_suv_price=_optional_cents(data.get("vehicle_size_truck_suv_price")),
            suv_van_price=_optional_cents(data.get("vehicle_size_suv_van_price")),
            display_order=data.get("display_order", 0),
        )


# ══════════════════════════════════════════════════════════════
# CATALOG SERVICE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CatalogService:
    """Snapshot of a detailing service and its pricing."""
    id: str
    name: str
    pricing_model: PricingModel
    is_taxable: bool = False
    tiers: Tuple[PricingTier, ...] = ()
    flat_price: Optional[int] = None
    per_unit_price: Optional[int] = None
    per_unit_label: Optional[str] = None
    per_unit_max: Optional[int] = None

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("id must be non-empty string.")
        if not isinstance(self.pricing_model, PricingModel):
            raise ValueError("pricing_model must be PricingModel enum.")
        if not isinstance(self.tiers, tuple):
            raise TypeError("tiers must be a tuple of PricingTier.")
        if self.per_unit_max is not None and self.per_unit_max < 1:
            raise ValueError("per_unit_max must be >= 1.")

    @property
    def default_tier(self) -> Optional[PricingTier]:
        if not self.tiers:
            return None
        return min(self.tiers, key=lambda t: t.display_order)

    def find_tier(self, tier_name: str) -> Optional[PricingTier]:
        for tier in self.tiers:
            if tier.tier_name == tier_name:
                return tier
        return None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CatalogService:
        raw_tiers = data.get("pricing") or data.get("service_pricing") or ()
        tiers = tuple(
            sorted(
                (PricingTier.from_dict(t) for t in raw_tiers),
                key=lambda t: t.display_order,
            )
        )
        return cls(
            id=str(data["id"]),
            name=data["name"],
            pricing_model=PricingModel(data.get("pricing_model", "flat")),
            is_taxable=bool(data.get("is_taxable", False)),
            tiers=tiers,
            flat_price=_optional_cents(data.get("flat_price")),
            per_unit_price=_optional_cents(data.get("per_unit_price")),
            per_unit_label=data.get("per_unit_label"),
            per_unit_max=data.get("per_unit_max"),
        )


# ══════════════════════════════════════════════════════════════
# CATALOG PRODUCT
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CatalogProduct:
    """Snapshot of a retail product."""
    id: str
    name: str
    retail_price: int
    is_taxable: bool = True

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("id must be non-empty string.")
        if not isinstance(self.retail_price, int) or self.retail_price < 0:
            raise ValueError("retail_price must be non-negative integer (cents).")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> CatalogProduct:
        return cls(
            id=str(data["id"]),
            name=data["name"],
            retail_price=to_cents(data.get("retail_price") or 0),
            is_taxable=bool(data.get("is_taxable", True)),
        )
