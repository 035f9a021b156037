"""
POS Pricing Engine Tests
==========================
Catalog parsing and the pure price resolver for every pricing model.
"""

import pytest

from engines.pricing import (
    CatalogProduct,
    CatalogService,
    PricingError,
    PricingModel,
    PricingTier,
    VehicleSizeClass,
    resolve_price,
)

SEDAN = VehicleSizeClass.SEDAN
TRUCK = VehicleSizeClass.TRUCK_SUV_2ROW
VAN = VehicleSizeClass.SUV_3ROW_VAN


def size_tiered_wash():
    """VEHICLE_SIZE model: one tier per size class."""
    return CatalogService(
        id="svc-wash",
        name="Hand Wash",
        pricing_model=PricingModel.VEHICLE_SIZE,
        tiers=(
            PricingTier("sedan", 4000, tier_label="Sedan", display_order=0),
            PricingTier("truck_suv_2row", 5000, tier_label="Truck/SUV", display_order=1),
            PricingTier("suv_3row_van", 6000, tier_label="3-Row/Van", display_order=2),
        ),
    )


def scoped_interior():
    """SCOPE model: named scopes, each with per-size prices."""
    return CatalogService(
        id="svc-interior",
        name="Interior Detail",
        pricing_model=PricingModel.SCOPE,
        tiers=(
            PricingTier(
                "full", 20000, tier_label="Full Interior", is_vehicle_size_aware=True,
                sedan_price=18000, truck_suv_price=22000, suv_van_price=None,
                display_order=0,
            ),
            PricingTier("express", 9000, tier_label="Express", display_order=1),
        ),
    )


def seat_shampoo():
    return CatalogService(
        id="svc-seats",
        name="Seat Shampoo",
        pricing_model=PricingModel.PER_UNIT,
        per_unit_price=2500,
        per_unit_label="seat",
        per_unit_max=7,
    )


# ══════════════════════════════════════════════════════════════
# CATALOG PARSING
# ══════════════════════════════════════════════════════════════

class TestCatalogParsing:
    def test_service_from_dict(self):
        svc = CatalogService.from_dict({
            "id": "svc-1",
            "name": "Ceramic Coating",
            "pricing_model": "specialty",
            "is_taxable": False,
            "pricing": [
                {"tier_name": "3yr", "price": 899.0, "display_order": 1,
                 "is_vehicle_size_aware": True,
                 "vehicle_size_sedan_price": 799.0,
                 "vehicle_size_truck_suv_price": 899.0,
                 "vehicle_size_suv_van_price": 999.0},
                {"tier_name": "1yr", "tier_label": "1 Year", "price": 499.99,
                 "display_order": 0},
            ],
        })
        assert svc.pricing_model is PricingModel.SPECIALTY
        assert [t.tier_name for t in svc.tiers] == ["1yr", "3yr"]
        assert svc.default_tier.tier_name == "1yr"
        assert svc.find_tier("1yr").price == 49999
        assert svc.find_tier("3yr").price_for(VAN) == 99900

    def test_service_pricing_alias(self):
        svc = CatalogService.from_dict({
            "id": "svc-2", "name": "Wash", "pricing_model": "vehicle_size",
            "service_pricing": [{"tier_name": "sedan", "price": 40}],
        })
        assert svc.find_tier("sedan").price == 4000

    def test_product_from_dict(self):
        product = CatalogProduct.from_dict(
            {"id": "p-1", "name": "Microfiber Towel", "retail_price": 12.5}
        )
        assert product.retail_price == 1250
        assert product.is_taxable is True

    def test_tier_label_falls_back_to_name(self):
        assert PricingTier("base", 100).label == "base"

    def test_invalid_tier_price(self):
        with pytest.raises(ValueError, match="price"):
            PricingTier("base", -1)

    def test_invalid_per_unit_max(self):
        with pytest.raises(ValueError, match="per_unit_max"):
            CatalogService(
                id="x", name="x", pricing_model=PricingModel.PER_UNIT,
                per_unit_price=100, per_unit_max=0,
            )


# ══════════════════════════════════════════════════════════════
# SIZE-AWARE MODELS
# ══════════════════════════════════════════════════════════════

class TestVehicleSizeModel:
    def test_tier_follows_vehicle_size(self):
        res = resolve_price(size_tiered_wash(), TRUCK)
        assert res.unit_price == 5000
        assert res.tier_name == "truck_suv_2row"
        assert res.tier_label == "Truck/SUV"
        assert not res.incomplete

    def test_size_named_tier_follows_new_size(self):
        res = resolve_price(size_tiered_wash(), VAN, tier_name="sedan")
        assert res.tier_name == "suv_3row_van"
        assert res.unit_price == 6000

    def test_no_vehicle_uses_default_tier_and_flags_incomplete(self):
        res = resolve_price(size_tiered_wash(), None)
        assert res.unit_price == 4000
        assert res.tier_name == "sedan"
        assert res.incomplete

    def test_unknown_tier_raises(self):
        with pytest.raises(PricingError, match="no pricing tier 'platinum'"):
            resolve_price(size_tiered_wash(), SEDAN, tier_name="platinum")


class TestScopeModel:
    def test_size_price_used(self):
        res = resolve_price(scoped_interior(), SEDAN, tier_name="full")
        assert res.unit_price == 18000
        assert res.tier_label == "Full Interior"
        assert not res.incomplete

    def test_missing_size_price_falls_back_to_base(self):
        res = resolve_price(scoped_interior(), VAN, tier_name="full")
        assert res.unit_price == 20000
        assert res.incomplete

    def test_no_vehicle_base_price_incomplete(self):
        res = resolve_price(scoped_interior(), None, tier_name="full")
        assert res.unit_price == 20000
        assert res.incomplete

    def test_non_size_aware_tier_ignores_vehicle(self):
        res = resolve_price(scoped_interior(), TRUCK, tier_name="express")
        assert res.unit_price == 9000
        assert not res.incomplete

    def test_default_tier_when_none_requested(self):
        res = resolve_price(scoped_interior(), TRUCK)
        assert res.tier_name == "full"
        assert res.unit_price == 22000


# ══════════════════════════════════════════════════════════════
# VEHICLE-INDEPENDENT MODELS
# ══════════════════════════════════════════════════════════════

class TestFlatAndCustomModels:
    def test_flat_price(self):
        svc = CatalogService(
            id="svc-air", name="Air Freshener", pricing_model=PricingModel.FLAT,
            flat_price=1500,
        )
        assert resolve_price(svc, SEDAN).unit_price == 1500
        assert resolve_price(svc, None).incomplete is False

    def test_flat_without_price_raises(self):
        svc = CatalogService(id="svc-x", name="X", pricing_model=PricingModel.FLAT)
        with pytest.raises(PricingError):
            resolve_price(svc)

    def test_custom_without_price_is_zero_and_incomplete(self):
        svc = CatalogService(id="svc-c", name="Restoration", pricing_model=PricingModel.CUSTOM)
        res = resolve_price(svc, TRUCK)
        assert res.unit_price == 0
        assert res.incomplete

    def test_custom_with_tier(self):
        svc = CatalogService(
            id="svc-c", name="Restoration", pricing_model=PricingModel.CUSTOM,
            tiers=(PricingTier("standard", 30000),),
        )
        assert resolve_price(svc).unit_price == 30000


class TestPerUnitModel:
    def test_defaults_to_one_unit(self):
        res = resolve_price(seat_shampoo())
        assert res.unit_price == 2500
        assert res.tier_label == "seat"

    def test_multiplies_units(self):
        assert resolve_price(seat_shampoo(), SEDAN, per_unit_qty=4).unit_price == 10000

    def test_above_max_raises(self):
        with pytest.raises(PricingError, match="exceeds maximum"):
            resolve_price(seat_shampoo(), per_unit_qty=8)

    def test_zero_units_raises(self):
        with pytest.raises(PricingError):
            resolve_price(seat_shampoo(), per_unit_qty=0)


class TestDeterminism:
    def test_same_input_same_output(self):
        svc = scoped_interior()
        assert resolve_price(svc, TRUCK, tier_name="full") == resolve_price(
            svc, TRUCK, tier_name="full"
        )
