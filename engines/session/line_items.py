"""
POS Session Engine — Line Item Store
=====================================
Ordered line items of a session, as pure tuple transforms.

Every function takes the current tuple and returns a new one; nothing is
mutated in place and nothing touches the network or storage.
Unknown item ids are no-ops: the UI may race a removal with an in-flight
edit, and the later edit must not crash the session.
"""

from __future__ import annotations

import logging
from collections import abc
from dataclasses import replace
from typing import Iterable, Mapping, Optional, Tuple

from engines.pricing.catalog import CatalogService, PricingModel, VehicleSizeClass
from engines.pricing.resolver import PricingError, resolve_price
from engines.session.models import ItemType, LineItem

logger = logging.getLogger("pos.session")

Items = Tuple[LineItem, ...]


def normalize_note(note: Optional[str]) -> Optional[str]:
    """Trim a free-text note; blank notes clear."""
    if note is None:
        return None
    trimmed = note.strip()
    return trimmed or None


def add_item(items: Items, candidate: LineItem) -> Items:
    """
    Append a line, or bump the quantity of an identical catalog line.

    Identical means same catalog_ref + tier_name + unit_price. Custom
    lines have no catalog identity and are always appended.
    """
    key = candidate.dedupe_key
    if key is not None:
        for idx, existing in enumerate(items):
            if existing.dedupe_key == key:
                merged = replace(existing, quantity=existing.quantity + candidate.quantity)
                return items[:idx] + (merged,) + items[idx + 1:]
    return items + (candidate,)


def remove_item(items: Items, item_id: str) -> Items:
    return tuple(i for i in items if i.id != item_id)


def update_quantity(items: Items, item_id: str, quantity: int) -> Items:
    if quantity <= 0:
        return remove_item(items, item_id)
    return tuple(
        replace(i, quantity=quantity) if i.id == item_id else i
        for i in items
    )


def update_note(items: Items, item_id: str, note: Optional[str]) -> Items:
    cleaned = normalize_note(note)
    return tuple(
        replace(i, notes=cleaned) if i.id == item_id else i
        for i in items
    )


def update_per_unit_qty(items: Items, item_id: str, per_unit_qty: int) -> Items:
    """
    Change the unit count of a per-unit service ("3 seats" → "4 seats").

    The unit price is re-derived from the stored per-unit price.
    Zero or less removes the line.
    """
    if per_unit_qty <= 0:
        return remove_item(items, item_id)
    updated = []
    for item in items:
        if item.id == item_id and item.is_per_unit:
            item = replace(
                item,
                per_unit_qty=per_unit_qty,
                unit_price=item.per_unit_price * per_unit_qty,
            )
        updated.append(item)
    return tuple(updated)


def _index_catalog(
    catalog: Iterable[CatalogService] | Mapping[str, CatalogService],
) -> Mapping[str, CatalogService]:
    if isinstance(catalog, abc.Mapping):
        return catalog
    return {service.id: service for service in catalog}


def recalculate_for_vehicle(
    items: Items,
    size_class: Optional[VehicleSizeClass],
    catalog: Iterable[CatalogService] | Mapping[str, CatalogService],
) -> Items:
    """
    Re-price every service line for a new vehicle size.

    Quantity and notes are preserved. Products and custom lines are
    untouched, as are services missing from the catalog, services whose
    tier no longer exists, and hand-priced custom-model services.
    """
    services = _index_catalog(catalog)
    repriced = []
    for item in items:
        service = services.get(item.catalog_ref) if item.catalog_ref else None
        if (
            item.item_type is not ItemType.SERVICE
            or service is None
            or service.pricing_model is PricingModel.CUSTOM
        ):
            repriced.append(item)
            continue

        try:
            resolution = resolve_price(
                service,
                size_class,
                tier_name=item.tier_name,
                per_unit_qty=item.per_unit_qty if item.is_per_unit else None,
            )
        except PricingError as exc:
            logger.debug(f"Line {item.id} kept its price: {exc}")
            repriced.append(item)
            continue

        repriced.append(
            replace(
                item,
                unit_price=resolution.unit_price,
                tier_name=resolution.tier_name or item.tier_name,
                tier_label=resolution.tier_label or item.tier_label,
                vehicle_size_class=size_class,
            )
        )
    return tuple(repriced)
