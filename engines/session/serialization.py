"""
POS Session Engine — Persistence Boundary
===========================================
Translate sessions to and from the JSON shapes of the quote API and the
coupon validator.

Money crosses this boundary as decimal dollars; inside the engine it is
integer cents. Nothing here performs I/O; the caller sends the bodies
and hands back the parsed responses.
"""

from __future__ import annotations

import re
from datetime import date
from typing import Any, Dict, List, Optional

from core.config.rules import DEFAULT_CONFIG, PosConfig
from core.primitives.money import to_cents, to_dollars
from engines.pricing.catalog import VehicleSizeClass
from engines.session.models import (
    Coupon,
    Customer,
    ItemType,
    LineItem,
    QuoteStatus,
    SessionKind,
    SessionState,
    Vehicle,
)

_WHITESPACE = re.compile(r"\s+")


def _dollars(cents: int) -> float:
    return float(to_dollars(cents))


def _parse_date(value: Any) -> Optional[date]:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


# ══════════════════════════════════════════════════════════════
# OUTBOUND
# ══════════════════════════════════════════════════════════════

def _service_id(item: LineItem) -> Optional[str]:
    return item.catalog_ref if item.item_type is ItemType.SERVICE else None


def _product_id(item: LineItem) -> Optional[str]:
    return item.catalog_ref if item.item_type is ItemType.PRODUCT else None


def to_request_body(state: SessionState) -> Dict[str, Any]:
    """Body for creating or updating a quote."""
    return {
        "customer_id": state.customer.id if state.customer else None,
        "vehicle_id": state.vehicle.id if state.vehicle else None,
        "notes": state.notes,
        "valid_until": state.valid_until.isoformat() if state.valid_until else None,
        "items": [
            {
                "service_id": _service_id(item),
                "product_id": _product_id(item),
                "item_name": item.item_name,
                "quantity": item.quantity,
                "unit_price": _dollars(item.unit_price),
                "tier_name": item.tier_name,
                "notes": item.notes,
            }
            for item in state.items
        ],
    }


def normalize_coupon_code(code: str) -> str:
    """Codes are typed by hand and read aloud; whitespace is never significant."""
    return _WHITESPACE.sub("", code)


def coupon_validation_request(state: SessionState, code: str) -> Dict[str, Any]:
    """Body for the coupon validator: code, current subtotal, cart contents."""
    return {
        "code": normalize_coupon_code(code),
        "subtotal": _dollars(state.totals.subtotal),
        "customer_id": state.customer.id if state.customer else None,
        "items": [
            {
                "item_type": item.item_type.value,
                "product_id": _product_id(item),
                "service_id": _service_id(item),
                "unit_price": _dollars(item.unit_price),
                "quantity": item.quantity,
                "item_name": item.item_name,
            }
            for item in state.items
        ],
    }


# ══════════════════════════════════════════════════════════════
# INBOUND
# ══════════════════════════════════════════════════════════════

def coupon_from_validation(response: Dict[str, Any], *, auto_applied: bool = False) -> Coupon:
    """
    Parse a successful validator response. Accepts the bare record or
    the {"data": {...}} envelope.
    """
    data = response.get("data", response)
    return Coupon(
        id=str(data["id"]),
        code=data["code"],
        discount=to_cents(data.get("total_discount") or 0),
        is_auto_applied=auto_applied,
        description=data.get("description"),
        warning=data.get("warning"),
    )


def customer_from_dict(data: Optional[Dict[str, Any]]) -> Optional[Customer]:
    if not data:
        return None
    name = data.get("name")
    if name is None:
        name = " ".join(
            part for part in (data.get("first_name"), data.get("last_name")) if part
        )
    return Customer(
        id=str(data["id"]),
        name=name,
        loyalty_points_balance=data.get("loyalty_points_balance") or 0,
    )


def vehicle_from_dict(data: Optional[Dict[str, Any]]) -> Optional[Vehicle]:
    if not data:
        return None
    size = data.get("size_class")
    description = " ".join(
        str(part) for part in (data.get("year"), data.get("make"), data.get("model")) if part
    )
    return Vehicle(
        id=str(data["id"]),
        size_class=VehicleSizeClass(size) if size else None,
        customer_id=data.get("customer_id"),
        description=description,
    )


def _item_from_dict(
    data: Dict[str, Any],
    size_class: Optional[VehicleSizeClass],
    config: PosConfig,
) -> LineItem:
    product_id = data.get("product_id")
    service_id = data.get("service_id")
    if product_id:
        item_type, ref = ItemType.PRODUCT, str(product_id)
    elif service_id:
        item_type, ref = ItemType.SERVICE, str(service_id)
    else:
        item_type, ref = ItemType.CUSTOM, None
    return LineItem(
        id=str(data["id"]),
        item_type=item_type,
        catalog_ref=ref,
        item_name=data["item_name"],
        unit_price=to_cents(data.get("unit_price") or 0),
        quantity=data.get("quantity") or 1,
        is_taxable=config.tax.default_taxable(item_type is ItemType.PRODUCT),
        tier_name=data.get("tier_name"),
        notes=data.get("notes") or None,
        vehicle_size_class=size_class if item_type is ItemType.SERVICE else None,
    )


def from_quote_response(
    data: Dict[str, Any], config: PosConfig = DEFAULT_CONFIG,
) -> SessionState:
    """
    Hydrate a quote session from the quote API. Accepts the bare record
    or the {"quote": {...}} envelope.

    Discounts are not persisted with a quote and come back empty; totals
    are recomputed from the items rather than trusted from the response.
    """
    quote = data.get("quote", data)
    vehicle = vehicle_from_dict(quote.get("vehicle"))
    size_class = vehicle.size_class if vehicle else None
    items: List[LineItem] = [
        _item_from_dict(raw, size_class, config) for raw in quote.get("items") or ()
    ]
    status = quote.get("status")
    return SessionState(
        kind=SessionKind.QUOTE,
        tax_rate=config.tax.rate,
        items=tuple(items),
        customer=customer_from_dict(quote.get("customer")),
        vehicle=vehicle,
        notes=quote.get("notes") or None,
        quote_id=str(quote["id"]),
        quote_number=quote.get("quote_number"),
        valid_until=_parse_date(quote.get("valid_until")),
        status=QuoteStatus(status) if status else QuoteStatus.DRAFT,
    )
