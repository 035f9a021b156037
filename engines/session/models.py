"""
POS Session Engine — Session Records
=====================================
Immutable records owned by a single ticket or quote session.

RULES:
- All amounts in integer cents
- A session is the sole owner of its items and discounts
- Records are replaced, never mutated; transitions build new tuples
- Totals are NOT stored here — they are derived on every read
  (see engines.session.totals)
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional, Tuple

from core.primitives.money import apply_rate, to_dollars
from engines.pricing.catalog import VehicleSizeClass

MAX_NOTE_LENGTH = 200


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class ItemType(Enum):
    SERVICE = "service"
    PRODUCT = "product"
    CUSTOM = "custom"


class DiscountType(Enum):
    DOLLAR = "dollar"
    PERCENT = "percent"


class SessionKind(Enum):
    TICKET = "ticket"
    QUOTE = "quote"


class QuoteStatus(Enum):
    DRAFT = "draft"
    SENT = "sent"
    VIEWED = "viewed"
    ACCEPTED = "accepted"
    EXPIRED = "expired"
    CONVERTED = "converted"


EDITABLE_QUOTE_STATUSES = frozenset({QuoteStatus.DRAFT})


class SessionPhase(Enum):
    """Implicit lifecycle, derived from field combinations."""
    EMPTY = "EMPTY"
    BUILDING = "BUILDING"
    SAVED = "SAVED"
    SENT = "SENT"
    CONVERTED = "CONVERTED"


# ══════════════════════════════════════════════════════════════
# CUSTOMER / VEHICLE REFERENCES
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Customer:
    id: str
    name: str = ""
    loyalty_points_balance: int = 0

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("customer id must be non-empty string.")
        if self.loyalty_points_balance < 0:
            raise ValueError("loyalty_points_balance must be >= 0.")


@dataclass(frozen=True)
class Vehicle:
    id: str
    size_class: Optional[VehicleSizeClass] = None
    customer_id: Optional[str] = None
    description: str = ""

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("vehicle id must be non-empty string.")
        if self.size_class is not None and not isinstance(self.size_class, VehicleSizeClass):
            raise ValueError("size_class must be VehicleSizeClass enum or None.")


# ══════════════════════════════════════════════════════════════
# LINE ITEM
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class LineItem:
    """
    One priced row of a ticket or quote.

    Derived values (total_price, tax_amount) are computed, never stored,
    so they cannot drift from unit_price × quantity.
    """
    id: str
    item_type: ItemType
    item_name: str
    unit_price: int
    quantity: int = 1
    is_taxable: bool = False
    catalog_ref: Optional[str] = None
    tier_name: Optional[str] = None
    tier_label: Optional[str] = None
    notes: Optional[str] = None
    vehicle_size_class: Optional[VehicleSizeClass] = None
    per_unit_qty: Optional[int] = None
    per_unit_price: Optional[int] = None
    per_unit_label: Optional[str] = None
    per_unit_max: Optional[int] = None

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("line item id must be non-empty string.")
        if not isinstance(self.item_type, ItemType):
            raise ValueError("item_type must be ItemType enum.")
        if not isinstance(self.unit_price, int) or self.unit_price < 0:
            raise ValueError("unit_price must be non-negative integer (cents).")
        if not isinstance(self.quantity, int) or self.quantity < 1:
            raise ValueError("quantity must be integer >= 1.")
        if self.item_type is ItemType.CUSTOM and self.catalog_ref is not None:
            raise ValueError("custom items carry no catalog_ref.")
        if self.notes is not None and len(self.notes) > MAX_NOTE_LENGTH:
            raise ValueError(f"notes must be at most {MAX_NOTE_LENGTH} characters.")

    @property
    def total_price(self) -> int:
        return self.unit_price * self.quantity

    def tax_amount(self, tax_rate: Decimal) -> int:
        if not self.is_taxable:
            return 0
        return apply_rate(self.total_price, tax_rate)

    @property
    def display_tier(self) -> Optional[str]:
        return self.tier_label or self.tier_name

    @property
    def is_per_unit(self) -> bool:
        return self.per_unit_qty is not None and self.per_unit_price is not None

    @property
    def dedupe_key(self) -> Optional[tuple]:
        """Identity used to merge repeated taps of the same catalog entry."""
        if self.catalog_ref is None:
            return None
        return (self.item_type, self.catalog_ref, self.tier_name, self.unit_price)

    def to_dict(self, tax_rate: Decimal) -> dict:
        return {
            "id": self.id,
            "item_type": self.item_type.value,
            "catalog_ref": self.catalog_ref,
            "item_name": self.item_name,
            "tier_name": self.tier_name,
            "tier_label": self.tier_label,
            "quantity": self.quantity,
            "unit_price": to_dollars(self.unit_price),
            "total_price": to_dollars(self.total_price),
            "tax_amount": to_dollars(self.tax_amount(tax_rate)),
            "is_taxable": self.is_taxable,
            "notes": self.notes,
        }


# ══════════════════════════════════════════════════════════════
# DISCOUNT RECORDS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Coupon:
    """
    A coupon already validated by the coupon service.

    `discount` is the validator's authoritative dollar effect in cents.
    The engine never re-derives eligibility.
    """
    id: str
    code: str
    discount: int
    is_auto_applied: bool = False
    description: Optional[str] = None
    warning: Optional[str] = None

    def __post_init__(self):
        if not self.id or not isinstance(self.id, str):
            raise ValueError("coupon id must be non-empty string.")
        if not self.code or not isinstance(self.code, str):
            raise ValueError("coupon code must be non-empty string.")
        if not isinstance(self.discount, int) or self.discount < 0:
            raise ValueError("coupon discount must be non-negative integer (cents).")


@dataclass(frozen=True)
class ManualDiscount:
    """
    Staff-entered discount.

    value is dollars for DOLLAR and a percentage (0, 100] for PERCENT.
    """
    discount_type: DiscountType
    value: Decimal
    label: str = ""

    def __post_init__(self):
        if not isinstance(self.discount_type, DiscountType):
            raise ValueError("discount_type must be DiscountType enum.")
        if not isinstance(self.value, Decimal):
            raise TypeError("value must be Decimal.")


# ══════════════════════════════════════════════════════════════
# SESSION STATE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SessionState:
    """
    In-memory ticket or quote.

    Tickets and quotes are structurally identical; quote-only fields stay
    None on a ticket.
    """
    kind: SessionKind = SessionKind.TICKET
    tax_rate: Decimal = Decimal("0")
    items: Tuple[LineItem, ...] = ()
    customer: Optional[Customer] = None
    vehicle: Optional[Vehicle] = None
    coupon: Optional[Coupon] = None
    loyalty_points_to_redeem: int = 0
    loyalty_discount: int = 0
    manual_discount: Optional[ManualDiscount] = None
    notes: Optional[str] = None
    # ── held ticket ───────────────────────────────────────────
    ticket_id: Optional[str] = None
    # ── quote only ────────────────────────────────────────────
    quote_id: Optional[str] = None
    quote_number: Optional[str] = None
    valid_until: Optional[date] = None
    status: Optional[QuoteStatus] = None

    def __post_init__(self):
        if not isinstance(self.kind, SessionKind):
            raise ValueError("kind must be SessionKind enum.")
        if not isinstance(self.items, tuple):
            raise TypeError("items must be a tuple of LineItem.")
        ids = [item.id for item in self.items]
        if len(ids) != len(set(ids)):
            raise ValueError("line item ids must be unique within a session.")
        if self.loyalty_points_to_redeem < 0 or self.loyalty_discount < 0:
            raise ValueError("loyalty redemption values must be >= 0.")
        if self.customer is None and (self.loyalty_points_to_redeem or self.loyalty_discount):
            raise ValueError("loyalty redemption requires a customer.")
        if self.kind is SessionKind.TICKET and (
            self.quote_id is not None or self.valid_until is not None
            or self.status is not None
        ):
            raise ValueError("quote fields are not valid on a ticket.")

    @property
    def is_quote(self) -> bool:
        return self.kind is SessionKind.QUOTE

    @property
    def has_service_items(self) -> bool:
        return any(i.item_type is ItemType.SERVICE for i in self.items)

    @property
    def is_editable(self) -> bool:
        if not self.is_quote or self.status is None:
            return True
        return self.status in EDITABLE_QUOTE_STATUSES

    @property
    def phase(self) -> SessionPhase:
        if self.status is QuoteStatus.CONVERTED:
            return SessionPhase.CONVERTED
        if self.status in (QuoteStatus.SENT, QuoteStatus.VIEWED, QuoteStatus.ACCEPTED):
            return SessionPhase.SENT
        if self.quote_id is not None or self.ticket_id is not None:
            return SessionPhase.SAVED
        if self.items:
            return SessionPhase.BUILDING
        return SessionPhase.EMPTY

    def find_item(self, item_id: str) -> Optional[LineItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None

    @property
    def totals(self):
        from engines.session.totals import compute_totals
        return compute_totals(self)
