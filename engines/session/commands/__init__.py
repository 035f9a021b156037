"""
POS Session Engine — Request Commands
=======================================
Typed session requests that convert into canonical Command objects.

The action vocabulary is identical for the register ticket, the walk-in
job ticket and the quote builder. Quote-only and ticket-only actions are
refused by policy when aimed at the other kind of session.

Request objects raise ValueError for structural misuse (wrong types,
missing ids). Value problems a cashier can fix (a 0% discount, a note
that is too long) are NOT checked here; policies reject those.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar, Optional, Tuple

from core.commands.base import Command
from core.config.rules import LoyaltyRule
from engines.pricing.catalog import (
    CatalogProduct,
    CatalogService,
    PricingModel,
    VehicleSizeClass,
)
from engines.pricing.resolver import resolve_price
from engines.session.discounts import full_balance_redemption
from engines.session.models import (
    Coupon,
    Customer,
    DiscountType,
    ItemType,
    LineItem,
    SessionKind,
    SessionState,
    Vehicle,
)

SOURCE_ENGINE = "session"


# ══════════════════════════════════════════════════════════════
# COMMAND TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

SET_CUSTOMER = "session.customer.set.request"
SET_VEHICLE = "session.vehicle.set.request"
SET_COUPON = "session.coupon.set.request"
SET_LOYALTY_REDEEM = "session.loyalty.redeem.request"
APPLY_MANUAL_DISCOUNT = "session.manual_discount.apply.request"
REMOVE_MANUAL_DISCOUNT = "session.manual_discount.remove.request"
ADD_ITEM = "session.item.add.request"
UPDATE_ITEM_QUANTITY = "session.item.quantity.update.request"
UPDATE_ITEM_NOTE = "session.item.note.update.request"
UPDATE_PER_UNIT_QTY = "session.item.per_unit_qty.update.request"
REMOVE_ITEM = "session.item.remove.request"
RECALCULATE_VEHICLE_PRICES = "session.item.vehicle_prices.recalculate.request"
SET_NOTES = "session.notes.set.request"
SET_VALID_UNTIL = "session.quote.valid_until.set.request"
CLEAR_TICKET = "session.ticket.clear.request"
CLEAR_QUOTE = "session.quote.clear.request"
RESTORE_TICKET = "session.ticket.restore.request"
LOAD_QUOTE = "session.quote.load.request"
REVISE_QUOTE = "session.quote.revise.request"

SESSION_COMMAND_TYPES = frozenset({
    SET_CUSTOMER,
    SET_VEHICLE,
    SET_COUPON,
    SET_LOYALTY_REDEEM,
    APPLY_MANUAL_DISCOUNT,
    REMOVE_MANUAL_DISCOUNT,
    ADD_ITEM,
    UPDATE_ITEM_QUANTITY,
    UPDATE_ITEM_NOTE,
    UPDATE_PER_UNIT_QTY,
    REMOVE_ITEM,
    RECALCULATE_VEHICLE_PRICES,
    SET_NOTES,
    SET_VALID_UNTIL,
    CLEAR_TICKET,
    CLEAR_QUOTE,
    RESTORE_TICKET,
    LOAD_QUOTE,
    REVISE_QUOTE,
})

QUOTE_ONLY_COMMAND_TYPES = frozenset({
    SET_VALID_UNTIL, CLEAR_QUOTE, LOAD_QUOTE, REVISE_QUOTE,
})
TICKET_ONLY_COMMAND_TYPES = frozenset({CLEAR_TICKET, RESTORE_TICKET})

# Lifecycle commands stay available on a locked (sent/converted) quote.
LIFECYCLE_COMMAND_TYPES = frozenset({
    CLEAR_TICKET, CLEAR_QUOTE, RESTORE_TICKET, LOAD_QUOTE, REVISE_QUOTE,
})
MUTATING_COMMAND_TYPES = SESSION_COMMAND_TYPES - LIFECYCLE_COMMAND_TYPES


# ══════════════════════════════════════════════════════════════
# REQUEST BASE
# ══════════════════════════════════════════════════════════════

class _SessionRequest:
    """Shared to_command() for every session request."""

    command_type: ClassVar[str]

    def _payload(self) -> dict:
        return {}

    def to_command(
        self,
        *,
        command_id: uuid.UUID,
        issued_at: datetime,
        permitted: bool = True,
    ) -> Command:
        return Command(
            command_id=command_id,
            command_type=self.command_type,
            payload=self._payload(),
            issued_at=issued_at,
            source_engine=SOURCE_ENGINE,
            permitted=permitted,
        )


def _require_id(value, name: str) -> None:
    if not value or not isinstance(value, str):
        raise ValueError(f"{name} must be non-empty.")


def _require_int(value, name: str) -> None:
    if not isinstance(value, int) or isinstance(value, bool):
        raise ValueError(f"{name} must be an integer.")


def _new_line_id() -> str:
    return str(uuid.uuid4())


# ══════════════════════════════════════════════════════════════
# CUSTOMER / VEHICLE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SetCustomerRequest(_SessionRequest):
    """Select a customer; None clears customer, vehicle and loyalty."""
    customer: Optional[Customer]
    command_type: ClassVar[str] = SET_CUSTOMER

    def __post_init__(self):
        if self.customer is not None and not isinstance(self.customer, Customer):
            raise ValueError("customer must be Customer or None.")

    def _payload(self) -> dict:
        return {"customer": self.customer}


@dataclass(frozen=True)
class SetVehicleRequest(_SessionRequest):
    """
    Select a vehicle. Service lines are re-priced against the services
    passed along; the caller hands over the catalog it already holds.
    """
    vehicle: Optional[Vehicle]
    services: Tuple[CatalogService, ...] = ()
    command_type: ClassVar[str] = SET_VEHICLE

    def __post_init__(self):
        if self.vehicle is not None and not isinstance(self.vehicle, Vehicle):
            raise ValueError("vehicle must be Vehicle or None.")
        if not isinstance(self.services, tuple):
            raise ValueError("services must be a tuple of CatalogService.")

    def _payload(self) -> dict:
        return {"vehicle": self.vehicle, "services": self.services}


@dataclass(frozen=True)
class RecalculateVehiclePricesRequest(_SessionRequest):
    vehicle: Optional[Vehicle]
    services: Tuple[CatalogService, ...] = ()
    command_type: ClassVar[str] = RECALCULATE_VEHICLE_PRICES

    def __post_init__(self):
        if self.vehicle is not None and not isinstance(self.vehicle, Vehicle):
            raise ValueError("vehicle must be Vehicle or None.")
        if not isinstance(self.services, tuple):
            raise ValueError("services must be a tuple of CatalogService.")

    def _payload(self) -> dict:
        return {"vehicle": self.vehicle, "services": self.services}


# ══════════════════════════════════════════════════════════════
# DISCOUNTS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SetCouponRequest(_SessionRequest):
    """Attach a validated coupon (None detaches)."""
    coupon: Optional[Coupon]
    command_type: ClassVar[str] = SET_COUPON

    def __post_init__(self):
        if self.coupon is not None and not isinstance(self.coupon, Coupon):
            raise ValueError("coupon must be Coupon or None.")

    def _payload(self) -> dict:
        return {"coupon": self.coupon}


@dataclass(frozen=True)
class SetLoyaltyRedeemRequest(_SessionRequest):
    """Redeem points for a dollar discount (cents). 0/0 clears."""
    points: int
    discount: int
    command_type: ClassVar[str] = SET_LOYALTY_REDEEM

    def __post_init__(self):
        _require_int(self.points, "points")
        _require_int(self.discount, "discount")

    def _payload(self) -> dict:
        return {"points": self.points, "discount": self.discount}

    @classmethod
    def full_balance(cls, customer: Customer, rule: LoyaltyRule) -> SetLoyaltyRedeemRequest:
        points, discount = full_balance_redemption(customer.loyalty_points_balance, rule)
        return cls(points=points, discount=discount)

    @classmethod
    def clear(cls) -> SetLoyaltyRedeemRequest:
        return cls(points=0, discount=0)


@dataclass(frozen=True)
class ApplyManualDiscountRequest(_SessionRequest):
    discount_type: DiscountType
    value: Decimal
    label: str = ""
    command_type: ClassVar[str] = APPLY_MANUAL_DISCOUNT

    def __post_init__(self):
        if not isinstance(self.discount_type, DiscountType):
            raise ValueError("discount_type must be DiscountType enum.")
        if not isinstance(self.value, (Decimal, int)) or isinstance(self.value, bool):
            raise ValueError("value must be Decimal or int.")
        if not isinstance(self.label, str):
            raise ValueError("label must be a string.")

    def _payload(self) -> dict:
        return {
            "discount_type": self.discount_type,
            "value": Decimal(self.value),
            "label": self.label,
        }


@dataclass(frozen=True)
class RemoveManualDiscountRequest(_SessionRequest):
    command_type: ClassVar[str] = REMOVE_MANUAL_DISCOUNT


# ══════════════════════════════════════════════════════════════
# LINE ITEMS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class AddItemRequest(_SessionRequest):
    """
    Add a priced line.

    pricing_incomplete is set when a size-aware service was priced
    without a vehicle; the UI decides how to warn.
    """
    item: LineItem
    pricing_incomplete: bool = False
    command_type: ClassVar[str] = ADD_ITEM

    def __post_init__(self):
        if not isinstance(self.item, LineItem):
            raise ValueError("item must be LineItem.")

    def _payload(self) -> dict:
        return {"item": self.item}

    @classmethod
    def for_service(
        cls,
        service: CatalogService,
        vehicle_size_class: Optional[VehicleSizeClass] = None,
        *,
        tier_name: Optional[str] = None,
        per_unit_qty: Optional[int] = None,
        item_id: Optional[str] = None,
    ) -> AddItemRequest:
        is_per_unit = service.pricing_model is PricingModel.PER_UNIT
        if is_per_unit and per_unit_qty is None:
            per_unit_qty = 1
        resolution = resolve_price(
            service, vehicle_size_class, tier_name=tier_name, per_unit_qty=per_unit_qty,
        )
        item = LineItem(
            id=item_id or _new_line_id(),
            item_type=ItemType.SERVICE,
            catalog_ref=service.id,
            item_name=service.name,
            unit_price=resolution.unit_price,
            is_taxable=service.is_taxable,
            tier_name=resolution.tier_name,
            tier_label=resolution.tier_label,
            vehicle_size_class=vehicle_size_class,
            per_unit_qty=per_unit_qty if is_per_unit else None,
            per_unit_price=service.per_unit_price if is_per_unit else None,
            per_unit_label=service.per_unit_label if is_per_unit else None,
            per_unit_max=service.per_unit_max if is_per_unit else None,
        )
        return cls(item=item, pricing_incomplete=resolution.incomplete)

    @classmethod
    def for_product(
        cls, product: CatalogProduct, *, item_id: Optional[str] = None,
    ) -> AddItemRequest:
        item = LineItem(
            id=item_id or _new_line_id(),
            item_type=ItemType.PRODUCT,
            catalog_ref=product.id,
            item_name=product.name,
            unit_price=product.retail_price,
            is_taxable=product.is_taxable,
        )
        return cls(item=item)

    @classmethod
    def custom(
        cls,
        name: str,
        price: int,
        *,
        is_taxable: bool = False,
        item_id: Optional[str] = None,
    ) -> AddItemRequest:
        item = LineItem(
            id=item_id or _new_line_id(),
            item_type=ItemType.CUSTOM,
            item_name=name,
            unit_price=price,
            is_taxable=is_taxable,
        )
        return cls(item=item)


@dataclass(frozen=True)
class UpdateItemQuantityRequest(_SessionRequest):
    """quantity <= 0 removes the line."""
    item_id: str
    quantity: int
    command_type: ClassVar[str] = UPDATE_ITEM_QUANTITY

    def __post_init__(self):
        _require_id(self.item_id, "item_id")
        _require_int(self.quantity, "quantity")

    def _payload(self) -> dict:
        return {"item_id": self.item_id, "quantity": self.quantity}


@dataclass(frozen=True)
class UpdateItemNoteRequest(_SessionRequest):
    item_id: str
    note: Optional[str]
    command_type: ClassVar[str] = UPDATE_ITEM_NOTE

    def __post_init__(self):
        _require_id(self.item_id, "item_id")
        if self.note is not None and not isinstance(self.note, str):
            raise ValueError("note must be a string or None.")

    def _payload(self) -> dict:
        return {"item_id": self.item_id, "note": self.note}


@dataclass(frozen=True)
class UpdatePerUnitQtyRequest(_SessionRequest):
    """per_unit_qty <= 0 removes the line."""
    item_id: str
    per_unit_qty: int
    command_type: ClassVar[str] = UPDATE_PER_UNIT_QTY

    def __post_init__(self):
        _require_id(self.item_id, "item_id")
        _require_int(self.per_unit_qty, "per_unit_qty")

    def _payload(self) -> dict:
        return {"item_id": self.item_id, "per_unit_qty": self.per_unit_qty}


@dataclass(frozen=True)
class RemoveItemRequest(_SessionRequest):
    item_id: str
    command_type: ClassVar[str] = REMOVE_ITEM

    def __post_init__(self):
        _require_id(self.item_id, "item_id")

    def _payload(self) -> dict:
        return {"item_id": self.item_id}


# ══════════════════════════════════════════════════════════════
# SESSION FIELDS / LIFECYCLE
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class SetNotesRequest(_SessionRequest):
    notes: Optional[str]
    command_type: ClassVar[str] = SET_NOTES

    def __post_init__(self):
        if self.notes is not None and not isinstance(self.notes, str):
            raise ValueError("notes must be a string or None.")

    def _payload(self) -> dict:
        return {"notes": self.notes}


@dataclass(frozen=True)
class SetValidUntilRequest(_SessionRequest):
    valid_until: Optional[date]
    command_type: ClassVar[str] = SET_VALID_UNTIL

    def __post_init__(self):
        if self.valid_until is not None and (
            not isinstance(self.valid_until, date) or isinstance(self.valid_until, datetime)
        ):
            raise ValueError("valid_until must be a date or None.")

    def _payload(self) -> dict:
        return {"valid_until": self.valid_until}


@dataclass(frozen=True)
class ClearTicketRequest(_SessionRequest):
    command_type: ClassVar[str] = CLEAR_TICKET


@dataclass(frozen=True)
class ClearQuoteRequest(_SessionRequest):
    command_type: ClassVar[str] = CLEAR_QUOTE


@dataclass(frozen=True)
class ReviseQuoteRequest(_SessionRequest):
    """Reopen a sent/converted quote for edits as a new draft revision."""
    command_type: ClassVar[str] = REVISE_QUOTE


@dataclass(frozen=True)
class LoadQuoteRequest(_SessionRequest):
    """Replace the whole session with a persisted quote."""
    state: SessionState
    command_type: ClassVar[str] = LOAD_QUOTE

    def __post_init__(self):
        if not isinstance(self.state, SessionState) or self.state.kind is not SessionKind.QUOTE:
            raise ValueError("state must be a quote SessionState.")

    def _payload(self) -> dict:
        return {"state": self.state}


@dataclass(frozen=True)
class RestoreTicketRequest(_SessionRequest):
    """Replace the whole session with a held ticket."""
    state: SessionState
    command_type: ClassVar[str] = RESTORE_TICKET

    def __post_init__(self):
        if not isinstance(self.state, SessionState) or self.state.kind is not SessionKind.TICKET:
            raise ValueError("state must be a ticket SessionState.")

    def _payload(self) -> dict:
        return {"state": self.state}
