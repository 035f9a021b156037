"""
POS Session Engine — Policies
===============================
Validation policies for session commands.

Each policy is (command, state) → Optional[RejectionReason] and only
looks at the command types it guards. A rejection leaves the session
exactly as it was.
"""

from __future__ import annotations

from typing import Optional

from core.commands.base import Command
from core.commands.dispatcher import permission_guard
from core.commands.rejection import ReasonCode, RejectionReason
from engines.session.commands import (
    ADD_ITEM,
    APPLY_MANUAL_DISCOUNT,
    MUTATING_COMMAND_TYPES,
    QUOTE_ONLY_COMMAND_TYPES,
    RECALCULATE_VEHICLE_PRICES,
    REVISE_QUOTE,
    SET_LOYALTY_REDEEM,
    SET_VEHICLE,
    TICKET_ONLY_COMMAND_TYPES,
    UPDATE_ITEM_NOTE,
    UPDATE_PER_UNIT_QTY,
)
from engines.session.discounts import check_loyalty_redemption, check_manual_discount
from engines.session.line_items import normalize_note
from engines.session.models import MAX_NOTE_LENGTH, SessionState


def session_kind_policy(command: Command, state: SessionState) -> Optional[RejectionReason]:
    """Quote-only actions on a ticket, or ticket-only actions on a quote."""
    if command.command_type in QUOTE_ONLY_COMMAND_TYPES and not state.is_quote:
        return RejectionReason(
            code=ReasonCode.QUOTE_ONLY_ACTION,
            message="This action is only available on quotes.",
            policy_name="session_kind_policy",
        )
    if command.command_type in TICKET_ONLY_COMMAND_TYPES and state.is_quote:
        return RejectionReason(
            code=ReasonCode.TICKET_ONLY_ACTION,
            message="This action is only available on tickets.",
            policy_name="session_kind_policy",
        )
    return None


def quote_must_be_editable_policy(
    command: Command, state: SessionState,
) -> Optional[RejectionReason]:
    """A sent or converted quote needs an explicit new revision before edits."""
    if command.command_type not in MUTATING_COMMAND_TYPES:
        return None
    if state.is_editable:
        return None
    return RejectionReason(
        code=ReasonCode.QUOTE_LOCKED,
        message=(
            f"Quote {state.quote_number or state.quote_id} is "
            f"{state.status.value}. Start a new revision to make changes."
        ),
        policy_name="quote_must_be_editable_policy",
    )


def revise_requires_locked_quote_policy(
    command: Command, state: SessionState,
) -> Optional[RejectionReason]:
    if command.command_type != REVISE_QUOTE:
        return None
    if state.quote_id is None or state.is_editable:
        return RejectionReason(
            code=ReasonCode.QUOTE_NOT_REVISABLE,
            message="Only a saved quote that has been sent or converted can be revised.",
            policy_name="revise_requires_locked_quote_policy",
        )
    return None


def manual_discount_value_policy(
    command: Command, state: SessionState,
) -> Optional[RejectionReason]:
    """Value must be finite and > 0 (a whole cent for dollars); percent caps at 100."""
    if command.command_type != APPLY_MANUAL_DISCOUNT:
        return None
    return check_manual_discount(
        command.payload["discount_type"], command.payload["value"],
    )


def loyalty_redemption_policy(
    command: Command, state: SessionState,
) -> Optional[RejectionReason]:
    if command.command_type != SET_LOYALTY_REDEEM:
        return None
    points = command.payload["points"]
    discount = command.payload["discount"]
    rejection = check_loyalty_redemption(points, discount)
    if rejection is not None:
        return rejection
    if points and state.customer is None:
        return RejectionReason(
            code=ReasonCode.LOYALTY_REQUIRES_CUSTOMER,
            message="Select a customer before redeeming loyalty points.",
            policy_name="loyalty_redemption_policy",
        )
    return None


def vehicle_ownership_policy(
    command: Command, state: SessionState,
) -> Optional[RejectionReason]:
    """A vehicle that belongs to someone else cannot join this customer's session."""
    if command.command_type not in (SET_VEHICLE, RECALCULATE_VEHICLE_PRICES):
        return None
    vehicle = command.payload["vehicle"]
    if vehicle is None or vehicle.customer_id is None or state.customer is None:
        return None
    if vehicle.customer_id != state.customer.id:
        return RejectionReason(
            code=ReasonCode.VEHICLE_NOT_OWNED_BY_CUSTOMER,
            message="This vehicle belongs to a different customer.",
            policy_name="vehicle_ownership_policy",
        )
    return None


def add_item_policy(command: Command, state: SessionState) -> Optional[RejectionReason]:
    if command.command_type != ADD_ITEM:
        return None
    if not command.payload["item"].item_name.strip():
        return RejectionReason(
            code=ReasonCode.EMPTY_ITEM_NAME,
            message="Item name is required.",
            policy_name="add_item_policy",
        )
    return None


def item_note_length_policy(
    command: Command, state: SessionState,
) -> Optional[RejectionReason]:
    if command.command_type != UPDATE_ITEM_NOTE:
        return None
    note = normalize_note(command.payload["note"])
    if note is not None and len(note) > MAX_NOTE_LENGTH:
        return RejectionReason(
            code=ReasonCode.NOTE_TOO_LONG,
            message=f"Notes must be {MAX_NOTE_LENGTH} characters or fewer.",
            policy_name="item_note_length_policy",
        )
    return None


def per_unit_limit_policy(
    command: Command, state: SessionState,
) -> Optional[RejectionReason]:
    if command.command_type != UPDATE_PER_UNIT_QTY:
        return None
    item = state.find_item(command.payload["item_id"])
    if item is None or item.per_unit_max is None:
        return None
    qty = command.payload["per_unit_qty"]
    if qty > item.per_unit_max:
        label = item.per_unit_label or "unit"
        return RejectionReason(
            code=ReasonCode.PER_UNIT_LIMIT_EXCEEDED,
            message=(
                f"{item.item_name} is limited to {item.per_unit_max} "
                f"{label}{'s' if item.per_unit_max > 1 else ''}."
            ),
            policy_name="per_unit_limit_policy",
        )
    return None


# Evaluation order: who may act, on what kind of session, then values.
DEFAULT_SESSION_POLICIES = (
    permission_guard,
    session_kind_policy,
    quote_must_be_editable_policy,
    revise_requires_locked_quote_policy,
    manual_discount_value_policy,
    loyalty_redemption_policy,
    vehicle_ownership_policy,
    add_item_policy,
    item_note_length_policy,
    per_unit_limit_policy,
)
