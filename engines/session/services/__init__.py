"""
POS Session Engine — Application Service
==========================================
Pure reducer for ticket and quote sessions plus the single-owner store
that holds the current session.

Flow:
    Command → CommandDispatcher (policies) → handler → new SessionState
            → CommandOutcome (ACCEPTED with the new state, or REJECTED
              with the untouched prior state)

RULES:
- The reducer performs no I/O and never reads the clock; the only
  time it needs (quote validity) comes from command.issued_at
- Handlers receive commands that already passed every policy
- Totals are never stored; they are derived from the state on read
"""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, timedelta
from typing import Callable, Dict, Optional

from core.commands.base import Command
from core.commands.dispatcher import CommandDispatcher
from core.commands.outcomes import CommandOutcome
from core.config.rules import DEFAULT_CONFIG, PosConfig
from engines.session import commands as cmd
from engines.session.discounts import (
    apply_manual_discount,
    clear_loyalty_redemption,
    remove_manual_discount,
    set_coupon,
    set_loyalty_redemption,
)
from engines.session.line_items import (
    add_item,
    recalculate_for_vehicle,
    remove_item,
    update_note,
    update_per_unit_qty,
    update_quantity,
)
from engines.session.models import QuoteStatus, SessionKind, SessionState
from engines.session.policies import DEFAULT_SESSION_POLICIES
from engines.session.totals import Totals

logger = logging.getLogger("pos.session")


# ══════════════════════════════════════════════════════════════
# SESSION FACTORIES
# ══════════════════════════════════════════════════════════════

def new_ticket(config: PosConfig = DEFAULT_CONFIG) -> SessionState:
    return SessionState(kind=SessionKind.TICKET, tax_rate=config.tax.rate)


def new_quote(config: PosConfig = DEFAULT_CONFIG, today: Optional[date] = None) -> SessionState:
    """
    A blank draft quote. valid_until is left empty unless the caller
    supplies today's date.
    """
    valid_until = None
    if today is not None:
        valid_until = today + timedelta(days=config.quote.default_valid_days)
    return SessionState(
        kind=SessionKind.QUOTE,
        tax_rate=config.tax.rate,
        valid_until=valid_until,
        status=QuoteStatus.DRAFT,
    )


# ══════════════════════════════════════════════════════════════
# HANDLERS
# ══════════════════════════════════════════════════════════════

Handler = Callable[[SessionState, Command, PosConfig], SessionState]


def _set_customer(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    customer = command.payload["customer"]
    same_customer = (
        customer is not None
        and state.customer is not None
        and customer.id == state.customer.id
    )
    if same_customer:
        return replace(state, customer=customer)
    # A vehicle picked before any customer stays if it can belong to them.
    keep_vehicle = (
        customer is not None
        and state.customer is None
        and state.vehicle is not None
        and state.vehicle.customer_id in (None, customer.id)
    )
    # Otherwise vehicle and loyalty belonged to the previous customer.
    cleared = clear_loyalty_redemption(
        replace(state, vehicle=state.vehicle if keep_vehicle else None)
    )
    return replace(cleared, customer=customer)


def _set_vehicle(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    vehicle = command.payload["vehicle"]
    items = state.items
    if vehicle is not None and state.has_service_items:
        items = recalculate_for_vehicle(
            items, vehicle.size_class, command.payload["services"],
        )
    return replace(state, vehicle=vehicle, items=items)


def _recalculate_vehicle_prices(
    state: SessionState, command: Command, config: PosConfig,
) -> SessionState:
    vehicle = command.payload["vehicle"]
    size_class = vehicle.size_class if vehicle is not None else None
    return replace(
        state,
        items=recalculate_for_vehicle(state.items, size_class, command.payload["services"]),
    )


def _set_coupon(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    return set_coupon(state, command.payload["coupon"])


def _set_loyalty_redeem(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    return set_loyalty_redemption(
        state, command.payload["points"], command.payload["discount"],
    )


def _apply_manual_discount(
    state: SessionState, command: Command, config: PosConfig,
) -> SessionState:
    return apply_manual_discount(
        state,
        command.payload["discount_type"],
        command.payload["value"],
        command.payload["label"],
    )


def _remove_manual_discount(
    state: SessionState, command: Command, config: PosConfig,
) -> SessionState:
    return remove_manual_discount(state)


def _add_item(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    return replace(state, items=add_item(state.items, command.payload["item"]))


def _log_unknown_item(state: SessionState, command: Command) -> None:
    item_id = command.payload["item_id"]
    if state.find_item(item_id) is None:
        logger.debug(
            f"Command {command.command_id} ({command.command_type}) "
            f"targets unknown line {item_id}; nothing changed"
        )


def _update_item_quantity(
    state: SessionState, command: Command, config: PosConfig,
) -> SessionState:
    _log_unknown_item(state, command)
    return replace(
        state,
        items=update_quantity(
            state.items, command.payload["item_id"], command.payload["quantity"],
        ),
    )


def _update_item_note(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    _log_unknown_item(state, command)
    return replace(
        state,
        items=update_note(state.items, command.payload["item_id"], command.payload["note"]),
    )


def _update_per_unit_qty(
    state: SessionState, command: Command, config: PosConfig,
) -> SessionState:
    _log_unknown_item(state, command)
    return replace(
        state,
        items=update_per_unit_qty(
            state.items, command.payload["item_id"], command.payload["per_unit_qty"],
        ),
    )


def _remove_item(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    _log_unknown_item(state, command)
    return replace(state, items=remove_item(state.items, command.payload["item_id"]))


def _set_notes(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    notes = command.payload["notes"]
    return replace(state, notes=notes if notes else None)


def _set_valid_until(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    return replace(state, valid_until=command.payload["valid_until"])


def _clear_ticket(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    return new_ticket(config)


def _clear_quote(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    return new_quote(config, today=command.issued_at.date())


def _replace_session(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    return command.payload["state"]


def _revise_quote(state: SessionState, command: Command, config: PosConfig) -> SessionState:
    return replace(state, status=QuoteStatus.DRAFT)


SESSION_HANDLERS: Dict[str, Handler] = {
    cmd.SET_CUSTOMER: _set_customer,
    cmd.SET_VEHICLE: _set_vehicle,
    cmd.RECALCULATE_VEHICLE_PRICES: _recalculate_vehicle_prices,
    cmd.SET_COUPON: _set_coupon,
    cmd.SET_LOYALTY_REDEEM: _set_loyalty_redeem,
    cmd.APPLY_MANUAL_DISCOUNT: _apply_manual_discount,
    cmd.REMOVE_MANUAL_DISCOUNT: _remove_manual_discount,
    cmd.ADD_ITEM: _add_item,
    cmd.UPDATE_ITEM_QUANTITY: _update_item_quantity,
    cmd.UPDATE_ITEM_NOTE: _update_item_note,
    cmd.UPDATE_PER_UNIT_QTY: _update_per_unit_qty,
    cmd.REMOVE_ITEM: _remove_item,
    cmd.SET_NOTES: _set_notes,
    cmd.SET_VALID_UNTIL: _set_valid_until,
    cmd.CLEAR_TICKET: _clear_ticket,
    cmd.CLEAR_QUOTE: _clear_quote,
    cmd.RESTORE_TICKET: _replace_session,
    cmd.LOAD_QUOTE: _replace_session,
    cmd.REVISE_QUOTE: _revise_quote,
}

_DEFAULT_DISPATCHER = CommandDispatcher(list(DEFAULT_SESSION_POLICIES))


# ══════════════════════════════════════════════════════════════
# REDUCER
# ══════════════════════════════════════════════════════════════

def reduce_session(
    state: SessionState,
    command: Command,
    config: PosConfig = DEFAULT_CONFIG,
    dispatcher: Optional[CommandDispatcher] = None,
) -> CommandOutcome:
    """
    Apply one command to a session.

    Returns:
        ACCEPTED outcome carrying the new state, or REJECTED outcome
        carrying the unchanged state and the first policy rejection.

    Raises:
        ValueError if the command type is not a session command.
    """
    handler = SESSION_HANDLERS.get(command.command_type)
    if handler is None:
        raise ValueError(f"Unsupported session command: {command.command_type}")

    rejection = (dispatcher or _DEFAULT_DISPATCHER).evaluate(command, state)
    if rejection is not None:
        return CommandOutcome.rejected(command.command_id, state, rejection)

    new_state = handler(state, command, config)
    logger.info(f"Command {command.command_id} ({command.command_type}) accepted")
    return CommandOutcome.accepted(command.command_id, new_state)


# ══════════════════════════════════════════════════════════════
# SESSION STORE
# ══════════════════════════════════════════════════════════════

class SessionStore:
    """
    Holds the one in-progress session of a register or quote builder.

    Commands are applied in dispatch order; each accepted outcome
    replaces the held state (last write wins). Not thread-safe: a
    session has exactly one owner.
    """

    def __init__(
        self,
        state: Optional[SessionState] = None,
        *,
        config: PosConfig = DEFAULT_CONFIG,
        dispatcher: Optional[CommandDispatcher] = None,
    ):
        self._config = config
        self._dispatcher = dispatcher or _DEFAULT_DISPATCHER
        self._state = state if state is not None else new_ticket(config)

    @classmethod
    def for_quote(
        cls, config: PosConfig = DEFAULT_CONFIG, today: Optional[date] = None,
    ) -> SessionStore:
        return cls(new_quote(config, today), config=config)

    def dispatch(self, command: Command) -> CommandOutcome:
        outcome = reduce_session(self._state, command, self._config, self._dispatcher)
        if outcome.is_accepted:
            self._state = outcome.state
        return outcome

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def totals(self) -> Totals:
        return self._state.totals

    @property
    def config(self) -> PosConfig:
        return self._config
