"""
POS Command Layer — Command Base Contract
============================================
Every change to a ticket or quote begins as a Command.

A Command is a frozen declaration of cashier intent.
It carries identity, the capability decision and payload — nothing else.

Rules:
- Immutable once created (frozen dataclass)
- No business logic inside
- No I/O
- command_type must end with '.request'
- command_type follows engine.domain.action.request format

A Command is NOT a state change. It is intent awaiting judgment.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime


# ══════════════════════════════════════════════════════════════
# CANONICAL COMMAND
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class Command:
    """
    Canonical POS Command — declaration of intent against a session.

    Fields:
        command_id:     Unique identifier (UUID).
        command_type:   Namespaced type ending in '.request'
                        (e.g. 'session.item.add.request').
        payload:        Intent data (dict of plain values and domain records).
        issued_at:      When the UI issued the command. The engine never
                        reads the clock itself; date-derived defaults
                        come from here.
        source_engine:  Engine that owns this command.
        permitted:      Capability decision made by the hosting layer
                        (e.g. "may apply manual discounts").

    Example:
        Command(
            command_id=uuid.uuid4(),
            command_type="session.item.quantity.update.request",
            payload={"item_id": "line-1", "quantity": 3},
            issued_at=datetime.now(timezone.utc),
            source_engine="session",
        )
    """

    command_id: uuid.UUID
    command_type: str
    payload: dict
    issued_at: datetime
    source_engine: str
    permitted: bool = True

    def __post_init__(self):
        # ── command_id must be UUID ───────────────────────────
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError(
                f"command_id must be UUID, got {type(self.command_id).__name__}"
            )

        # ── command_type must end with .request ───────────────
        if not self.command_type or not isinstance(self.command_type, str):
            raise ValueError("command_type must be a non-empty string.")

        if not self.command_type.endswith(".request"):
            raise ValueError(
                f"command_type '{self.command_type}' must end with "
                f"'.request' (e.g. 'session.item.add.request')."
            )

        # ── command_type minimum 4 segments ───────────────────
        parts = self.command_type.split(".")
        if len(parts) < 4:
            raise ValueError(
                f"command_type '{self.command_type}' must follow "
                f"engine.domain.action.request format (minimum 4 segments)."
            )

        # ── source_engine must match first segment ────────────
        if parts[0] != self.source_engine:
            raise ValueError(
                f"command_type namespace '{parts[0]}' does not match "
                f"source_engine '{self.source_engine}'."
            )

        # ── payload must be dict ──────────────────────────────
        if not isinstance(self.payload, dict):
            raise TypeError("payload must be a dict.")

        if not isinstance(self.issued_at, datetime):
            raise ValueError("issued_at must be a datetime.")

        if not isinstance(self.permitted, bool):
            raise TypeError("permitted must be a bool.")
