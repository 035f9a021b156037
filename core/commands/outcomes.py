"""
POS Command Layer — Command Outcome Contract
===============================================
Every Command produces exactly one Outcome. No exceptions.

ACCEPTED → the command was applied; `state` is the resulting session.
REJECTED → the command was refused; `state` is the untouched prior session
           and `reason` explains why.

Rules:
- Exactly one outcome per command
- Outcome is immutable (frozen dataclass)
- REJECTED must contain reason (RejectionReason)
- ACCEPTED must NOT contain reason
- state is always present — a caller never loses its session
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from core.commands.rejection import RejectionReason


# ══════════════════════════════════════════════════════════════
# COMMAND STATUS
# ══════════════════════════════════════════════════════════════

class CommandStatus(Enum):
    """Binary command decision. No middle ground."""
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


# ══════════════════════════════════════════════════════════════
# COMMAND OUTCOME
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class CommandOutcome:
    """
    Deterministic result of applying a command to a session.

    Fields:
        command_id:  The command this outcome belongs to.
        status:      ACCEPTED or REJECTED.
        state:       Session after the command (prior session if REJECTED).
        reason:      RejectionReason (mandatory if REJECTED, None if ACCEPTED).

    Invariants:
        - REJECTED + reason is None → ValueError
        - ACCEPTED + reason is not None → ValueError
    """

    command_id: uuid.UUID
    status: CommandStatus
    state: Any
    reason: Optional[RejectionReason] = None

    def __post_init__(self):
        if not isinstance(self.command_id, uuid.UUID):
            raise ValueError("command_id must be UUID.")

        if not isinstance(self.status, CommandStatus):
            raise ValueError(
                f"status must be CommandStatus, got {type(self.status).__name__}."
            )

        if self.status == CommandStatus.REJECTED and self.reason is None:
            raise ValueError(
                "REJECTED outcome must include a RejectionReason. "
                "No silent rejections allowed."
            )

        if self.status == CommandStatus.ACCEPTED and self.reason is not None:
            raise ValueError(
                "ACCEPTED outcome must NOT include a RejectionReason."
            )

    @property
    def is_accepted(self) -> bool:
        return self.status == CommandStatus.ACCEPTED

    @property
    def is_rejected(self) -> bool:
        return self.status == CommandStatus.REJECTED

    @classmethod
    def accepted(cls, command_id: uuid.UUID, state: Any) -> CommandOutcome:
        return cls(command_id=command_id, status=CommandStatus.ACCEPTED, state=state)

    @classmethod
    def rejected(
        cls, command_id: uuid.UUID, state: Any, reason: RejectionReason,
    ) -> CommandOutcome:
        return cls(
            command_id=command_id,
            status=CommandStatus.REJECTED,
            state=state,
            reason=reason,
        )
