"""
POS Command Layer
===================
Every change begins as a Command.
Every Command produces exactly one Outcome.
REJECTED commands are first-class citizens.
"""

from core.commands.base import Command
from core.commands.outcomes import (
    CommandOutcome,
    CommandStatus,
)
from core.commands.rejection import (
    ReasonCode,
    RejectionReason,
)
from core.commands.dispatcher import (
    CommandDispatcher,
    PolicyEvaluator,
    permission_guard,
)

__all__ = [
    # ── Base ──────────────────────────────────────────────────
    "Command",
    # ── Outcomes ──────────────────────────────────────────────
    "CommandOutcome",
    "CommandStatus",
    # ── Rejection ─────────────────────────────────────────────
    "RejectionReason",
    "ReasonCode",
    # ── Dispatcher ────────────────────────────────────────────
    "CommandDispatcher",
    "PolicyEvaluator",
    "permission_guard",
]
