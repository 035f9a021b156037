"""
POS Command Layer — Rejection Model
======================================
Structured rejection reasons for denied commands.

A rejection is an expected, user-correctable answer ("value must be
greater than 0"), never an exception. The session state the command was
aimed at stays exactly as it was.

Every rejection must be:
- Deterministic (same input → same rejection)
- Machine-readable (code)
- Human-readable (message)
- Attributable (policy_name)
"""

from __future__ import annotations

from dataclasses import dataclass


# ══════════════════════════════════════════════════════════════
# REJECTION REASON (frozen explanation structure)
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class RejectionReason:
    """
    Structured reason for command rejection.

    Fields:
        code:        Machine-readable rejection code (e.g. 'INVALID_DISCOUNT_VALUE').
        message:     Human-readable explanation, safe to show a cashier.
        policy_name: Name of the policy that caused rejection.
    """

    code: str
    message: str
    policy_name: str

    def __post_init__(self):
        if not self.code or not isinstance(self.code, str):
            raise ValueError("code must be a non-empty string.")

        if not self.message or not isinstance(self.message, str):
            raise ValueError("message must be a non-empty string.")

        if not self.policy_name or not isinstance(self.policy_name, str):
            raise ValueError("policy_name must be a non-empty string.")

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "message": self.message,
            "policy_name": self.policy_name,
        }


# ══════════════════════════════════════════════════════════════
# STANDARD REJECTION CODES
# ══════════════════════════════════════════════════════════════

class ReasonCode:
    """
    Known rejection codes. Extensible by engines.

    Convention: SCREAMING_SNAKE_CASE.
    """

    # ── Authorization ─────────────────────────────────────────
    PERMISSION_DENIED = "PERMISSION_DENIED"

    # ── Session kind / lifecycle ──────────────────────────────
    QUOTE_ONLY_ACTION = "QUOTE_ONLY_ACTION"
    TICKET_ONLY_ACTION = "TICKET_ONLY_ACTION"
    QUOTE_LOCKED = "QUOTE_LOCKED"
    QUOTE_NOT_REVISABLE = "QUOTE_NOT_REVISABLE"

    # ── Discounts ─────────────────────────────────────────────
    INVALID_DISCOUNT_VALUE = "INVALID_DISCOUNT_VALUE"
    PERCENT_OUT_OF_RANGE = "PERCENT_OUT_OF_RANGE"
    INVALID_LOYALTY_REDEMPTION = "INVALID_LOYALTY_REDEMPTION"
    LOYALTY_REQUIRES_CUSTOMER = "LOYALTY_REQUIRES_CUSTOMER"

    # ── Line items ────────────────────────────────────────────
    NOTE_TOO_LONG = "NOTE_TOO_LONG"
    PER_UNIT_LIMIT_EXCEEDED = "PER_UNIT_LIMIT_EXCEEDED"
    EMPTY_ITEM_NAME = "EMPTY_ITEM_NAME"

    # ── Customer / vehicle ────────────────────────────────────
    VEHICLE_NOT_OWNED_BY_CUSTOMER = "VEHICLE_NOT_OWNED_BY_CUSTOMER"

    # ── General ───────────────────────────────────────────────
    POLICY_VIOLATION = "POLICY_VIOLATION"
