"""
POS Command Layer — Policy Dispatcher
========================================
Accept Command → Evaluate Policies → First rejection or None.

The Dispatcher is the DECISION MAKER. It decides whether a command may be
applied to the current session.

The Dispatcher DOES NOT:
- Mutate session state
- Perform I/O
- Compute totals

Policy evaluation is pluggable — policies are registered as callables
that return Optional[RejectionReason]. If any policy rejects, evaluation
stops and that reason is returned.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional

from core.commands.base import Command
from core.commands.rejection import ReasonCode, RejectionReason

logger = logging.getLogger("pos.commands")


# ══════════════════════════════════════════════════════════════
# POLICY TYPE
# ══════════════════════════════════════════════════════════════

# A policy is a callable:
#   (Command, state) → Optional[RejectionReason]
#   Returns None if policy passes, RejectionReason if it rejects.
PolicyEvaluator = Callable[[Command, Any], Optional[RejectionReason]]


# ══════════════════════════════════════════════════════════════
# BUILT-IN POLICIES
# ══════════════════════════════════════════════════════════════

def permission_guard(command: Command, state: Any) -> Optional[RejectionReason]:
    """
    The hosting layer resolves permissions and hands the engine a boolean.
    A command issued without the capability is refused.
    """
    if not command.permitted:
        return RejectionReason(
            code=ReasonCode.PERMISSION_DENIED,
            message="You do not have permission to perform this action.",
            policy_name="permission_guard",
        )
    return None


# ══════════════════════════════════════════════════════════════
# COMMAND DISPATCHER
# ══════════════════════════════════════════════════════════════

class CommandDispatcher:
    """
    Evaluate a command against registered policies.

    Usage:
        dispatcher = CommandDispatcher()
        dispatcher.register_policy(permission_guard)
        dispatcher.register_policy(manual_discount_value_policy)

        rejection = dispatcher.evaluate(command, state)
        # None → apply the command

    Policies are evaluated in registration order.
    First rejection wins — remaining policies are skipped.
    """

    def __init__(self, policies: Optional[List[PolicyEvaluator]] = None):
        self._policies: List[PolicyEvaluator] = []
        for policy in policies or ():
            self.register_policy(policy)

    def register_policy(self, policy: PolicyEvaluator) -> None:
        if not callable(policy):
            raise TypeError(
                f"Policy must be callable, got {type(policy).__name__}."
            )
        self._policies.append(policy)

        policy_name = getattr(policy, "__qualname__", str(policy))
        logger.debug(f"Policy registered: {policy_name}")

    @property
    def policies(self) -> tuple:
        return tuple(self._policies)

    def evaluate(self, command: Command, state: Any) -> Optional[RejectionReason]:
        """
        Run every policy against (command, state).

        Returns:
            The first RejectionReason produced, or None if all pass.
        """
        for policy in self._policies:
            rejection = policy(command, state)
            if rejection is not None:
                if not isinstance(rejection, RejectionReason):
                    raise TypeError(
                        f"Policy must return RejectionReason or None, "
                        f"got {type(rejection).__name__}."
                    )

                logger.info(
                    f"Command {command.command_id} rejected by "
                    f"policy '{rejection.policy_name}': "
                    f"[{rejection.code}] {rejection.message}"
                )
                return rejection
        return None
