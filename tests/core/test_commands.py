"""
POS Command Layer — Tests
===========================
Command structure, rejection reasons, outcomes and the policy dispatcher.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Optional

import pytest

from core.commands.base import Command
from core.commands.dispatcher import CommandDispatcher, permission_guard
from core.commands.outcomes import CommandOutcome, CommandStatus
from core.commands.rejection import ReasonCode, RejectionReason

NOW = datetime(2026, 3, 2, 9, 30, 0, tzinfo=timezone.utc)


def make_command(**overrides) -> Command:
    fields = dict(
        command_id=uuid.uuid4(),
        command_type="session.item.add.request",
        payload={"item_id": "line-1"},
        issued_at=NOW,
        source_engine="session",
    )
    fields.update(overrides)
    return Command(**fields)


def always_reject(command: Command, state: Any) -> Optional[RejectionReason]:
    return RejectionReason(
        code=ReasonCode.POLICY_VIOLATION,
        message="Always rejects.",
        policy_name="always_reject",
    )


def never_reject(command: Command, state: Any) -> Optional[RejectionReason]:
    return None


# ══════════════════════════════════════════════════════════════
# COMMAND STRUCTURE
# ══════════════════════════════════════════════════════════════

class TestCommandStructure:
    def test_valid_command(self):
        cmd = make_command()
        assert cmd.permitted is True
        assert cmd.source_engine == "session"

    def test_command_id_must_be_uuid(self):
        with pytest.raises(ValueError, match="command_id must be UUID"):
            make_command(command_id="not-a-uuid")

    def test_must_end_with_request(self):
        with pytest.raises(ValueError, match="must end with"):
            make_command(command_type="session.item.add")

    def test_minimum_four_segments(self):
        with pytest.raises(ValueError, match="minimum 4 segments"):
            make_command(command_type="session.add.request")

    def test_namespace_must_match_source_engine(self):
        with pytest.raises(ValueError, match="does not match"):
            make_command(source_engine="retail")

    def test_payload_must_be_dict(self):
        with pytest.raises(TypeError, match="payload must be a dict"):
            make_command(payload=["x"])

    def test_issued_at_must_be_datetime(self):
        with pytest.raises(ValueError, match="issued_at"):
            make_command(issued_at="2026-03-02")

    def test_permitted_must_be_bool(self):
        with pytest.raises(TypeError, match="permitted"):
            make_command(permitted="yes")

    def test_frozen(self):
        cmd = make_command()
        with pytest.raises(AttributeError):
            cmd.permitted = False


# ══════════════════════════════════════════════════════════════
# REJECTION / OUTCOME
# ══════════════════════════════════════════════════════════════

class TestRejectionReason:
    def test_all_fields_required(self):
        with pytest.raises(ValueError, match="code"):
            RejectionReason(code="", message="m", policy_name="p")
        with pytest.raises(ValueError, match="message"):
            RejectionReason(code="C", message="", policy_name="p")
        with pytest.raises(ValueError, match="policy_name"):
            RejectionReason(code="C", message="m", policy_name="")

    def test_to_dict(self):
        reason = RejectionReason(code="C", message="m", policy_name="p")
        assert reason.to_dict() == {"code": "C", "message": "m", "policy_name": "p"}


class TestCommandOutcome:
    def test_accepted(self):
        cid = uuid.uuid4()
        outcome = CommandOutcome.accepted(cid, state="new")
        assert outcome.is_accepted
        assert not outcome.is_rejected
        assert outcome.state == "new"
        assert outcome.reason is None

    def test_rejected_keeps_state(self):
        reason = RejectionReason(code="C", message="m", policy_name="p")
        outcome = CommandOutcome.rejected(uuid.uuid4(), state="old", reason=reason)
        assert outcome.status == CommandStatus.REJECTED
        assert outcome.state == "old"
        assert outcome.reason is reason

    def test_rejected_requires_reason(self):
        with pytest.raises(ValueError, match="No silent rejections"):
            CommandOutcome(
                command_id=uuid.uuid4(), status=CommandStatus.REJECTED, state=None,
            )

    def test_accepted_forbids_reason(self):
        reason = RejectionReason(code="C", message="m", policy_name="p")
        with pytest.raises(ValueError, match="must NOT include"):
            CommandOutcome(
                command_id=uuid.uuid4(), status=CommandStatus.ACCEPTED,
                state=None, reason=reason,
            )


# ══════════════════════════════════════════════════════════════
# DISPATCHER
# ══════════════════════════════════════════════════════════════

class TestCommandDispatcher:
    def test_no_policies_passes(self):
        assert CommandDispatcher().evaluate(make_command(), state=None) is None

    def test_first_rejection_wins(self):
        calls = []

        def tracking(command, state):
            calls.append("tracking")
            return None

        dispatcher = CommandDispatcher([never_reject, always_reject, tracking])
        rejection = dispatcher.evaluate(make_command(), state=None)
        assert rejection.policy_name == "always_reject"
        assert calls == []

    def test_register_non_callable(self):
        with pytest.raises(TypeError, match="callable"):
            CommandDispatcher().register_policy("nope")

    def test_policy_must_return_rejection_or_none(self):
        dispatcher = CommandDispatcher([lambda c, s: "bad"])
        with pytest.raises(TypeError, match="RejectionReason or None"):
            dispatcher.evaluate(make_command(), state=None)

    def test_policies_property_is_ordered(self):
        dispatcher = CommandDispatcher([never_reject, always_reject])
        assert dispatcher.policies == (never_reject, always_reject)


class TestPermissionGuard:
    def test_permitted_passes(self):
        assert permission_guard(make_command(), None) is None

    def test_not_permitted_rejected(self):
        rejection = permission_guard(make_command(permitted=False), None)
        assert rejection.code == ReasonCode.PERMISSION_DENIED
