"""Unit tests for policy and condition models.

Tests validation of AuthorizationPolicy, create/update inputs and the closed
condition shapes.
"""

from datetime import datetime, timedelta, timezone

import pytest
from pydantic import ValidationError

from orgauthz.context import ResourceType
from orgauthz.pdp import (
    ActionCondition,
    AuthorizationPolicy,
    CreatePolicyInput,
    EnvironmentCondition,
    PolicyEffect,
    ResourceCondition,
    SubjectCondition,
    UpdatePolicyInput,
    ValueConstraint,
)
from orgauthz.pdp.policy import evaluation_order_key


class TestAuthorizationPolicy:
    """Tests for AuthorizationPolicy validation and helpers."""

    def test_defaults(self, make_policy):
        """Given minimal fields, defaults are applied."""
        policy = AuthorizationPolicy(
            id="p1",
            organization_id="org-1",
            name="Read",
            resource=ResourceCondition(type="*"),
            action=ActionCondition(actions=["*"]),
            effect=PolicyEffect.ALLOW,
        )

        assert policy.priority == 500
        assert policy.is_active is True
        assert policy.is_system_policy is False
        assert policy.environment is None
        assert policy.subject == SubjectCondition({})
        assert policy.created_at.tzinfo is not None

    @pytest.mark.parametrize("priority", [-1, 1001])
    def test_priority_bounds(self, make_policy, priority: int):
        """Given a priority outside 0..1000, validation fails."""
        with pytest.raises(ValidationError):
            make_policy(priority=priority)

    @pytest.mark.parametrize("priority", [0, 1000])
    def test_priority_bounds_inclusive(self, make_policy, priority: int):
        """Given 0 or 1000, the policy is valid."""
        assert make_policy(priority=priority).priority == priority

    def test_blank_name_rejected(self, make_policy):
        """Given a whitespace-only name, validation fails."""
        with pytest.raises(ValidationError):
            make_policy(name="   ")

    def test_is_frozen(self, make_policy):
        """Given a policy, attribute assignment fails."""
        policy = make_policy()

        with pytest.raises(ValidationError):
            policy.priority = 1  # type: ignore[misc]

    def test_system_policy_helpers(self, make_policy):
        """Given a system policy, can_modify and can_delete are False."""
        system = make_policy(is_system_policy=True)
        regular = make_policy()

        assert system.can_modify() is False
        assert system.can_delete() is False
        assert regular.can_modify() is True
        assert regular.can_delete() is True

    def test_effect_helpers(self, make_policy):
        """Given allow and deny policies, is_allow/is_deny reflect the effect."""
        assert make_policy(effect="allow").is_allow() is True
        assert make_policy(effect="deny").is_deny() is True
        assert make_policy(effect="deny").is_allow() is False

    def test_evaluation_order_key(self, make_policy):
        """Given mixed policies, sorting by the key gives priority DESC, created_at ASC."""
        # Arrange
        early_low = make_policy("early-low", priority=10)
        late_high = make_policy("late-high", priority=90)
        later_high = make_policy("later-high", priority=90)

        # Act
        ordered = sorted([early_low, later_high, late_high], key=evaluation_order_key)

        # Assert
        assert [p.id for p in ordered] == ["late-high", "later-high", "early-low"]

    def test_same_timestamp_breaks_tie_by_id(self, make_policy):
        """Given equal priority and created_at, ids give a stable order."""
        stamp = datetime(2025, 1, 1, tzinfo=timezone.utc)
        b = make_policy("b").model_copy(update={"created_at": stamp})
        a = make_policy("a").model_copy(update={"created_at": stamp})

        assert [p.id for p in sorted([b, a], key=evaluation_order_key)] == ["a", "b"]


class TestCreatePolicyInput:
    """Tests for CreatePolicyInput."""

    def test_generates_id(self):
        """Given no id, a unique one is generated."""
        data = {
            "organization_id": "org-1",
            "name": "x",
            "resource": {"type": "report"},
            "action": {"actions": ["report:read"]},
            "effect": "allow",
        }

        first = CreatePolicyInput.model_validate(data)
        second = CreatePolicyInput.model_validate(data)

        assert first.id != second.id
        assert first.resource.type is ResourceType.REPORT
        assert first.is_system_policy is False

    def test_rejects_unknown_effect(self):
        """Given an effect other than allow/deny, validation fails."""
        with pytest.raises(ValidationError):
            CreatePolicyInput.model_validate(
                {
                    "organization_id": "org-1",
                    "name": "x",
                    "resource": {"type": "*"},
                    "action": {"actions": ["*"]},
                    "effect": "hitl",
                }
            )


class TestUpdatePolicyInput:
    """Tests for UpdatePolicyInput.changes."""

    def test_only_set_fields(self):
        """Given a single field, changes contains only that field."""
        assert UpdatePolicyInput(priority=10).changes() == {"priority": 10}

    def test_explicit_none_clears_nullable_fields(self):
        """Given description=None and environment=None, both are kept as clears."""
        changes = UpdatePolicyInput(description=None, environment=None).changes()

        assert changes == {"description": None, "environment": None}

    def test_explicit_none_ignored_for_required_fields(self):
        """Given name=None, nothing is changed."""
        assert UpdatePolicyInput(name=None).changes() == {}

    def test_rejects_protected_fields(self):
        """Given organization_id or is_system_policy, validation fails."""
        with pytest.raises(ValidationError):
            UpdatePolicyInput.model_validate({"is_system_policy": False})
        with pytest.raises(ValidationError):
            UpdatePolicyInput.model_validate({"organization_id": "org-2"})


class TestConditionShapes:
    """Tests for the closed condition models."""

    def test_value_constraint_needs_in_or_range(self):
        """Given neither key, validation fails."""
        with pytest.raises(ValidationError):
            ValueConstraint()

    def test_value_constraint_accepts_wire_name(self):
        """Given "in", the values populate in_values."""
        constraint = ValueConstraint.model_validate({"in": ["a", "b"]})

        assert constraint.in_values == ["a", "b"]

    def test_resource_condition_rejects_extra_keys(self):
        """Given an unknown key, validation fails."""
        with pytest.raises(ValidationError):
            ResourceCondition.model_validate({"type": "*", "id": "x"})

    def test_resource_wildcard(self):
        """Given "*", the condition is a wildcard."""
        assert ResourceCondition(type="*").is_wildcard is True
        assert ResourceCondition(type=ResourceType.ACCOUNT).is_wildcard is False

    def test_action_rejects_blank_ids(self):
        """Given an empty action id, validation fails."""
        with pytest.raises(ValidationError):
            ActionCondition(actions=[""])

    def test_environment_rejects_bad_ip(self):
        """Given an invalid IP pattern, validation fails."""
        with pytest.raises(ValidationError, match="Invalid IP pattern"):
            EnvironmentCondition(ip_deny_list=["999.1.1.1"])

    def test_subject_keeps_booleans(self):
        """Given True as expected value, it stays a boolean."""
        condition = SubjectCondition.model_validate({"is_platform_admin": True, "level": 1})

        assert condition.attributes["is_platform_admin"] is True
        assert condition.attributes["level"] == 1
        assert not isinstance(condition.attributes["level"], bool)

    def test_created_at_default_is_now(self, make_policy):
        """Given no created_at, the default is close to now."""
        policy = AuthorizationPolicy(
            id="p1",
            organization_id="org-1",
            name="x",
            resource=ResourceCondition(type="*"),
            action=ActionCondition(actions=["*"]),
            effect=PolicyEffect.DENY,
        )

        assert datetime.now(timezone.utc) - policy.created_at < timedelta(minutes=1)
