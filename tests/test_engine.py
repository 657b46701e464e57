"""Unit tests for the policy evaluator.

Tests priority tiers, deny-override, default deny and organization scoping
using the AAA pattern (Arrange-Act-Assert).
"""

import random

import pytest

from orgauthz.pdp import Decision, EvaluationResult, PolicyEvaluator, PolicyEvaluatorProtocol, evaluate
from orgauthz.pdp.engine import DEFAULT_DENY_REASON


@pytest.fixture
def evaluator() -> PolicyEvaluator:
    return PolicyEvaluator()


class TestDefaultDeny:
    """Tests for the no-match outcome."""

    def test_empty_policy_set_denies(self, evaluator, make_request):
        """Given no policies, every request is denied."""
        for action in ("journal_entry:read", "organization:delete", "*"):
            assert evaluator.evaluate([], make_request(action)) is Decision.DENY

    def test_no_matching_policy_denies(self, evaluator, make_policy, make_request):
        """Given only non-matching policies, the request is denied by default."""
        # Arrange
        policies = [make_policy(actions=["company:read"])]

        # Act
        result = evaluator.explain(policies, make_request("journal_entry:read"))

        # Assert
        assert result.decision is Decision.DENY
        assert result.default_deny is True
        assert result.denied_by_policy is False
        assert result.matched_policies == ()
        assert result.reason == DEFAULT_DENY_REASON

    def test_inactive_policy_is_ignored(self, evaluator, make_policy, make_request):
        """Given an inactive allow-all policy, the request is denied."""
        policies = [make_policy(is_active=False)]

        assert evaluator.evaluate(policies, make_request()) is Decision.DENY

    def test_other_organization_policy_is_ignored(self, evaluator, make_policy, make_request):
        """Given an allow-all policy of another organization, the request is denied."""
        policies = [make_policy(organization_id="org-2")]

        assert evaluator.evaluate(policies, make_request(organization_id="org-1")) is Decision.DENY


class TestScenarios:
    """Reference scenarios for tiered evaluation."""

    def test_single_allow_on_read(self, evaluator, make_policy, make_request):
        """Given one allow on journal_entry:read, read is allowed and post is denied."""
        # Arrange
        policies = [make_policy(priority=10, actions=["journal_entry:read"], resource_type="*")]

        # Act & Assert
        assert evaluator.evaluate(policies, make_request("journal_entry:read")) is Decision.ALLOW
        assert evaluator.evaluate(policies, make_request("journal_entry:post")) is Decision.DENY

    def test_higher_deny_beats_lower_wildcard_allow(self, evaluator, make_policy, make_request):
        """Given allow * at 10 and deny post at 20, post is denied and read allowed."""
        # Arrange
        policies = [
            make_policy("allow-all", priority=10, actions=["*"]),
            make_policy("deny-post", priority=20, effect="deny", actions=["journal_entry:post"]),
        ]

        # Act
        post = evaluator.explain(policies, make_request("journal_entry:post"))
        read = evaluator.explain(policies, make_request("journal_entry:read"))

        # Assert
        assert post.decision is Decision.DENY
        assert post.matched_policy_ids == ["deny-post"]
        assert read.decision is Decision.ALLOW
        assert read.matched_policy_ids == ["allow-all"]

    def test_deny_overrides_allow_at_equal_priority(self, evaluator, make_policy, make_request):
        """Given allow and deny on account:update at priority 10, the result is deny."""
        # Arrange
        policies = [
            make_policy("allow", priority=10, actions=["account:update"]),
            make_policy("deny", priority=10, effect="deny", actions=["account:update"]),
        ]

        # Act
        result = evaluator.explain(policies, make_request("account:update"))

        # Assert
        assert result.decision is Decision.DENY
        assert result.denied_by_policy is True
        assert result.matched_policy_ids == ["deny"]

    def test_lower_tier_never_consulted(self, evaluator, make_policy, make_request):
        """Given a top-tier allow and a lower-tier deny, the allow wins."""
        policies = [
            make_policy(priority=900, actions=["*"]),
            make_policy(priority=100, effect="deny", actions=["journal_entry:read"]),
        ]

        assert evaluator.evaluate(policies, make_request("journal_entry:read")) is Decision.ALLOW


class TestProperties:
    """Order and monotonicity properties of evaluation."""

    def test_deterministic(self, evaluator, make_policy, make_request):
        """Given the same inputs, the same decision is returned every time."""
        policies = [
            make_policy(priority=10, actions=["*"]),
            make_policy(priority=20, effect="deny", actions=["journal_entry:post"]),
        ]
        request = make_request("journal_entry:post")

        results = {evaluator.evaluate(policies, request) for _ in range(20)}

        assert results == {Decision.DENY}

    def test_input_order_does_not_matter(self, evaluator, make_policy, make_request):
        """Given shuffled policy lists, the decision and deciding policies are stable."""
        # Arrange
        policies = [
            make_policy("a", priority=50, actions=["*"]),
            make_policy("b", priority=50, actions=["journal_entry:read"]),
            make_policy("c", priority=40, effect="deny", actions=["*"]),
            make_policy("d", priority=10, actions=["*"]),
        ]
        request = make_request("journal_entry:read")
        expected = evaluator.explain(policies, request)
        rng = random.Random(7)

        # Act & Assert
        for _ in range(10):
            shuffled = policies[:]
            rng.shuffle(shuffled)
            result = evaluator.explain(shuffled, request)
            assert result.decision is expected.decision
            assert result.matched_policy_ids == ["a", "b"]

    def test_lower_priority_allow_never_changes_decision(self, evaluator, make_policy, make_request):
        """Given a non-empty top tier, adding a lower-priority allow keeps the decision."""
        # Arrange
        top = [make_policy(priority=500, effect="deny", actions=["journal_entry:post"])]
        request = make_request("journal_entry:post")
        before = evaluator.evaluate(top, request)

        # Act
        after = evaluator.evaluate(top + [make_policy(priority=499, actions=["*"])], request)

        # Assert
        assert before is after is Decision.DENY

    def test_wildcard_action_matches_every_action(self, evaluator, make_policy, make_request):
        """Given an allow on ["*"], any action is allowed."""
        policies = [make_policy(actions=["*"])]

        for action in ("journal_entry:post", "organization:transfer_ownership", "custom:thing"):
            assert evaluator.evaluate(policies, make_request(action)) is Decision.ALLOW


class TestExplain:
    """Tests for explain and find_matching_policies."""

    def test_allow_reports_whole_top_tier(self, evaluator, make_policy, make_request):
        """Given two allows in the top tier, both are reported in created_at order."""
        # Arrange
        first = make_policy("first", priority=300, name="Accountants")
        second = make_policy("second", priority=300, name="Finance team")
        lower = make_policy("lower", priority=100)

        # Act
        result = evaluator.explain([lower, second, first], make_request())

        # Assert
        assert result.decision is Decision.ALLOW
        assert result.matched_policy_ids == ["first", "second"]
        assert result.reason == "Allowed by policy: Accountants"
        assert result.is_allowed is True

    def test_deny_reason_names_policy(self, evaluator, make_policy, make_request):
        """Given a deciding deny, the reason names it."""
        policies = [make_policy(effect="deny", name="Locked periods")]

        result = evaluator.explain(policies, make_request())

        assert result.reason == "Denied by policy: Locked periods"

    def test_find_matching_policies_orders_by_priority(self, evaluator, make_policy, make_request):
        """Given candidates at several priorities, they are sorted priority DESC."""
        policies = [
            make_policy("low", priority=1),
            make_policy("high", priority=1000),
            make_policy("skip", actions=["company:read"]),
            make_policy("mid", priority=500),
        ]

        matching = evaluator.find_matching_policies(policies, make_request())

        assert [p.id for p in matching] == ["high", "mid", "low"]

    def test_would_deny(self, evaluator, make_policy, make_request):
        """Given a deny-only policy set, would_deny is True."""
        assert evaluator.would_deny([make_policy(effect="deny")], make_request()) is True
        assert evaluator.would_deny([make_policy()], make_request()) is False

    def test_result_is_immutable(self):
        """EvaluationResult is a frozen dataclass."""
        result = EvaluationResult(decision=Decision.DENY)

        with pytest.raises(AttributeError):
            result.decision = Decision.ALLOW  # type: ignore[misc]


class TestModuleLevel:
    """Tests for the module-level evaluate and the protocol."""

    def test_module_evaluate(self, make_policy, make_request):
        """Given the shared evaluator, behaves like PolicyEvaluator.evaluate."""
        assert evaluate([make_policy()], make_request()) is Decision.ALLOW
        assert evaluate([], make_request()) is Decision.DENY

    def test_evaluator_satisfies_protocol(self, evaluator):
        """PolicyEvaluator structurally implements PolicyEvaluatorProtocol."""
        assert isinstance(evaluator, PolicyEvaluatorProtocol)
