"""Unit tests for the built-in system policies.

Tests the seeded policy set and the fiscal period protections it encodes.
"""

import pytest

from orgauthz.constants import SYSTEM_POLICY_PRIORITIES
from orgauthz.context import ResourceType
from orgauthz.pdp import Decision, PolicyEvaluator
from orgauthz.seeds import (
    SYSTEM_POLICY_COUNT,
    create_system_policies_for_organization,
    has_system_policies,
    seed_system_policies,
)

ORG = "org-1"


@pytest.fixture
def seeded(repository):
    return seed_system_policies(ORG, repository)


@pytest.fixture
def decide(seeded, make_request):
    """Evaluate a journal entry action against the seeded policies."""
    evaluator = PolicyEvaluator()

    def _decide(action: str, period_status: str | None = None, **subject) -> Decision:
        attributes = {"period_status": period_status} if period_status else {}
        request = make_request(action, resource_attributes=attributes, **subject)
        return evaluator.evaluate(seeded, request)

    return _decide


class TestCreateSystemPolicies:
    """Tests for create_system_policies_for_organization."""

    def test_eight_system_policies(self):
        """Given an organization, returns eight flagged inputs scoped to it."""
        inputs = create_system_policies_for_organization(ORG)

        assert len(inputs) == SYSTEM_POLICY_COUNT == 8
        assert all(i.is_system_policy for i in inputs)
        assert {i.organization_id for i in inputs} == {ORG}
        assert len({i.id for i in inputs}) == 8

    def test_priorities(self):
        """Given the seeded set, priorities match the documented tiers."""
        inputs = create_system_policies_for_organization(ORG)

        assert sorted(i.priority for i in inputs) == sorted(SYSTEM_POLICY_PRIORITIES.values())

    def test_fresh_ids_per_call(self):
        """Given two calls, the ids differ."""
        first = {i.id for i in create_system_policies_for_organization(ORG)}
        second = {i.id for i in create_system_policies_for_organization(ORG)}

        assert first.isdisjoint(second)


class TestSeeding:
    """Tests for seed_system_policies and has_system_policies."""

    def test_persisted_as_system_policies(self, seeded, repository):
        """Given seeding, the repository lists eight system policies by priority."""
        stored = repository.find_by_organization(ORG)

        assert [p.priority for p in stored] == [1000, 999, 998, 997, 996, 995, 900, 100]
        assert all(p.is_system_policy for p in stored)
        assert has_system_policies(stored) is True

    def test_partial_set_is_not_seeded(self, seeded):
        """Given fewer than eight system policies, has_system_policies is False."""
        assert has_system_policies(seeded[:7]) is False
        assert has_system_policies([]) is False


class TestPeriodProtection:
    """Decisions produced by the seeded policies."""

    @pytest.mark.parametrize("status", ["Locked", "Closed"])
    @pytest.mark.parametrize("action", ["journal_entry:create", "journal_entry:post", "journal_entry:reverse"])
    def test_owner_cannot_write_in_locked_or_closed_period(self, decide, status, action):
        """Given a locked or closed period, even the owner is denied."""
        assert decide(action, status, role="owner") is Decision.DENY

    def test_owner_can_reverse_in_future_period(self, decide):
        """Given a future period, reversing is not blocked."""
        assert decide("journal_entry:reverse", "Future", role="owner") is Decision.ALLOW
        assert decide("journal_entry:post", "Future", role="owner") is Decision.DENY

    def test_owner_can_read_locked_period(self, decide):
        """Given a locked period, reading is not blocked."""
        assert decide("journal_entry:read", "Locked", role="owner") is Decision.ALLOW

    def test_platform_admin_overrides_period_locks(self, decide):
        """Given a platform admin, the 1000 tier wins over period denies."""
        assert decide("journal_entry:post", "Locked", role="owner", is_platform_admin=True) is Decision.ALLOW

    def test_controller_can_post_in_soft_close(self, decide):
        """Given a controller, posting in a soft-closed period is allowed."""
        assert decide("journal_entry:post", "SoftClose", role="member", functional_roles=["controller"]) is Decision.ALLOW

    def test_member_cannot_post_in_soft_close(self, decide):
        """Given a regular member, posting in a soft-closed period is denied."""
        assert decide("journal_entry:post", "SoftClose", role="member") is Decision.DENY

    def test_owner_cannot_post_in_soft_close(self, decide):
        """Given an owner without a functional role, the soft-close deny applies."""
        assert decide("journal_entry:post", "SoftClose", role="owner") is Decision.DENY

    def test_viewer_is_read_only(self, decide, make_request, seeded):
        """Given a viewer, reads are allowed and writes are denied."""
        evaluator = PolicyEvaluator()
        report = make_request("report:export", resource_type=ResourceType.REPORT, role="viewer")

        assert evaluator.evaluate(seeded, report) is Decision.ALLOW
        assert decide("journal_entry:read", role="viewer") is Decision.ALLOW
        assert decide("journal_entry:create", role="viewer") is Decision.DENY
