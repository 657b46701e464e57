"""Policy evaluator - decide AccessRequests against a policy set.

Evaluation flow:
1. Candidates = active policies of the request's organization whose four
   conditions all match
2. No candidate → DENY (default deny)
3. Group candidates by priority, highest first
4. In the highest tier: any DENY → DENY, otherwise ALLOW
5. Lower tiers are never consulted

Design principles:
1. All conditions in a policy use AND logic
2. Priority decides first; deny overrides allow only within a tier
3. Default to DENY if no policy matches (zero trust)
4. Evaluation is pure: no I/O, no logging of decisions, no exceptions for
   bad policy data (undecodable policies simply never match)

Tie-breaker: policies of equal priority iterate by created_at ascending.
Order inside a tier never changes the decision, only the order in which
matched policies are reported.
"""

from __future__ import annotations

__all__ = [
    "EvaluationResult",
    "PolicyEvaluator",
    "evaluate",
]

from collections.abc import Iterable
from dataclasses import dataclass

from orgauthz.context.request import AccessRequest
from orgauthz.pdp.decision import Decision
from orgauthz.pdp.matcher import policy_matches
from orgauthz.pdp.policy import AuthorizationPolicy, evaluation_order_key

DEFAULT_DENY_REASON = "No matching policy found - default deny"


@dataclass(frozen=True, slots=True)
class EvaluationResult:
    """Outcome of evaluating one request, with the policies that decided it.

    Attributes:
        decision: ALLOW or DENY.
        matched_policies: The deciding policies in evaluation order. For a
            deny these are the deny policies of the top tier; for an allow,
            the whole top tier. Empty on default deny.
        reason: Human-readable explanation.
        denied_by_policy: True when an explicit deny policy decided.
        default_deny: True when no policy matched.
    """

    decision: Decision
    matched_policies: tuple[AuthorizationPolicy, ...] = ()
    reason: str = DEFAULT_DENY_REASON
    denied_by_policy: bool = False
    default_deny: bool = False

    @property
    def matched_policy_ids(self) -> list[str]:
        """Ids of the deciding policies."""
        return [p.id for p in self.matched_policies]

    @property
    def is_allowed(self) -> bool:
        return self.decision is Decision.ALLOW


class PolicyEvaluator:
    """Priority-tiered, deny-overriding policy evaluator.

    Stateless: every call receives the policy set, so one instance can be
    shared across threads and organizations. Policy snapshots are owned by
    the caller (see orgauthz.store.cache).
    """

    def find_matching_policies(
        self,
        policies: Iterable[AuthorizationPolicy],
        request: AccessRequest,
    ) -> list[AuthorizationPolicy]:
        """Get all candidate policies for a request, in evaluation order.

        A candidate is active, belongs to the request's organization, and
        matches on all four conditions.

        Args:
            policies: Policy set to consider. Order does not matter.
            request: The access request.

        Returns:
            Matching policies sorted by priority DESC, created_at ASC.
        """
        candidates = [
            p
            for p in policies
            if p.is_active and p.organization_id == request.organization_id and policy_matches(p, request)
        ]
        candidates.sort(key=evaluation_order_key)
        return candidates

    def explain(
        self,
        policies: Iterable[AuthorizationPolicy],
        request: AccessRequest,
    ) -> EvaluationResult:
        """Evaluate a request and report which policies decided it.

        Args:
            policies: Policy set to evaluate against.
            request: The access request.

        Returns:
            EvaluationResult with decision, deciding policies and reason.
        """
        candidates = self.find_matching_policies(policies, request)
        if not candidates:
            return EvaluationResult(decision=Decision.DENY, default_deny=True)

        top_priority = candidates[0].priority
        tier = tuple(p for p in candidates if p.priority == top_priority)

        denies = tuple(p for p in tier if p.is_deny())
        if denies:
            return EvaluationResult(
                decision=Decision.DENY,
                matched_policies=denies,
                reason=f"Denied by policy: {denies[0].name}",
                denied_by_policy=True,
            )

        return EvaluationResult(
            decision=Decision.ALLOW,
            matched_policies=tier,
            reason=f"Allowed by policy: {tier[0].name}",
        )

    def evaluate(
        self,
        policies: Iterable[AuthorizationPolicy],
        request: AccessRequest,
    ) -> Decision:
        """Decide a request.

        Args:
            policies: Policy set to evaluate against.
            request: The access request.

        Returns:
            Decision.ALLOW or Decision.DENY. Never raises for policy data
            problems.
        """
        return self.explain(policies, request).decision

    def would_deny(
        self,
        policies: Iterable[AuthorizationPolicy],
        request: AccessRequest,
    ) -> bool:
        """Check if a request would be denied."""
        return self.evaluate(policies, request) is Decision.DENY


_default_evaluator = PolicyEvaluator()


def evaluate(policies: Iterable[AuthorizationPolicy], request: AccessRequest) -> Decision:
    """Decide a request with a shared stateless evaluator."""
    return _default_evaluator.evaluate(policies, request)
