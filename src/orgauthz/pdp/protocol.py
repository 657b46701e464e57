"""Protocol definition for pluggable policy evaluators.

Defines the interface AuthorizationService depends on, so an external
engine (Cedar, OPA) can be swapped in via an adapter without inheriting
from our code (structural subtyping).

Example adapter:

    class OpaPolicyEvaluator:
        def explain(self, policies, request) -> EvaluationResult:
            allowed = self._client.query("orgauthz/allow", request.model_dump())
            return EvaluationResult(decision=Decision.ALLOW if allowed else Decision.DENY)
"""

from __future__ import annotations

__all__ = [
    "PolicyEvaluatorProtocol",
]

from collections.abc import Iterable
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from orgauthz.context.request import AccessRequest
    from orgauthz.pdp.decision import Decision
    from orgauthz.pdp.engine import EvaluationResult
    from orgauthz.pdp.policy import AuthorizationPolicy


@runtime_checkable
class PolicyEvaluatorProtocol(Protocol):
    """Protocol for pluggable policy evaluators.

    Required methods:
    - evaluate(): Core decision logic (ALLOW/DENY)
    - explain(): Decision plus the deciding policies, for auditing

    Thread-safety:
    - Both methods must be safe for concurrent calls on the same snapshot
    """

    def evaluate(
        self,
        policies: Iterable["AuthorizationPolicy"],
        request: "AccessRequest",
    ) -> "Decision":
        """Decide a request. Must default to DENY and must not raise for bad policy data."""
        ...

    def explain(
        self,
        policies: Iterable["AuthorizationPolicy"],
        request: "AccessRequest",
    ) -> "EvaluationResult":
        """Decide a request and report the deciding policies.

        Required for denial auditing: decisions must be traceable back to
        specific policies.
        """
        ...
