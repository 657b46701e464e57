"""AuthorizationService - evaluation and policy administration API.

Ties the pieces together:

    PolicyRepository ──► GuardedPolicyRepository (writes)
           │
           └──► PolicySnapshotCache ──► PolicyEvaluator ──► Decision
                                     └► EffectivePermissionsCalculator

- Reads for evaluation go through the snapshot cache.
- Writes go through the guard and invalidate the organization's snapshot.
- check_permission() is the enforcement point: it raises
  PermissionDeniedError and records a denial audit event.
"""

from __future__ import annotations

__all__ = [
    "AuthorizationService",
]

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from orgauthz.actions import ACTION_CATALOG
from orgauthz.constants import DEFAULT_CACHE_TTL_SECONDS
from orgauthz.context.request import AccessRequest, SubjectContext
from orgauthz.exceptions import EntityNotFoundError, PermissionDeniedError
from orgauthz.pdp.decision import Decision
from orgauthz.pdp.engine import EvaluationResult, PolicyEvaluator
from orgauthz.pdp.permissions import EffectivePermissions, EffectivePermissionsCalculator
from orgauthz.pdp.policy import AuthorizationPolicy, CreatePolicyInput, UpdatePolicyInput
from orgauthz.pdp.protocol import PolicyEvaluatorProtocol
from orgauthz.store.cache import PolicySnapshotCache
from orgauthz.store.guard import GuardedPolicyRepository, SystemPolicyGuard
from orgauthz.store.protocol import PolicyRepository
from orgauthz.telemetry.audit.denial_logger import DenialEventLogger

if TYPE_CHECKING:
    from orgauthz.config import EngineConfig

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Organization-scoped authorization over a policy repository.

    Args:
        repository: Policy storage.
        evaluator: Decision engine. Defaults to PolicyEvaluator().
        cache_ttl_seconds: Snapshot lifetime; 0 reads the repository on
            every evaluation.
        audit_logger: Records denied check_permission() calls.
        guard: Write guard. Defaults to SystemPolicyGuard().
    """

    def __init__(
        self,
        repository: PolicyRepository,
        *,
        evaluator: PolicyEvaluatorProtocol | None = None,
        cache_ttl_seconds: float = DEFAULT_CACHE_TTL_SECONDS,
        audit_logger: DenialEventLogger | None = None,
        guard: SystemPolicyGuard | None = None,
    ) -> None:
        self._repository = GuardedPolicyRepository(repository, guard)
        self._evaluator = evaluator or PolicyEvaluator()
        self._permissions = EffectivePermissionsCalculator(self._evaluator)
        self._cache = PolicySnapshotCache(repository.find_active_by_organization, cache_ttl_seconds)
        self._audit_logger = audit_logger

    @classmethod
    def from_config(cls, repository: PolicyRepository, config: "EngineConfig") -> "AuthorizationService":
        """Build a service from EngineConfig (cache TTL, denial audit log)."""
        audit_logger = None
        if config.logging.audit_log_path:
            audit_logger = DenialEventLogger.to_file(Path(config.logging.audit_log_path).expanduser())
        return cls(
            repository,
            cache_ttl_seconds=config.cache.effective_ttl_seconds,
            audit_logger=audit_logger,
        )

    @property
    def cache(self) -> PolicySnapshotCache:
        return self._cache

    def _policies(self, organization_id: str) -> tuple[AuthorizationPolicy, ...]:
        return self._cache.get(organization_id).policies

    # =========================================================================
    # Evaluation
    # =========================================================================

    def evaluate(self, organization_id: str, request: AccessRequest) -> Decision:
        """Decide a request against the organization's active policies.

        A request whose organization differs from organization_id matches
        no policy and is denied.
        """
        return self._evaluator.evaluate(self._policies(organization_id), request)

    def explain(self, organization_id: str, request: AccessRequest) -> EvaluationResult:
        """Decide a request and report which policies decided it."""
        return self._evaluator.explain(self._policies(organization_id), request)

    def effective_permissions(
        self,
        organization_id: str,
        context: SubjectContext,
        catalog: Sequence[str] = ACTION_CATALOG,
    ) -> EffectivePermissions:
        """Actions of the catalog the subject is allowed to perform.

        Returns:
            Frozenset of action ids, or "*" when every action is allowed.
        """
        return self._permissions.calculate(self._policies(organization_id), organization_id, context, catalog)

    def check_permission(self, request: AccessRequest) -> None:
        """Enforce a request.

        Raises:
            PermissionDeniedError: If the request is denied. The denial is
                recorded in the audit log first.
        """
        result = self.explain(request.organization_id, request)
        if result.is_allowed:
            return

        logger.debug(
            "Denied %s on %s for %s: %s",
            request.action,
            request.resource.type.value,
            request.subject.user_id,
            result.reason,
        )
        if self._audit_logger is not None:
            self._audit_logger.log(request, result)
        raise PermissionDeniedError(
            request.action,
            request.resource.type.value,
            result.reason,
            matched_policy_ids=result.matched_policy_ids,
        )

    def check_permissions(
        self,
        organization_id: str,
        context: SubjectContext,
        actions: Iterable[str],
    ) -> dict[str, bool]:
        """Check several actions at once, without raising or auditing.

        Actions whose resource cannot be derived map to False.
        """
        actions = list(actions)
        allowed = self._permissions.calculate(
            self._policies(organization_id),
            organization_id,
            context,
            actions,
            short_circuit=False,
        )
        return {action: action in allowed for action in actions}

    # =========================================================================
    # Policy administration
    # =========================================================================

    def list_policies(self, organization_id: str) -> list[AuthorizationPolicy]:
        """All policies of an organization, including inactive ones."""
        return self._repository.find_by_organization(organization_id)

    def get_policy(self, policy_id: str) -> AuthorizationPolicy:
        """A policy by id.

        Raises:
            EntityNotFoundError: If the policy does not exist.
        """
        return self._repository.get_by_id(policy_id)

    def create_policy(self, data: CreatePolicyInput) -> AuthorizationPolicy:
        """Create a (non-system) policy."""
        policy = self._repository.create(data)
        self._cache.invalidate(policy.organization_id)
        logger.info("Created policy %s (%s) in %s", policy.id, policy.name, policy.organization_id)
        return policy

    def update_policy(self, policy_id: str, changes: UpdatePolicyInput) -> AuthorizationPolicy:
        """Update a policy.

        Raises:
            EntityNotFoundError: If the policy does not exist.
            SystemPolicyProtectionError: If the policy is a system policy.
        """
        policy = self._repository.update(policy_id, changes)
        self._cache.invalidate(policy.organization_id)
        logger.info("Updated policy %s in %s", policy.id, policy.organization_id)
        return policy

    def delete_policy(self, policy_id: str) -> None:
        """Delete a policy.

        Raises:
            EntityNotFoundError: If the policy does not exist.
            SystemPolicyProtectionError: If the policy is a system policy.
        """
        existing = self._repository.find_by_id(policy_id)
        if existing is None:
            raise EntityNotFoundError("AuthorizationPolicy", policy_id)
        self._repository.delete(policy_id)
        self._cache.invalidate(existing.organization_id)
        logger.info("Deleted policy %s in %s", policy_id, existing.organization_id)
