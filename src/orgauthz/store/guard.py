"""Write-path protection for system policies.

System policies (seeded per organization) can never be updated or deleted
through the normal write path, regardless of who asks. The check lives in
one place: GuardedPolicyRepository wraps any PolicyRepository and runs the
guard immediately before each mutation, against a fresh read of the policy.

Reads pass through untouched.
"""

from __future__ import annotations

__all__ = [
    "GuardedPolicyRepository",
    "SystemPolicyGuard",
]

import logging

from orgauthz.exceptions import EntityNotFoundError, SystemPolicyProtectionError
from orgauthz.pdp.policy import AuthorizationPolicy, CreatePolicyInput, UpdatePolicyInput
from orgauthz.store.protocol import PolicyRepository

logger = logging.getLogger(__name__)

ENTITY_TYPE = "AuthorizationPolicy"


class SystemPolicyGuard:
    """Precondition checks for policy mutations."""

    def guard_update(self, policy: AuthorizationPolicy) -> None:
        """Reject updates to system policies.

        Raises:
            SystemPolicyProtectionError: If the policy is a system policy.
        """
        if not policy.can_modify():
            logger.warning("Rejected update of system policy %s (%s)", policy.id, policy.name)
            raise SystemPolicyProtectionError(policy.id, "update")

    def guard_delete(self, policy: AuthorizationPolicy) -> None:
        """Reject deletion of system policies.

        Raises:
            SystemPolicyProtectionError: If the policy is a system policy.
        """
        if not policy.can_delete():
            logger.warning("Rejected delete of system policy %s (%s)", policy.id, policy.name)
            raise SystemPolicyProtectionError(policy.id, "delete")

    def guard_create(self, data: CreatePolicyInput) -> CreatePolicyInput:
        """Strip the system flag from a create request.

        Creation is otherwise unrestricted. System policies are only created
        by seeding, which writes to the repository directly.
        """
        if data.is_system_policy:
            logger.warning("Ignoring is_system_policy on create of policy %s", data.id)
            return data.model_copy(update={"is_system_policy": False})
        return data


class GuardedPolicyRepository:
    """PolicyRepository decorator enforcing SystemPolicyGuard on writes.

    Args:
        repository: The repository to protect.
        guard: Guard to apply. Defaults to SystemPolicyGuard().
    """

    def __init__(self, repository: PolicyRepository, guard: SystemPolicyGuard | None = None) -> None:
        self._repository = repository
        self._guard = guard or SystemPolicyGuard()

    @property
    def inner(self) -> PolicyRepository:
        """The unguarded repository (privileged seeding path)."""
        return self._repository

    def _load_for_write(self, policy_id: str) -> AuthorizationPolicy:
        # Always a fresh read; never a cached snapshot
        policy = self._repository.find_by_id(policy_id)
        if policy is None:
            raise EntityNotFoundError(ENTITY_TYPE, policy_id)
        return policy

    # Reads delegate

    def find_active_by_organization(self, organization_id: str) -> list[AuthorizationPolicy]:
        return self._repository.find_active_by_organization(organization_id)

    def find_by_organization(self, organization_id: str) -> list[AuthorizationPolicy]:
        return self._repository.find_by_organization(organization_id)

    def find_by_id(self, policy_id: str) -> AuthorizationPolicy | None:
        return self._repository.find_by_id(policy_id)

    def get_by_id(self, policy_id: str) -> AuthorizationPolicy:
        return self._repository.get_by_id(policy_id)

    # Writes are guarded

    def create(self, data: CreatePolicyInput) -> AuthorizationPolicy:
        return self._repository.create(self._guard.guard_create(data))

    def update(self, policy_id: str, changes: UpdatePolicyInput) -> AuthorizationPolicy:
        """Update a non-system policy.

        Raises:
            EntityNotFoundError: If the policy does not exist.
            SystemPolicyProtectionError: If the policy is a system policy.
        """
        self._guard.guard_update(self._load_for_write(policy_id))
        return self._repository.update(policy_id, changes)

    def delete(self, policy_id: str) -> None:
        """Delete a non-system policy.

        Raises:
            EntityNotFoundError: If the policy does not exist.
            SystemPolicyProtectionError: If the policy is a system policy.
        """
        self._guard.guard_delete(self._load_for_write(policy_id))
        self._repository.delete(policy_id)
