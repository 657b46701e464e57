"""Protocol definition for policy repositories.

The engine never talks to a database directly. Anything that implements
this protocol (a SQL repository, the in-memory reference implementation,
a remote admin API client) can back AuthorizationService, without
inheriting from our code (structural subtyping).

Contract:
- Reads return fully decoded AuthorizationPolicy objects. A stored
  condition that fails to decode becomes an InvalidCondition, never an
  exception.
- Listing order is priority DESC, created_at ASC.
- update()/delete() raise EntityNotFoundError for unknown ids.
"""

from __future__ import annotations

__all__ = [
    "PolicyRepository",
]

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from orgauthz.pdp.policy import AuthorizationPolicy, CreatePolicyInput, UpdatePolicyInput


@runtime_checkable
class PolicyRepository(Protocol):
    """Protocol for policy persistence.

    Thread-safety:
    - All methods may be called concurrently
    - A returned policy is immutable and never changes after return
    """

    def find_active_by_organization(self, organization_id: str) -> list["AuthorizationPolicy"]:
        """Active policies of an organization, in evaluation order."""
        ...

    def find_by_organization(self, organization_id: str) -> list["AuthorizationPolicy"]:
        """All policies of an organization, including inactive ones."""
        ...

    def find_by_id(self, policy_id: str) -> "AuthorizationPolicy | None":
        """A policy by id, or None."""
        ...

    def get_by_id(self, policy_id: str) -> "AuthorizationPolicy":
        """A policy by id.

        Raises:
            EntityNotFoundError: If no policy has this id.
        """
        ...

    def create(self, data: "CreatePolicyInput") -> "AuthorizationPolicy":
        """Persist a new policy and return it as stored."""
        ...

    def update(self, policy_id: str, changes: "UpdatePolicyInput") -> "AuthorizationPolicy":
        """Apply a partial update and return the updated policy.

        Raises:
            EntityNotFoundError: If no policy has this id.
        """
        ...

    def delete(self, policy_id: str) -> None:
        """Remove a policy.

        Raises:
            EntityNotFoundError: If no policy has this id.
        """
        ...
