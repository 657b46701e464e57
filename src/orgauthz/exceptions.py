"""Custom exceptions for orgauthz.

This module contains all custom exceptions used throughout the package.
Exceptions are organized into three categories:

Mutation-path errors (always propagated to the caller):
    - EntityNotFoundError: Referenced policy does not exist
    - SystemPolicyProtectionError: Attempted change to a built-in policy

Enforcement errors:
    - PermissionDeniedError: check_permission() denied the request

Internal / startup errors:
    - ConditionDecodeError: Stored condition payload failed to decode.
      Recovered at the repository boundary, never reaches evaluation.
    - ConfigurationError: Config file missing or invalid

Usage:
    from orgauthz.exceptions import SystemPolicyProtectionError
"""

from __future__ import annotations

__all__ = [
    "ConditionDecodeError",
    "ConfigurationError",
    "EntityNotFoundError",
    "OrgAuthzError",
    "PermissionDeniedError",
    "SystemPolicyProtectionError",
]

from typing import Any, Literal


class OrgAuthzError(Exception):
    """Base class for orgauthz errors.

    Attributes:
        status_code: HTTP-style status an API layer should surface.
    """

    status_code: int = 500


# =============================================================================
# Mutation-path errors
# =============================================================================


class EntityNotFoundError(OrgAuthzError):
    """Referenced entity does not exist.

    Surfaced to the caller, not retried.

    Attributes:
        entity_type: Kind of entity (e.g., "AuthorizationPolicy").
        entity_id: Identifier that was looked up.
    """

    status_code = 404

    def __init__(self, entity_type: str, entity_id: str) -> None:
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} not found: {entity_id}")


class SystemPolicyProtectionError(OrgAuthzError):
    """Attempted update or delete of a system policy.

    Never retried and never downgraded to a no-op. Raised regardless of
    who the caller is.

    Attributes:
        policy_id: The protected policy.
        operation: "update" or "delete".
    """

    status_code = 403

    def __init__(self, policy_id: str, operation: Literal["update", "delete"]) -> None:
        self.policy_id = policy_id
        self.operation = operation
        super().__init__(f"Cannot {operation} system policy: {policy_id}")


# =============================================================================
# Enforcement errors
# =============================================================================


class PermissionDeniedError(OrgAuthzError):
    """Raised by AuthorizationService.check_permission when access is denied.

    Attributes:
        action: The action that was denied.
        resource_type: Resource type the action targeted.
        reason: Human-readable denial reason.
        matched_policy_ids: Policies in the authoritative tier (empty on default deny).
    """

    status_code = 403

    def __init__(
        self,
        action: str,
        resource_type: str | None,
        reason: str,
        *,
        matched_policy_ids: list[str] | None = None,
    ) -> None:
        self.action = action
        self.resource_type = resource_type
        self.reason = reason
        self.matched_policy_ids = matched_policy_ids or []
        super().__init__(f"Permission denied for '{action}': {reason}")

    def to_dict(self) -> dict[str, Any]:
        """Structured body for an API error response."""
        data: dict[str, Any] = {
            "error": "permission_denied",
            "action": self.action,
            "reason": self.reason,
        }
        if self.resource_type is not None:
            data["resource_type"] = self.resource_type
        if self.matched_policy_ids:
            data["matched_policy_ids"] = self.matched_policy_ids
        return data


# =============================================================================
# Internal / startup errors
# =============================================================================


class ConditionDecodeError(OrgAuthzError):
    """A stored condition payload could not be decoded.

    Internal only: the repository boundary converts it into an
    InvalidCondition so the policy simply never matches.

    Attributes:
        facet: "subject", "resource", "action" or "environment".
    """

    def __init__(self, facet: str, message: str) -> None:
        self.facet = facet
        self.message = message
        super().__init__(f"Invalid {facet} condition: {message}")


class ConfigurationError(OrgAuthzError):
    """Configuration is invalid or incomplete.

    Raised when:
    - Config file does not exist
    - Config file contains invalid JSON
    - Config file fails Pydantic validation
    """
