"""Policy models for organization-scoped ABAC evaluation.

Policy structure:
    AuthorizationPolicy
    ├── id, organization_id: identity and tenant scope
    ├── name, description: descriptive only
    ├── subject: SubjectCondition
    ├── resource: ResourceCondition
    ├── action: ActionCondition
    ├── environment: EnvironmentCondition | None
    ├── effect: "allow" | "deny"
    ├── priority: 0..1000, higher evaluates first
    └── is_system_policy, is_active, created_at, updated_at, created_by

Any condition may instead be an InvalidCondition when its stored payload
failed to decode. Such a policy is kept (it is still listed and still
protected) but never matches.

Design principles:
1. All conditions use AND logic (all must match)
2. Highest matching priority tier decides, deny overrides allow within it
3. Default to DENY if no policy matches (zero trust)
"""

from __future__ import annotations

__all__ = [
    "AuthorizationPolicy",
    "CreatePolicyInput",
    "PolicyEffect",
    "UpdatePolicyInput",
    "evaluation_order_key",
]

from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator

from orgauthz.constants import DEFAULT_POLICY_PRIORITY, MAX_POLICY_PRIORITY, MIN_POLICY_PRIORITY
from orgauthz.pdp.conditions import (
    ActionCondition,
    EnvironmentCondition,
    InvalidCondition,
    ResourceCondition,
    SubjectCondition,
)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _check_name(v: str | None) -> str | None:
    if v is not None and not v.strip():
        raise ValueError("Policy name cannot be empty or whitespace-only")
    return v


class PolicyEffect(str, Enum):
    """Effect applied when a policy matches.

    Inherits from str for easy serialization and comparison.
    """

    ALLOW = "allow"
    DENY = "deny"


class AuthorizationPolicy(BaseModel):
    """A single organization-scoped access control policy.

    Attributes:
        id: Unique policy identifier.
        organization_id: Tenant scope. Never matches requests from another org.
        name: Human-readable name (non-empty).
        description: Optional longer description.
        subject: Who the policy applies to.
        resource: What resources the policy applies to.
        action: What actions the policy applies to.
        environment: Optional contextual constraints. None means unconstrained.
        effect: ALLOW or DENY.
        priority: 0..1000. Higher priorities are evaluated first.
        is_system_policy: Built-in policy. Immutable through the write path.
        is_active: Inactive policies are listed but never evaluated.
        created_at: Creation time (UTC). Breaks priority ties.
        updated_at: Last modification time (UTC).
        created_by: User who created the policy, if known.
    """

    id: str
    organization_id: str
    name: str
    description: str | None = None
    subject: SubjectCondition | InvalidCondition = Field(default_factory=SubjectCondition)
    resource: ResourceCondition | InvalidCondition
    action: ActionCondition | InvalidCondition
    environment: EnvironmentCondition | InvalidCondition | None = None
    effect: PolicyEffect
    priority: int = Field(default=DEFAULT_POLICY_PRIORITY, ge=MIN_POLICY_PRIORITY, le=MAX_POLICY_PRIORITY)
    is_system_policy: bool = False
    is_active: bool = True
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    created_by: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("name", mode="after")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject empty names."""
        _check_name(v)
        return v

    def can_modify(self) -> bool:
        """Whether the policy may be updated through the normal write path."""
        return not self.is_system_policy

    def can_delete(self) -> bool:
        """Whether the policy may be deleted through the normal write path."""
        return not self.is_system_policy

    def is_allow(self) -> bool:
        return self.effect is PolicyEffect.ALLOW

    def is_deny(self) -> bool:
        return self.effect is PolicyEffect.DENY

    def decode_errors(self) -> list[InvalidCondition]:
        """Conditions of this policy that failed to decode."""
        conditions = (self.subject, self.resource, self.action, self.environment)
        return [c for c in conditions if isinstance(c, InvalidCondition)]

    @property
    def has_invalid_conditions(self) -> bool:
        """True when at least one condition failed to decode."""
        return bool(self.decode_errors())


def evaluation_order_key(policy: AuthorizationPolicy) -> tuple[int, datetime, str]:
    """Sort key for evaluation order: priority DESC, created_at ASC, id."""
    return (-policy.priority, policy.created_at, policy.id)


class CreatePolicyInput(BaseModel):
    """Input for creating a policy.

    Attributes:
        id: Optional explicit id. Generated when omitted.
        is_system_policy: Honoured only by the privileged seeding path. The
            guarded write path always forces it to False.
    """

    id: str = Field(default_factory=lambda: str(uuid4()))
    organization_id: str
    name: str
    description: str | None = None
    subject: SubjectCondition = Field(default_factory=SubjectCondition)
    resource: ResourceCondition
    action: ActionCondition
    environment: EnvironmentCondition | None = None
    effect: PolicyEffect
    priority: int = Field(default=DEFAULT_POLICY_PRIORITY, ge=MIN_POLICY_PRIORITY, le=MAX_POLICY_PRIORITY)
    is_system_policy: bool = False
    is_active: bool = True
    created_by: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("name", mode="after")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject empty names."""
        _check_name(v)
        return v


class UpdatePolicyInput(BaseModel):
    """Partial update for a policy.

    Only fields explicitly set are applied. ``description`` and
    ``environment`` can be cleared by setting them to None.
    Organization, system flag and timestamps are not updatable.
    """

    name: str | None = None
    description: str | None = None
    subject: SubjectCondition | None = None
    resource: ResourceCondition | None = None
    action: ActionCondition | None = None
    environment: EnvironmentCondition | None = None
    effect: PolicyEffect | None = None
    priority: int | None = Field(default=None, ge=MIN_POLICY_PRIORITY, le=MAX_POLICY_PRIORITY)
    is_active: bool | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("name", mode="after")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        """Reject empty names."""
        return _check_name(v)

    def changes(self) -> dict[str, Any]:
        """Fields explicitly set by the caller.

        None is kept only where it is meaningful (clearing ``description``
        or ``environment``).
        """
        nullable = {"description", "environment"}
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None or name in nullable
        }
