"""Storage row shape and the decoding boundary.

PolicyRow mirrors a relational `organization_policies` row: scalar columns
plus four JSON text columns for the conditions. row_to_policy() is the only
place stored conditions are decoded.
"""

from __future__ import annotations

__all__ = [
    "PolicyRow",
    "policy_to_row",
    "row_to_policy",
]

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import ValidationError

from orgauthz.constants import MAX_POLICY_PRIORITY, MIN_POLICY_PRIORITY
from orgauthz.pdp.conditions import InvalidCondition
from orgauthz.pdp.decoding import decode_or_invalid, encode_condition
from orgauthz.pdp.policy import AuthorizationPolicy, CreatePolicyInput, PolicyEffect

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PolicyRow:
    """One stored policy, conditions as JSON text."""

    id: str
    organization_id: str
    name: str
    description: str | None
    subject_condition: str
    resource_condition: str
    action_condition: str
    environment_condition: str | None
    effect: str
    priority: int
    is_system_policy: bool
    is_active: bool
    created_at: datetime
    updated_at: datetime
    created_by: str | None = None


def _decode_effect(row: PolicyRow) -> PolicyEffect:
    try:
        return PolicyEffect(row.effect)
    except ValueError:
        logger.warning("Policy %s has unknown effect %r, treating it as deny", row.id, row.effect)
        return PolicyEffect.DENY


def _quarantine(fields: dict[str, Any], error: ValidationError) -> AuthorizationPolicy:
    """Rebuild a policy whose scalar columns fail validation.

    Name and priority are coerced into range and the action becomes an
    InvalidCondition, so the row stays listed and protected but never matches.
    """
    problems = "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in error.errors())
    name = fields["name"] if isinstance(fields["name"], str) and fields["name"].strip() else fields["id"]
    priority = fields["priority"]
    if isinstance(priority, int) and not isinstance(priority, bool):
        priority = min(max(priority, MIN_POLICY_PRIORITY), MAX_POLICY_PRIORITY)
    return AuthorizationPolicy(
        **{
            **fields,
            "name": name,
            "priority": priority,
            "action": InvalidCondition(facet="action", error=f"invalid policy row: {problems}"),
        }
    )


def row_to_policy(row: PolicyRow) -> AuthorizationPolicy:
    """Decode a stored row into a policy.

    Undecodable conditions become InvalidCondition (logged at WARNING), so
    the policy is still listed and protected but never matches. An unknown
    effect is read as deny. A row whose scalar columns are out of range
    (blank name, priority outside 0..1000) is kept the same way.

    Raises:
        ValidationError: If the row cannot be represented at all.
    """
    fields: dict[str, Any] = dict(
        id=row.id,
        organization_id=row.organization_id,
        name=row.name,
        description=row.description,
        subject=decode_or_invalid("subject", row.subject_condition, policy_id=row.id),
        resource=decode_or_invalid("resource", row.resource_condition, policy_id=row.id),
        action=decode_or_invalid("action", row.action_condition, policy_id=row.id),
        environment=decode_or_invalid("environment", row.environment_condition, policy_id=row.id),
        effect=_decode_effect(row),
        priority=row.priority,
        is_system_policy=row.is_system_policy,
        is_active=row.is_active,
        created_at=row.created_at,
        updated_at=row.updated_at,
        created_by=row.created_by,
    )
    try:
        return AuthorizationPolicy(**fields)
    except ValidationError as e:
        logger.warning("Policy %s has invalid fields, it will never match: %d error(s)", row.id, e.error_count())
        return _quarantine(fields, e)


def policy_to_row(data: CreatePolicyInput, *, now: datetime) -> PolicyRow:
    """Encode a create input as a new row."""
    return PolicyRow(
        id=data.id,
        organization_id=data.organization_id,
        name=data.name,
        description=data.description,
        subject_condition=encode_condition(data.subject),
        resource_condition=encode_condition(data.resource),
        action_condition=encode_condition(data.action),
        environment_condition=encode_condition(data.environment) if data.environment is not None else None,
        effect=data.effect.value,
        priority=data.priority,
        is_system_policy=data.is_system_policy,
        is_active=data.is_active,
        created_at=now,
        updated_at=now,
        created_by=data.created_by,
    )
