"""Built-in system policies seeded for every organization.

Priorities (higher evaluates first):
    1000  Platform Admin Full Access              allow  *
     999  Prevent Modifications to Locked Periods deny   journal entry writes
     998  Prevent Modifications to Closed Periods deny   journal entry writes
     997  Prevent Entries in Future Periods       deny   journal entry writes
     996  Allow SoftClose Period Access ...       allow  controllers / period admins
     995  Restrict SoftClose Period Access        deny   everyone else
     900  Organization Owner Full Access          allow  *
     100  Viewer Read-Only Access                 allow  read/export

System policies are immutable through the guarded write path. Seeding
writes them through the unguarded repository.
"""

from __future__ import annotations

__all__ = [
    "SYSTEM_POLICY_COUNT",
    "create_system_policies_for_organization",
    "has_system_policies",
    "seed_system_policies",
]

import logging
from collections.abc import Iterable

from orgauthz.constants import SYSTEM_POLICY_PRIORITIES, WILDCARD
from orgauthz.context.resource import ResourceType
from orgauthz.pdp.conditions import ActionCondition, ResourceCondition, SubjectCondition
from orgauthz.pdp.policy import AuthorizationPolicy, CreatePolicyInput, PolicyEffect
from orgauthz.store.protocol import PolicyRepository

logger = logging.getLogger(__name__)

SYSTEM_POLICY_COUNT = 8

_ALL_BASE_ROLES = ["owner", "admin", "member", "viewer"]

_JOURNAL_WRITES = [
    "journal_entry:create",
    "journal_entry:update",
    "journal_entry:post",
    "journal_entry:reverse",
]

_JOURNAL_CREATE_POST = [
    "journal_entry:create",
    "journal_entry:update",
    "journal_entry:post",
]

_VIEWER_ACTIONS = [
    "company:read",
    "account:read",
    "journal_entry:read",
    "fiscal_period:read",
    "consolidation_group:read",
    "report:read",
    "report:export",
    "exchange_rate:read",
]


def _system_policy(
    organization_id: str,
    *,
    name: str,
    description: str,
    subject: dict,
    resource: ResourceCondition,
    actions: list[str],
    effect: PolicyEffect,
    priority_key: str,
) -> CreatePolicyInput:
    return CreatePolicyInput(
        organization_id=organization_id,
        name=name,
        description=description,
        subject=SubjectCondition(subject),
        resource=resource,
        action=ActionCondition(actions=actions),
        effect=effect,
        priority=SYSTEM_POLICY_PRIORITIES[priority_key],
        is_system_policy=True,
    )


def _journal_entries_in(period_status: str) -> ResourceCondition:
    return ResourceCondition(
        type=ResourceType.JOURNAL_ENTRY,
        attributes={"period_status": [period_status]},
    )


def create_system_policies_for_organization(organization_id: str) -> list[CreatePolicyInput]:
    """Build the eight built-in policies for an organization.

    Args:
        organization_id: Tenant to seed.

    Returns:
        Create inputs with fresh ids and is_system_policy=True.
    """
    any_resource = ResourceCondition(type=WILDCARD)
    return [
        _system_policy(
            organization_id,
            name="Platform Admin Full Access",
            description="Platform administrators have unrestricted access to all resources and actions",
            subject={"is_platform_admin": True},
            resource=any_resource,
            actions=[WILDCARD],
            effect=PolicyEffect.ALLOW,
            priority_key="PLATFORM_ADMIN_OVERRIDE",
        ),
        _system_policy(
            organization_id,
            name="Organization Owner Full Access",
            description="Organization owners have full access to all resources within their organization",
            subject={"role": ["owner"]},
            resource=any_resource,
            actions=[WILDCARD],
            effect=PolicyEffect.ALLOW,
            priority_key="OWNER_FULL_ACCESS",
        ),
        _system_policy(
            organization_id,
            name="Viewer Read-Only Access",
            description="Viewers can only read data and view/export reports",
            subject={"role": ["viewer"]},
            resource=any_resource,
            actions=_VIEWER_ACTIONS,
            effect=PolicyEffect.ALLOW,
            priority_key="VIEWER_READ_ONLY",
        ),
        _system_policy(
            organization_id,
            name="Prevent Modifications to Locked Periods",
            description="Prevents creating, updating, posting, or reversing journal entries in locked fiscal periods",
            subject={"role": _ALL_BASE_ROLES},
            resource=_journal_entries_in("Locked"),
            actions=_JOURNAL_WRITES,
            effect=PolicyEffect.DENY,
            priority_key="LOCKED_PERIOD_PROTECTION",
        ),
        _system_policy(
            organization_id,
            name="Prevent Modifications to Closed Periods",
            description="Prevents creating, updating, posting, or reversing journal entries in closed fiscal periods",
            subject={"role": _ALL_BASE_ROLES},
            resource=_journal_entries_in("Closed"),
            actions=_JOURNAL_WRITES,
            effect=PolicyEffect.DENY,
            priority_key="CLOSED_PERIOD_PROTECTION",
        ),
        _system_policy(
            organization_id,
            name="Prevent Entries in Future Periods",
            description="Prevents creating or posting journal entries in fiscal periods that haven't started yet",
            subject={"role": _ALL_BASE_ROLES},
            resource=_journal_entries_in("Future"),
            actions=_JOURNAL_CREATE_POST,
            effect=PolicyEffect.DENY,
            priority_key="FUTURE_PERIOD_PROTECTION",
        ),
        _system_policy(
            organization_id,
            name="Allow SoftClose Period Access for Controllers",
            description=(
                "Users with controller or period_admin functional roles can create "
                "and post entries in soft-closed periods"
            ),
            subject={"functional_roles": ["controller", "period_admin"]},
            resource=_journal_entries_in("SoftClose"),
            actions=_JOURNAL_CREATE_POST,
            effect=PolicyEffect.ALLOW,
            priority_key="SOFTCLOSE_CONTROLLER_ACCESS",
        ),
        _system_policy(
            organization_id,
            name="Restrict SoftClose Period Access",
            description=(
                "Prevents regular users from creating or posting entries in soft-closed "
                "periods (controllers exempted)"
            ),
            subject={"role": _ALL_BASE_ROLES},
            resource=_journal_entries_in("SoftClose"),
            actions=_JOURNAL_CREATE_POST,
            effect=PolicyEffect.DENY,
            priority_key="SOFTCLOSE_DEFAULT_DENY",
        ),
    ]


def seed_system_policies(organization_id: str, repository: PolicyRepository) -> list[AuthorizationPolicy]:
    """Persist the built-in policies for an organization.

    Args:
        organization_id: Tenant to seed.
        repository: Unguarded repository (GuardedPolicyRepository would strip
            the system flag).

    Returns:
        The stored policies.
    """
    created = [repository.create(data) for data in create_system_policies_for_organization(organization_id)]
    logger.info("Seeded %d system policies for %s", len(created), organization_id)
    return created


def has_system_policies(policies: Iterable[AuthorizationPolicy]) -> bool:
    """Check if a policy set already contains the built-in policies."""
    return sum(1 for p in policies if p.is_system_policy) >= SYSTEM_POLICY_COUNT
