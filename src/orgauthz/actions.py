"""Catalog of known actions.

Actions are flat namespaced strings "<entity>:<verb>". The namespace names
the resource type the action targets, with a few aliases for entities that
are not resource types of their own.
"""

from __future__ import annotations

__all__ = [
    "ACTION_CATALOG",
    "RESOURCE_TYPE_ALIASES",
    "is_valid_action",
    "resource_type_for_action",
]

from orgauthz.constants import WILDCARD
from orgauthz.context.resource import ResourceType

ACTION_CATALOG: tuple[str, ...] = (
    # Organization
    "organization:manage_settings",
    "organization:manage_members",
    "organization:delete",
    "organization:transfer_ownership",
    # Company
    "company:create",
    "company:read",
    "company:update",
    "company:delete",
    # Account
    "account:create",
    "account:read",
    "account:update",
    "account:deactivate",
    # Journal entry
    "journal_entry:create",
    "journal_entry:read",
    "journal_entry:update",
    "journal_entry:post",
    "journal_entry:reverse",
    # Fiscal period
    "fiscal_period:read",
    "fiscal_period:manage",
    # Consolidation
    "consolidation_group:create",
    "consolidation_group:read",
    "consolidation_group:update",
    "consolidation_group:delete",
    "consolidation_group:run",
    "elimination:create",
    # Reporting
    "report:read",
    "report:export",
    "exchange_rate:read",
    "exchange_rate:manage",
    # Audit
    "audit_log:read",
)

# Namespaces that are not resource types themselves
RESOURCE_TYPE_ALIASES: dict[str, ResourceType] = {
    "exchange_rate": ResourceType.REPORT,
    "elimination": ResourceType.CONSOLIDATION_GROUP,
    "audit_log": ResourceType.ORGANIZATION,
}

_CATALOG_SET = frozenset(ACTION_CATALOG)


def resource_type_for_action(action: str) -> ResourceType | None:
    """Derive the resource type an action targets from its namespace.

    Args:
        action: Namespaced action id (e.g., "journal_entry:post").

    Returns:
        The resource type, or None when the namespace maps to none
        (including "*" and strings without a namespace).
    """
    namespace, sep, _ = action.partition(":")
    if not sep:
        return None
    if namespace in RESOURCE_TYPE_ALIASES:
        return RESOURCE_TYPE_ALIASES[namespace]
    try:
        return ResourceType(namespace)
    except ValueError:
        return None


def is_valid_action(action: str) -> bool:
    """Check if an action is "*" or part of the catalog."""
    return action == WILDCARD or action in _CATALOG_SET
