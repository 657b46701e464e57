"""Effective permissions - which catalog actions a subject may perform.

Used for display and pre-flight UI gating, never for enforcement. The
calculator probes every action of a catalog through the same evaluator that
enforces requests, so an action is listed iff check_permission would allow it.

Wildcard short-circuit:
    When one active allow policy with actions ["*"] matches the subject,
    environment and every probed resource, and no deny policy at the same or
    a higher priority could match the subject and environment, every probe
    would be decided ALLOW. The calculator then returns ALL_ACTIONS ("*")
    without probing. The check is conservative: whenever it cannot prove
    the outcome it falls back to the per-action loop.
"""

from __future__ import annotations

__all__ = [
    "ALL_ACTIONS",
    "EffectivePermissions",
    "EffectivePermissionsCalculator",
    "expand_permissions",
]

from collections.abc import Iterable, Sequence
from typing import Literal

from orgauthz.actions import resource_type_for_action
from orgauthz.context.request import SubjectContext
from orgauthz.context.resource import ResourceDescriptor, ResourceType
from orgauthz.pdp.conditions import ActionCondition
from orgauthz.pdp.decision import Decision
from orgauthz.pdp.engine import PolicyEvaluator
from orgauthz.pdp.matcher import match_environment, match_resource, match_subject
from orgauthz.pdp.policy import AuthorizationPolicy
from orgauthz.pdp.protocol import PolicyEvaluatorProtocol

ALL_ACTIONS: Literal["*"] = "*"

EffectivePermissions = frozenset[str] | Literal["*"]


def _distinct(resources: Iterable[ResourceDescriptor]) -> list[ResourceDescriptor]:
    unique: dict[int, ResourceDescriptor] = {}
    for r in resources:
        unique.setdefault(id(r), r)
    return list(unique.values())


def expand_permissions(result: EffectivePermissions, catalog: Iterable[str]) -> frozenset[str]:
    """Turn a calculator result into a concrete action set."""
    if result == ALL_ACTIONS:
        return frozenset(catalog)
    return result  # type: ignore[return-value]


class EffectivePermissionsCalculator:
    """Enumerate the actions a subject context is allowed to perform.

    Args:
        evaluator: Evaluator used for each probe. Defaults to PolicyEvaluator.
    """

    def __init__(self, evaluator: PolicyEvaluatorProtocol | None = None) -> None:
        self._evaluator = evaluator or PolicyEvaluator()

    def calculate(
        self,
        policies: Iterable[AuthorizationPolicy],
        organization_id: str,
        context: SubjectContext,
        catalog: Sequence[str],
        *,
        short_circuit: bool = True,
    ) -> EffectivePermissions:
        """Compute the effective permission set.

        Args:
            policies: Policy snapshot for the organization.
            organization_id: Tenant the subject acts in.
            context: Subject, optional resource and environment.
            catalog: Actions to probe.
            short_circuit: Allow returning ALL_ACTIONS when a wildcard allow
                provably decides every probe.

        Returns:
            Frozenset of allowed action ids, or ALL_ACTIONS ("*").
        """
        snapshot = tuple(policies)
        probes = self._probe_resources(context, catalog)

        if short_circuit and catalog and len(probes) == len(catalog):
            if self._wildcard_decides_all(snapshot, organization_id, context, _distinct(probes.values())):
                return ALL_ACTIONS

        allowed = set()
        for action, resource in probes.items():
            request = context.to_request(organization_id, action, resource)
            if self._evaluator.evaluate(snapshot, request) is Decision.ALLOW:
                allowed.add(action)
        return frozenset(allowed)

    def _probe_resources(
        self,
        context: SubjectContext,
        catalog: Sequence[str],
    ) -> dict[str, ResourceDescriptor]:
        """Resource each action is probed against.

        Actions whose namespace maps to no resource type are left out when
        the context carries no resource.
        """
        probes: dict[str, ResourceDescriptor] = {}
        by_type: dict[ResourceType, ResourceDescriptor] = {}
        for action in catalog:
            if context.resource is not None:
                probes[action] = context.resource
                continue
            resource_type = resource_type_for_action(action)
            if resource_type is not None:
                if resource_type not in by_type:
                    by_type[resource_type] = ResourceDescriptor(type=resource_type)
                probes[action] = by_type[resource_type]
        return probes

    def _wildcard_decides_all(
        self,
        policies: tuple[AuthorizationPolicy, ...],
        organization_id: str,
        context: SubjectContext,
        resources: list[ResourceDescriptor],
    ) -> bool:
        """Check if a wildcard allow provably wins every probe."""
        eligible = [
            p
            for p in policies
            if p.is_active
            and p.organization_id == organization_id
            and match_subject(p.subject, context.subject)
            and match_environment(p.environment, context.environment)
        ]

        wildcard_allows = [
            p
            for p in eligible
            if p.is_allow()
            and isinstance(p.action, ActionCondition)
            and p.action.is_wildcard
            and all(match_resource(p.resource, r) for r in resources)
        ]
        if not wildcard_allows:
            return False

        # The highest qualifying allow leaves the fewest denies able to compete
        floor = max(p.priority for p in wildcard_allows)
        return not any(p.is_deny() and p.priority >= floor for p in eligible)
