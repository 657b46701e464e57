"""Structural matching of policy conditions against access requests.

This module provides matching functions for each condition facet:
- Subject: attribute subset match (equality, set membership, constraints)
- Resource: type equality or "*", plus attribute subset match
- Action: "*" or exact membership
- Environment: time window, weekdays, IP allow/deny lists, attributes

Attribute rules (shared by subject, resource and environment attributes):
- Every expected key must be present in the request. A missing or None
  fact never matches.
- Scalar expected value: equality. Booleans only equal booleans.
- List expected value: the actual value must be one of the listed values.
  An empty list matches nothing.
- {"in": [...]} and/or {"range": [lo, hi]}: every given constraint must hold.
  Range bounds are inclusive and only numbers can satisfy them.
- When the actual value is itself a collection (e.g., functional roles) the
  match succeeds if any element matches.

An InvalidCondition never matches. Matching never raises.
"""

from __future__ import annotations

__all__ = [
    "match_action",
    "match_attributes",
    "match_environment",
    "match_ip_pattern",
    "match_resource",
    "match_subject",
    "match_time_of_day",
    "match_value",
    "mismatch_reason",
    "policy_matches",
]

import ipaddress
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from orgauthz.constants import WILDCARD
from orgauthz.context.environment import Environment
from orgauthz.context.resource import ResourceDescriptor
from orgauthz.context.subject import Subject
from orgauthz.pdp.conditions import (
    ActionCondition,
    EnvironmentCondition,
    ExpectedValue,
    InvalidCondition,
    ResourceCondition,
    SubjectCondition,
    TimeRange,
    ValueConstraint,
)

if TYPE_CHECKING:
    from orgauthz.context.request import AccessRequest
    from orgauthz.pdp.policy import AuthorizationPolicy

logger = logging.getLogger(__name__)


# =============================================================================
# Attribute values
# =============================================================================


def _scalar_equals(expected: Any, actual: Any) -> bool:
    # True == 1 in Python; attribute booleans must not match numbers
    if isinstance(expected, bool) or isinstance(actual, bool):
        return isinstance(expected, bool) and isinstance(actual, bool) and expected is actual
    return bool(expected == actual)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _match_constraint(constraint: ValueConstraint, actual: Any) -> bool:
    if constraint.in_values is not None:
        if not any(_scalar_equals(v, actual) for v in constraint.in_values):
            return False
    if constraint.range is not None:
        if not _is_number(actual):
            return False
        low, high = constraint.range
        if not low <= actual <= high:
            return False
    return True


def _match_scalar(expected: ExpectedValue, actual: Any) -> bool:
    if isinstance(expected, ValueConstraint):
        return _match_constraint(expected, actual)
    if isinstance(expected, list):
        return any(_scalar_equals(v, actual) for v in expected)
    return _scalar_equals(expected, actual)


def match_value(expected: ExpectedValue, actual: Any) -> bool:
    """Match one request fact against one expected value.

    Args:
        expected: Scalar, list of scalars, or ValueConstraint.
        actual: Request fact. May be a scalar or a collection of scalars.

    Returns:
        True if the fact satisfies the expectation.
    """
    if actual is None:
        return False
    if isinstance(actual, (list, tuple, set, frozenset)):
        return any(_match_scalar(expected, item) for item in actual)
    return _match_scalar(expected, actual)


def match_attributes(expected: Mapping[str, ExpectedValue], actual: Mapping[str, Any]) -> bool:
    """Subset match: every expected attribute is present and matches."""
    return all(name in actual and match_value(value, actual[name]) for name, value in expected.items())


# =============================================================================
# Facets
# =============================================================================


def match_subject(condition: SubjectCondition | InvalidCondition, subject: Subject) -> bool:
    """Check if the subject satisfies a subject condition.

    An empty condition matches any subject.
    """
    if isinstance(condition, InvalidCondition):
        return False
    return match_attributes(condition.attributes, subject.as_attributes())


def match_resource(condition: ResourceCondition | InvalidCondition, resource: ResourceDescriptor) -> bool:
    """Check if the resource satisfies a resource condition."""
    if isinstance(condition, InvalidCondition):
        return False
    if not condition.is_wildcard and condition.type != resource.type:
        return False
    if condition.attributes is None:
        return True
    return match_attributes(condition.attributes, resource.as_attributes())


def match_action(condition: ActionCondition | InvalidCondition, action: str) -> bool:
    """Check if the action is listed ("*" lists every action)."""
    if isinstance(condition, InvalidCondition):
        return False
    return condition.is_wildcard or action in condition.actions


def _to_minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def match_time_of_day(time_range: TimeRange, current_time: str) -> bool:
    """Check if a "HH:MM" time falls inside a window (inclusive).

    A window whose start is later than its end spans midnight:
    22:00-06:00 contains 23:00 and 03:00 but not 12:00.
    """
    start = _to_minutes(time_range.start)
    end = _to_minutes(time_range.end)
    current = _to_minutes(current_time)
    if start <= end:
        return start <= current <= end
    return current >= start or current <= end


def match_ip_pattern(pattern: str, ip_address: str) -> bool:
    """Check if an address equals an IP or falls inside a CIDR block.

    Works for IPv4 and IPv6. Unparseable input never matches.
    """
    try:
        network = ipaddress.ip_network(pattern, strict=False)
        address = ipaddress.ip_address(ip_address)
    except ValueError:
        return False
    return address in network


def _environment_mismatch(condition: EnvironmentCondition, environment: Environment) -> str | None:
    """First failing environment constraint, or None when all hold."""
    if condition.time_of_day is not None:
        if environment.current_time is None:
            return "time of day required but not provided"
        if not match_time_of_day(condition.time_of_day, environment.current_time):
            window = f"{condition.time_of_day.start}-{condition.time_of_day.end}"
            return f"time {environment.current_time} outside {window}"

    # An empty list is treated as "not specified"
    if condition.days_of_week:
        if environment.day_of_week is None:
            return "day of week required but not provided"
        if environment.day_of_week not in condition.days_of_week:
            return f"day {environment.day_of_week} not in {condition.days_of_week}"

    if condition.ip_allow_list:
        if environment.ip_address is None:
            return "IP address required but not provided"
        if not any(match_ip_pattern(p, environment.ip_address) for p in condition.ip_allow_list):
            return f"IP {environment.ip_address} not in allow list"

    if condition.ip_deny_list:
        if environment.ip_address is None:
            return "IP address required but not provided"
        if any(match_ip_pattern(p, environment.ip_address) for p in condition.ip_deny_list):
            return f"IP {environment.ip_address} is in deny list"

    if condition.attributes is not None:
        if not match_attributes(condition.attributes, environment.as_attributes()):
            return "environment attributes do not match"

    return None


def match_environment(
    condition: EnvironmentCondition | InvalidCondition | None,
    environment: Environment,
) -> bool:
    """Check if request-time facts satisfy an environment condition.

    No condition means no constraint. A constraint whose fact is missing
    from the request does not match.
    """
    if condition is None:
        return True
    if isinstance(condition, InvalidCondition):
        return False
    return _environment_mismatch(condition, environment) is None


# =============================================================================
# Whole policy
# =============================================================================


def policy_matches(policy: AuthorizationPolicy, request: AccessRequest) -> bool:
    """Check if all four condition facets of a policy match a request.

    Does not look at is_active or organization scope; the evaluator filters
    those before matching.
    """
    return mismatch_reason(policy, request) is None


def mismatch_reason(policy: AuthorizationPolicy, request: AccessRequest) -> str | None:
    """Explain the first facet of a policy that does not match.

    Returns:
        Human-readable reason, or None when the policy matches.
    """
    for condition in (policy.subject, policy.resource, policy.action, policy.environment):
        if isinstance(condition, InvalidCondition):
            logger.debug("Skipping policy %s: invalid %s condition", policy.id, condition.facet)
            return f"invalid {condition.facet} condition: {condition.error}"

    if not match_subject(policy.subject, request.subject):
        return "subject does not match"
    if not match_resource(policy.resource, request.resource):
        if isinstance(policy.resource, ResourceCondition) and not policy.resource.is_wildcard:
            if policy.resource.type != request.resource.type:
                return f"resource type {request.resource.type.value} is not {policy.resource.type.value}"
        return "resource attributes do not match"
    if not match_action(policy.action, request.action):
        return f"action {request.action} not listed"
    if isinstance(policy.environment, EnvironmentCondition):
        reason = _environment_mismatch(policy.environment, request.environment)
        if reason is not None:
            return reason
    return None
