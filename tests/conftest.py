"""Shared fixtures for orgauthz tests.

Policies and requests are built through factory fixtures so each test only
spells out the fields it cares about.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Callable

import pytest

from orgauthz.context import AccessRequest, Environment, ResourceDescriptor, ResourceType, Subject
from orgauthz.pdp import (
    ActionCondition,
    AuthorizationPolicy,
    PolicyEffect,
    ResourceCondition,
    SubjectCondition,
)
from orgauthz.store import InMemoryPolicyRepository

ORG_ID = "org-1"
OTHER_ORG_ID = "org-2"

BASE_TIME = datetime(2025, 1, 6, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def make_policy() -> Callable[..., AuthorizationPolicy]:
    """Factory fixture for AuthorizationPolicy.

    Defaults to an active allow-everything policy at priority 500 in ORG_ID.
    Each call gets a later created_at so equal priorities keep call order.
    """
    counter = {"n": 0}

    def _make(
        policy_id: str | None = None,
        *,
        effect: str = "allow",
        priority: int = 500,
        actions: list[str] | None = None,
        resource_type: str = "*",
        resource_attributes: dict[str, Any] | None = None,
        subject: dict[str, Any] | None = None,
        environment: Any = None,
        organization_id: str = ORG_ID,
        is_active: bool = True,
        is_system_policy: bool = False,
        name: str | None = None,
    ) -> AuthorizationPolicy:
        counter["n"] += 1
        n = counter["n"]
        return AuthorizationPolicy(
            id=policy_id or f"p{n}",
            organization_id=organization_id,
            name=name or f"Policy {n}",
            subject=SubjectCondition(subject or {}),
            resource=ResourceCondition(type=resource_type, attributes=resource_attributes),
            action=ActionCondition(actions=actions if actions is not None else ["*"]),
            environment=environment,
            effect=PolicyEffect(effect),
            priority=priority,
            is_active=is_active,
            is_system_policy=is_system_policy,
            created_at=BASE_TIME + timedelta(seconds=n),
            updated_at=BASE_TIME + timedelta(seconds=n),
        )

    return _make


@pytest.fixture
def make_request() -> Callable[..., AccessRequest]:
    """Factory fixture for AccessRequest.

    Defaults to a member reading a journal entry in ORG_ID on a Monday morning.
    """

    def _make(
        action: str = "journal_entry:read",
        *,
        resource_type: ResourceType = ResourceType.JOURNAL_ENTRY,
        resource_id: str | None = None,
        resource_attributes: dict[str, Any] | None = None,
        role: str | None = "member",
        functional_roles: list[str] | None = None,
        is_platform_admin: bool = False,
        user_id: str = "user-1",
        subject_attributes: dict[str, Any] | None = None,
        current_time: str | None = "10:00",
        day_of_week: int | None = 1,
        ip_address: str | None = None,
        user_agent: str | None = None,
        environment_attributes: dict[str, Any] | None = None,
        organization_id: str = ORG_ID,
    ) -> AccessRequest:
        return AccessRequest(
            organization_id=organization_id,
            subject=Subject(
                user_id=user_id,
                role=role,
                functional_roles=functional_roles or [],
                is_platform_admin=is_platform_admin,
                attributes=subject_attributes or {},
            ),
            resource=ResourceDescriptor(
                type=resource_type,
                id=resource_id,
                attributes=resource_attributes or {},
            ),
            action=action,
            environment=Environment(
                current_time=current_time,
                day_of_week=day_of_week,
                ip_address=ip_address,
                user_agent=user_agent,
                attributes=environment_attributes or {},
            ),
        )

    return _make


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Deterministic clock that advances one second per call."""
    state = {"now": BASE_TIME}

    def _tick() -> datetime:
        state["now"] = state["now"] + timedelta(seconds=1)
        return state["now"]

    return _tick


@pytest.fixture
def repository(clock: Callable[[], datetime]) -> InMemoryPolicyRepository:
    """Empty in-memory repository with a deterministic clock."""
    return InMemoryPolicyRepository(clock=clock)
