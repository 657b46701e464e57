"""Policy file loading for offline tooling.

A policy file is a JSON list of stored policies. Conditions are given as
JSON objects (or as JSON text, exactly as a database column would hold
them) and go through the same decoding boundary as repository reads, so a
malformed condition yields a policy that never matches.

Example policy file:
    [
      {
        "id": "p1",
        "organization_id": "org-1",
        "name": "Accountants read entries",
        "subject": {"functional_roles": ["accountant"]},
        "resource": {"type": "journal_entry"},
        "action": {"actions": ["journal_entry:read"]},
        "effect": "allow",
        "priority": 500
      }
    ]

Entries without created_at are stamped in file order, so equal priorities
keep the order they are written in.
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator

from orgauthz.constants import DEFAULT_POLICY_PRIORITY, MAX_POLICY_PRIORITY, MIN_POLICY_PRIORITY
from orgauthz.context.environment import Environment
from orgauthz.context.request import AccessRequest, SubjectContext
from orgauthz.context.resource import ResourceDescriptor
from orgauthz.context.subject import Subject
from orgauthz.store.memory import InMemoryPolicyRepository
from orgauthz.store.rows import PolicyRow
from orgauthz.utils.file_helpers import load_validated_json, require_file_exists

__all__ = [
    "PermissionsQuery",
    "PolicyFile",
    "PolicyFileEntry",
    "load_permissions_query",
    "load_policy_file",
    "load_request",
]

# Base timestamp for entries without created_at
_FILE_EPOCH = datetime(2000, 1, 1, tzinfo=timezone.utc)


class PolicyFileEntry(BaseModel):
    """One stored policy as written in a policy file.

    Condition fields are kept raw; they are decoded (fail closed) when the
    repository reads them.
    """

    id: str = Field(min_length=1)
    organization_id: str = Field(min_length=1)
    name: str
    description: str | None = None
    subject: Any = Field(default_factory=dict)
    resource: Any
    action: Any
    environment: Any = None
    effect: str
    priority: int = Field(default=DEFAULT_POLICY_PRIORITY, ge=MIN_POLICY_PRIORITY, le=MAX_POLICY_PRIORITY)
    is_system_policy: bool = False
    is_active: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None
    created_by: str | None = None

    model_config = ConfigDict(frozen=True)

    @field_validator("name", mode="after")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Reject blank names."""
        if not v.strip():
            raise ValueError("Policy name cannot be empty or whitespace-only")
        return v

    def to_row(self, default_created_at: datetime) -> PolicyRow:
        """Convert to a storage row, conditions as JSON text."""
        created_at = self.created_at or default_created_at
        return PolicyRow(
            id=self.id,
            organization_id=self.organization_id,
            name=self.name,
            description=self.description,
            subject_condition=_as_json_text(self.subject),
            resource_condition=_as_json_text(self.resource),
            action_condition=_as_json_text(self.action),
            environment_condition=None if self.environment is None else _as_json_text(self.environment),
            effect=self.effect,
            priority=self.priority,
            is_system_policy=self.is_system_policy,
            is_active=self.is_active,
            created_at=created_at,
            updated_at=self.updated_at or created_at,
            created_by=self.created_by,
        )


class PolicyFile(RootModel[list[PolicyFileEntry]]):
    """A policy file: a JSON list of entries."""

    root: list[PolicyFileEntry]


class PermissionsQuery(BaseModel):
    """Input for an effective permissions lookup.

    Attributes:
        organization_id: Tenant the subject acts in.
        subject: Resolved subject attributes.
        resource: Optional fixed resource for every probed action.
        environment: Request-time facts.
    """

    organization_id: str
    subject: Subject
    resource: ResourceDescriptor | None = None
    environment: Environment = Field(default_factory=Environment)

    def to_context(self) -> SubjectContext:
        return SubjectContext(subject=self.subject, resource=self.resource, environment=self.environment)


def _as_json_text(value: Any) -> str:
    # Strings are taken as already-encoded column values
    if isinstance(value, str):
        return value
    return json.dumps(value)


def load_policy_file(path: Path) -> InMemoryPolicyRepository:
    """Load a policy file into an in-memory repository.

    Args:
        path: Path to the JSON policy file.

    Returns:
        Repository holding one row per entry.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file is not valid JSON, is not a list of entries,
            or contains duplicate ids.
    """
    require_file_exists(path, file_type="policy")
    policy_file = load_validated_json(path, PolicyFile, file_type="policy")

    seen: set[str] = set()
    repository = InMemoryPolicyRepository()
    for index, entry in enumerate(policy_file.root):
        if entry.id in seen:
            raise ValueError(f"Duplicate policy id in {path}: {entry.id}")
        seen.add(entry.id)
        repository.put_row(entry.to_row(_FILE_EPOCH + timedelta(microseconds=index)))
    return repository


def load_request(path: Path) -> AccessRequest:
    """Load an AccessRequest from a JSON file.

    An environment without time or day is filled in from the current time.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file is invalid.
    """
    require_file_exists(path, file_type="request")
    request = load_validated_json(path, AccessRequest, file_type="request")
    env = request.environment
    if env.current_time is None and env.day_of_week is None:
        now = Environment.at(ip_address=env.ip_address, user_agent=env.user_agent)
        filled = env.model_copy(update={"current_time": now.current_time, "day_of_week": now.day_of_week})
        request = request.model_copy(update={"environment": filled})
    return request


def load_permissions_query(path: Path) -> PermissionsQuery:
    """Load a PermissionsQuery from a JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file is invalid.
    """
    require_file_exists(path, file_type="subject")
    return load_validated_json(path, PermissionsQuery, file_type="subject")
