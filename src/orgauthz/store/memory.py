"""In-memory PolicyRepository.

Reference implementation of the repository protocol. Rows are stored the
way a relational store would hold them (conditions as JSON text) and are
decoded on every read, so it exercises the same decoding boundary as a
SQL-backed repository.

Like the SQL repository it mirrors, update() and delete() refuse system
policies on their own. GuardedPolicyRepository adds the same check in front
of any repository.
"""

from __future__ import annotations

__all__ = [
    "InMemoryPolicyRepository",
]

import dataclasses
import logging
import threading
from collections.abc import Callable
from datetime import datetime, timezone

from pydantic import ValidationError

from orgauthz.exceptions import EntityNotFoundError, SystemPolicyProtectionError
from orgauthz.pdp.decoding import encode_condition
from orgauthz.pdp.policy import AuthorizationPolicy, CreatePolicyInput, UpdatePolicyInput
from orgauthz.store.rows import PolicyRow, policy_to_row, row_to_policy

logger = logging.getLogger(__name__)

ENTITY_TYPE = "AuthorizationPolicy"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryPolicyRepository:
    """Thread-safe in-memory policy store.

    Args:
        clock: Returns the current time for created_at/updated_at.
            Injectable so tests can control ordering.
    """

    def __init__(self, clock: Callable[[], datetime] = _utcnow) -> None:
        self._rows: dict[str, PolicyRow] = {}
        self._lock = threading.Lock()
        self._clock = clock

    def __len__(self) -> int:
        return len(self._rows)

    # -------------------------------------------------------------------------
    # Raw rows
    # -------------------------------------------------------------------------

    def put_row(self, row: PolicyRow) -> None:
        """Insert or replace a raw row, bypassing validation.

        Used to load stored data as-is (including malformed condition JSON).
        """
        with self._lock:
            self._rows[row.id] = row

    def get_row(self, policy_id: str) -> PolicyRow | None:
        """Raw stored row, or None."""
        with self._lock:
            return self._rows.get(policy_id)

    def _decode(self, row: PolicyRow) -> AuthorizationPolicy | None:
        try:
            return row_to_policy(row)
        except ValidationError as e:
            logger.warning(
                "Skipping unreadable policy row %s: %d validation error(s)",
                row.id,
                e.error_count(),
            )
            return None

    def _select(self, predicate: Callable[[PolicyRow], bool]) -> list[AuthorizationPolicy]:
        with self._lock:
            rows = [r for r in self._rows.values() if predicate(r)]
        rows.sort(key=lambda r: (-r.priority, r.created_at))
        decoded = (self._decode(r) for r in rows)
        return [p for p in decoded if p is not None]

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def find_active_by_organization(self, organization_id: str) -> list[AuthorizationPolicy]:
        return self._select(lambda r: r.organization_id == organization_id and r.is_active)

    def find_by_organization(self, organization_id: str) -> list[AuthorizationPolicy]:
        return self._select(lambda r: r.organization_id == organization_id)

    def find_all(self) -> list[AuthorizationPolicy]:
        """Every stored policy across organizations, in evaluation order."""
        return self._select(lambda r: True)

    def find_by_id(self, policy_id: str) -> AuthorizationPolicy | None:
        row = self.get_row(policy_id)
        return self._decode(row) if row is not None else None

    def get_by_id(self, policy_id: str) -> AuthorizationPolicy:
        policy = self.find_by_id(policy_id)
        if policy is None:
            raise EntityNotFoundError(ENTITY_TYPE, policy_id)
        return policy

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create(self, data: CreatePolicyInput) -> AuthorizationPolicy:
        """Store a new policy.

        Raises:
            ValueError: If a policy with the same id already exists.
        """
        row = policy_to_row(data, now=self._clock())
        with self._lock:
            if row.id in self._rows:
                raise ValueError(f"{ENTITY_TYPE} already exists: {row.id}")
            self._rows[row.id] = row
        return self.get_by_id(row.id)

    def update(self, policy_id: str, changes: UpdatePolicyInput) -> AuthorizationPolicy:
        """Apply a partial update.

        Raises:
            EntityNotFoundError: If the policy does not exist.
            SystemPolicyProtectionError: If the policy is a system policy.
        """
        fields: dict[str, object] = {}
        for name, value in changes.changes().items():
            if name in ("subject", "resource", "action"):
                fields[f"{name}_condition"] = encode_condition(value)
            elif name == "environment":
                fields["environment_condition"] = encode_condition(value) if value is not None else None
            elif name == "effect":
                fields["effect"] = value.value
            else:
                fields[name] = value

        with self._lock:
            row = self._rows.get(policy_id)
            if row is None:
                raise EntityNotFoundError(ENTITY_TYPE, policy_id)
            if row.is_system_policy:
                raise SystemPolicyProtectionError(policy_id, "update")
            self._rows[policy_id] = dataclasses.replace(row, **fields, updated_at=self._clock())
        return self.get_by_id(policy_id)

    def delete(self, policy_id: str) -> None:
        """Remove a policy.

        Raises:
            EntityNotFoundError: If the policy does not exist.
            SystemPolicyProtectionError: If the policy is a system policy.
        """
        with self._lock:
            row = self._rows.get(policy_id)
            if row is None:
                raise EntityNotFoundError(ENTITY_TYPE, policy_id)
            if row.is_system_policy:
                raise SystemPolicyProtectionError(policy_id, "delete")
            del self._rows[policy_id]
