"""Per-organization policy snapshot cache.

Each entry is an immutable PolicySnapshot (a tuple of frozen policies plus
a version). A reload builds a new snapshot and swaps the dictionary entry;
an existing snapshot is never mutated, so evaluations that already hold one
keep a consistent view.

The lock guards only the dictionary. Repository reads happen outside it,
and a reload that raced with invalidate() is discarded instead of
installing stale data.
"""

from __future__ import annotations

__all__ = [
    "PolicySnapshot",
    "PolicySnapshotCache",
]

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass

from orgauthz.pdp.policy import AuthorizationPolicy

logger = logging.getLogger(__name__)

PolicyLoader = Callable[[str], list[AuthorizationPolicy]]


@dataclass(frozen=True, slots=True)
class PolicySnapshot:
    """Immutable view of an organization's active policies.

    Attributes:
        organization_id: Tenant the snapshot belongs to.
        version: Increases with every load for the organization.
        policies: Active policies in evaluation order.
        loaded_at: Clock reading when the snapshot was loaded.
    """

    organization_id: str
    version: int
    policies: tuple[AuthorizationPolicy, ...]
    loaded_at: float


class PolicySnapshotCache:
    """Organization-keyed, versioned, short-TTL snapshot cache.

    Args:
        loader: Loads active policies for an organization (usually
            PolicyRepository.find_active_by_organization).
        ttl_seconds: Snapshot lifetime. 0 disables caching.
        clock: Monotonic clock, injectable for tests.
    """

    def __init__(
        self,
        loader: PolicyLoader,
        ttl_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._loader = loader
        self._ttl = ttl_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._entries: dict[str, PolicySnapshot] = {}
        self._generations: dict[str, int] = {}
        self._versions: dict[str, int] = {}
        self._epoch = 0

    @property
    def enabled(self) -> bool:
        return self._ttl > 0

    def _generation(self, organization_id: str) -> tuple[int, int]:
        return (self._epoch, self._generations.get(organization_id, 0))

    def _is_fresh(self, snapshot: PolicySnapshot) -> bool:
        return self._clock() - snapshot.loaded_at < self._ttl

    def get(self, organization_id: str) -> PolicySnapshot:
        """Current snapshot for an organization, loading it if needed.

        Args:
            organization_id: Tenant to look up.

        Returns:
            A snapshot that is never modified after return.
        """
        with self._lock:
            cached = self._entries.get(organization_id)
            if cached is not None and self.enabled and self._is_fresh(cached):
                return cached
            generation = self._generation(organization_id)

        policies = tuple(self._loader(organization_id))

        with self._lock:
            version = self._versions.get(organization_id, 0) + 1
            self._versions[organization_id] = version
            snapshot = PolicySnapshot(
                organization_id=organization_id,
                version=version,
                policies=policies,
                loaded_at=self._clock(),
            )
            if not self.enabled:
                return snapshot
            if self._generation(organization_id) == generation:
                self._entries[organization_id] = snapshot
                logger.debug(
                    "Loaded policy snapshot v%d for %s (%d policies)",
                    version,
                    organization_id,
                    len(policies),
                )
            else:
                logger.debug("Discarded policy snapshot for %s, invalidated during load", organization_id)
        return snapshot

    def invalidate(self, organization_id: str) -> None:
        """Drop the snapshot so the next get() reloads."""
        with self._lock:
            self._generations[organization_id] = self._generations.get(organization_id, 0) + 1
            self._entries.pop(organization_id, None)
        logger.debug("Invalidated policy snapshot for %s", organization_id)

    def clear(self) -> None:
        """Drop all snapshots."""
        with self._lock:
            self._epoch += 1
            self._entries.clear()
        logger.debug("Cleared all policy snapshots")
