"""Unit tests for the policy snapshot cache.

Tests TTL expiry, invalidation, versioning and that snapshots handed out
are never modified.
"""

from unittest.mock import MagicMock

import pytest

from orgauthz.store import PolicySnapshot, PolicySnapshotCache


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def loader(make_policy) -> MagicMock:
    """Loader returning one policy per call, a fresh list each time."""
    return MagicMock(side_effect=lambda org: [make_policy(organization_id=org)])


class TestCaching:
    """Tests for hits, misses and TTL."""

    def test_second_get_is_served_from_cache(self, loader, fake_clock):
        """Given a fresh snapshot, the loader runs once."""
        # Arrange
        cache = PolicySnapshotCache(loader, ttl_seconds=30, clock=fake_clock)

        # Act
        first = cache.get("org-1")
        second = cache.get("org-1")

        # Assert
        assert first is second
        assert loader.call_count == 1

    def test_expired_snapshot_is_reloaded(self, loader, fake_clock):
        """Given TTL elapsed, the next get reloads with a higher version."""
        cache = PolicySnapshotCache(loader, ttl_seconds=30, clock=fake_clock)
        first = cache.get("org-1")

        fake_clock.advance(30)
        second = cache.get("org-1")

        assert loader.call_count == 2
        assert second.version == first.version + 1

    def test_zero_ttl_disables_caching(self, loader, fake_clock):
        """Given ttl_seconds=0, every get loads."""
        cache = PolicySnapshotCache(loader, ttl_seconds=0, clock=fake_clock)

        cache.get("org-1")
        cache.get("org-1")

        assert cache.enabled is False
        assert loader.call_count == 2

    def test_organizations_are_cached_separately(self, loader, fake_clock):
        """Given two organizations, each has its own snapshot."""
        cache = PolicySnapshotCache(loader, ttl_seconds=30, clock=fake_clock)

        a = cache.get("org-1")
        b = cache.get("org-2")

        assert a.organization_id == "org-1"
        assert b.organization_id == "org-2"
        assert a.policies[0].organization_id == "org-1"
        assert loader.call_count == 2


class TestInvalidation:
    """Tests for invalidate and clear."""

    def test_invalidate_forces_reload(self, loader, fake_clock):
        """Given an invalidated organization, the next get reloads."""
        cache = PolicySnapshotCache(loader, ttl_seconds=30, clock=fake_clock)
        first = cache.get("org-1")

        cache.invalidate("org-1")
        second = cache.get("org-1")

        assert second is not first
        assert loader.call_count == 2

    def test_invalidate_leaves_other_organizations(self, loader, fake_clock):
        """Given two cached organizations, invalidating one keeps the other."""
        cache = PolicySnapshotCache(loader, ttl_seconds=30, clock=fake_clock)
        cache.get("org-1")
        other = cache.get("org-2")

        cache.invalidate("org-1")

        assert cache.get("org-2") is other

    def test_clear_drops_everything(self, loader, fake_clock):
        """Given cached organizations, clear forces reloads for all."""
        cache = PolicySnapshotCache(loader, ttl_seconds=30, clock=fake_clock)
        cache.get("org-1")
        cache.get("org-2")

        cache.clear()
        cache.get("org-1")
        cache.get("org-2")

        assert loader.call_count == 4

    def test_load_racing_with_invalidate_is_discarded(self, make_policy, fake_clock):
        """Given an invalidation during a load, the stale result is not cached."""
        # Arrange
        holder: dict[str, PolicySnapshotCache] = {}
        calls = {"n": 0}

        def racing_loader(org: str):
            calls["n"] += 1
            if calls["n"] == 1:
                holder["cache"].invalidate(org)
            return [make_policy(organization_id=org)]

        cache = PolicySnapshotCache(racing_loader, ttl_seconds=30, clock=fake_clock)
        holder["cache"] = cache

        # Act
        stale = cache.get("org-1")
        fresh = cache.get("org-1")
        again = cache.get("org-1")

        # Assert
        assert stale is not fresh
        assert fresh is again
        assert calls["n"] == 2


class TestSnapshots:
    """Tests for snapshot immutability."""

    def test_held_snapshot_never_changes(self, make_policy, fake_clock):
        """Given a held snapshot, later reloads do not alter it."""
        # Arrange
        current = [make_policy("v1")]
        cache = PolicySnapshotCache(lambda org: list(current), ttl_seconds=30, clock=fake_clock)
        held = cache.get("org-1")

        # Act
        current[:] = [make_policy("v2"), make_policy("v3")]
        cache.invalidate("org-1")
        reloaded = cache.get("org-1")

        # Assert
        assert [p.id for p in held.policies] == ["v1"]
        assert [p.id for p in reloaded.policies] == ["v2", "v3"]
        assert isinstance(held.policies, tuple)

    def test_snapshot_is_frozen(self):
        """PolicySnapshot rejects attribute assignment."""
        snapshot = PolicySnapshot(organization_id="org-1", version=1, policies=(), loaded_at=0.0)

        with pytest.raises(AttributeError):
            snapshot.version = 2  # type: ignore[misc]
