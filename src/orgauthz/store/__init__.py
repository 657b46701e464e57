"""Policy storage - repository protocol, write guard and snapshot cache.

Structure:
    protocol.py       - PolicyRepository protocol
    rows.py           - Stored row shape, decoding boundary
    memory.py         - InMemoryPolicyRepository (reference implementation)
    guard.py          - SystemPolicyGuard, GuardedPolicyRepository
    cache.py          - PolicySnapshotCache (versioned, atomic swap)
"""

from orgauthz.store.cache import PolicySnapshot, PolicySnapshotCache
from orgauthz.store.guard import GuardedPolicyRepository, SystemPolicyGuard
from orgauthz.store.memory import InMemoryPolicyRepository
from orgauthz.store.protocol import PolicyRepository
from orgauthz.store.rows import PolicyRow, row_to_policy

__all__ = [
    # Repository
    "InMemoryPolicyRepository",
    "PolicyRepository",
    "PolicyRow",
    "row_to_policy",
    # Guard
    "GuardedPolicyRepository",
    "SystemPolicyGuard",
    # Cache
    "PolicySnapshot",
    "PolicySnapshotCache",
]
