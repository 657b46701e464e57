"""Application-wide constants for orgauthz.

Constants that define engine behavior.
For user-configurable settings per deployment, see config.py.
"""

__all__ = [
    # Application identity
    "APP_NAME",
    # Wildcards
    "WILDCARD",
    # Policy priorities
    "DEFAULT_POLICY_PRIORITY",
    "MIN_POLICY_PRIORITY",
    "MAX_POLICY_PRIORITY",
    "SYSTEM_POLICY_PRIORITIES",
    # Snapshot cache
    "DEFAULT_CACHE_TTL_SECONDS",
    "MIN_CACHE_TTL_SECONDS",
    "MAX_CACHE_TTL_SECONDS",
    # Logging
    "SYSTEM_LOGGER_NAME",
    "AUDIT_LOGGER_NAME",
]

# ============================================================================
# Application Identity
# ============================================================================

APP_NAME: str = "orgauthz"

# ============================================================================
# Wildcards
# ============================================================================

# Matches any resource type in ResourceCondition.type and any action in
# ActionCondition.actions. Also the "unrestricted" effective permissions value.
WILDCARD: str = "*"

# ============================================================================
# Policy Priorities
# ============================================================================

# Priority for user-created policies when none is given
DEFAULT_POLICY_PRIORITY: int = 500

MIN_POLICY_PRIORITY: int = 0
MAX_POLICY_PRIORITY: int = 1000

# Built-in policy priorities. Higher evaluates first; the highest matching
# tier is authoritative, so the period protections (995-999) sit above owner
# full access (900) and below the platform admin override (1000).
SYSTEM_POLICY_PRIORITIES: dict[str, int] = {
    "PLATFORM_ADMIN_OVERRIDE": 1000,
    "LOCKED_PERIOD_PROTECTION": 999,
    "CLOSED_PERIOD_PROTECTION": 998,
    "FUTURE_PERIOD_PROTECTION": 997,
    "SOFTCLOSE_CONTROLLER_ACCESS": 996,
    "SOFTCLOSE_DEFAULT_DENY": 995,
    "OWNER_FULL_ACCESS": 900,
    "VIEWER_READ_ONLY": 100,
}

# ============================================================================
# Policy Snapshot Cache
# ============================================================================

DEFAULT_CACHE_TTL_SECONDS: int = 30
MIN_CACHE_TTL_SECONDS: int = 0
MAX_CACHE_TTL_SECONDS: int = 3600  # 1 hour

# ============================================================================
# Logging
# ============================================================================

SYSTEM_LOGGER_NAME: str = "orgauthz"
AUDIT_LOGGER_NAME: str = "orgauthz.audit.denials"
