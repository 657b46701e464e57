"""Policy utilities for orgauthz.

Provides helper functions for loading policy, request and subject files
used by the CLI.
"""

from orgauthz.utils.policy.policy_helpers import (
    PermissionsQuery,
    PolicyFile,
    PolicyFileEntry,
    load_permissions_query,
    load_policy_file,
    load_request,
)

__all__ = [
    "PermissionsQuery",
    "PolicyFile",
    "PolicyFileEntry",
    "load_permissions_query",
    "load_policy_file",
    "load_request",
]
