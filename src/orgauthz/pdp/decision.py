"""Decision enum for policy evaluation outcomes."""

from __future__ import annotations

__all__ = ["Decision"]

from enum import Enum


class Decision(str, Enum):
    """Policy decision outcome.

    Inherits from str for easy serialization and comparison.

    Attributes:
        ALLOW: Request is permitted.
        DENY: Request is refused. Also the outcome when nothing matches.
    """

    ALLOW = "allow"
    DENY = "deny"
