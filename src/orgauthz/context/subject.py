"""Subject model - WHO is making the request.

Attributes are resolved by the caller (membership lookup, session) before
evaluation. The engine never derives them.
"""

from __future__ import annotations

__all__ = ["Subject"]

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from orgauthz.context.attributes import AttributeValue


class Subject(BaseModel):
    """Resolved subject attributes.

    Attributes:
        user_id: Authenticated user identifier.
        role: Base organization role ("owner", "admin", "member", "viewer").
        functional_roles: Functional roles held in the organization
            (e.g., "controller", "period_admin").
        is_platform_admin: Whether the user is a platform administrator.
        attributes: Additional attributes available to subject conditions.
    """

    user_id: str | None = None
    role: str | None = None
    functional_roles: list[str] = Field(default_factory=list)
    is_platform_admin: bool = False
    attributes: dict[str, AttributeValue] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def as_attributes(self) -> dict[str, Any]:
        """Flatten into the attribute mapping that subject conditions match against.

        Named fields win over same-named entries in ``attributes``.
        Unknown facts (None) are left out so a condition on them never matches.
        """
        flat: dict[str, Any] = {k: v for k, v in self.attributes.items() if v is not None}
        if self.user_id is not None:
            flat["user_id"] = self.user_id
        if self.role is not None:
            flat["role"] = self.role
        flat["functional_roles"] = list(self.functional_roles)
        flat["is_platform_admin"] = self.is_platform_admin
        return flat
