"""Resource model - ON WHAT the action is performed."""

from __future__ import annotations

__all__ = [
    "ResourceDescriptor",
    "ResourceType",
]

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from orgauthz.context.attributes import AttributeValue


class ResourceType(str, Enum):
    """Resource types that policies can target.

    Inherits from str for easy serialization and comparison.
    """

    ORGANIZATION = "organization"
    COMPANY = "company"
    ACCOUNT = "account"
    JOURNAL_ENTRY = "journal_entry"
    FISCAL_PERIOD = "fiscal_period"
    CONSOLIDATION_GROUP = "consolidation_group"
    REPORT = "report"


class ResourceDescriptor(BaseModel):
    """The target of an access request.

    Attributes:
        type: Resource type.
        id: Resource identifier, if the request targets a specific instance.
        attributes: Resource facts (e.g., "period_status", "account_number",
            "is_own_entry") available to resource conditions.
    """

    type: ResourceType
    id: str | None = None
    attributes: dict[str, AttributeValue] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    def as_attributes(self) -> dict[str, Any]:
        """Known resource attributes (None values dropped)."""
        return {k: v for k, v in self.attributes.items() if v is not None}
