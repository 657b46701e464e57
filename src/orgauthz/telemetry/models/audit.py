"""Pydantic models for audit log events.

The 'time' field is None when an event is created. ISO8601Formatter adds
the timestamp during log serialization, so there is a single source of
truth for timestamps. Logged events always carry 'time' in ISO 8601 format
(e.g., "2025-12-11T10:30:45.123Z").
"""

from __future__ import annotations

__all__ = ["DenialEvent"]

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class DenialEvent(BaseModel):
    """One denied permission check (denials.jsonl).

    Attributes:
        user_id: Subject that was denied, if known.
        organization_id: Tenant the request was made in.
        action: Denied action.
        resource_type: Type of the target resource.
        resource_id: Target resource, if the request named one.
        denial_reason: Evaluator's explanation.
        matched_policy_ids: Deny policies that decided (empty on default deny).
        default_deny: True when no policy matched at all.
        ip_address: Client address, if known.
        user_agent: Client user agent, if known.
    """

    time: str | None = Field(
        None,
        description="ISO 8601 timestamp, added by formatter during serialization",
    )
    event_type: Literal["permission_denied"] = "permission_denied"

    user_id: str | None = None
    organization_id: str
    action: str
    resource_type: str
    resource_id: str | None = None
    denial_reason: str
    matched_policy_ids: list[str] = Field(default_factory=list)
    default_deny: bool = False
    ip_address: str | None = None
    user_agent: str | None = None

    model_config = ConfigDict(frozen=True)
