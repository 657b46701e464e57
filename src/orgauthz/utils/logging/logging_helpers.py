"""Serialization helpers for structured log events."""

from __future__ import annotations

__all__ = ["serialize_audit_event"]

from typing import Any

from pydantic import BaseModel


def serialize_audit_event(event: BaseModel) -> dict[str, Any]:
    """Serialize a Pydantic event model for audit logging.

    - Excludes the 'time' field (added by ISO8601Formatter at log time)
    - Excludes None values for cleaner logs
    - JSON-compatible values (enums as their value, datetimes as ISO strings)

    Args:
        event: Pydantic model instance (e.g., DenialEvent).

    Returns:
        dict: Serialized event data ready for logging.

    Example:
        >>> event = DenialEvent(organization_id="org-1", action="journal_entry:post", ...)
        >>> serialize_audit_event(event)
        {"event_type": "permission_denied", "organization_id": "org-1", ...}
    """
    return event.model_dump(mode="json", exclude={"time"}, exclude_none=True)
