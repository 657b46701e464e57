"""Environment model - contextual information about the request.

All fields are facts observed at request time. A policy constraint on a
fact the request does not carry never matches.
"""

from __future__ import annotations

__all__ = ["Environment"]

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from orgauthz.context.attributes import AttributeValue


class Environment(BaseModel):
    """Contextual information about the request.

    Attributes:
        current_time: Local time of day as "HH:MM".
        day_of_week: 0 (Sunday) through 6 (Saturday).
        ip_address: Client network address (IPv4 or IPv6).
        user_agent: Client user agent. Audit only, never matched.
        attributes: Additional facts for environment attribute constraints.
    """

    current_time: str | None = Field(default=None, pattern=r"^([01]\d|2[0-3]):[0-5]\d$")
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    ip_address: str | None = None
    user_agent: str | None = None
    attributes: dict[str, AttributeValue] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @classmethod
    def at(
        cls,
        when: datetime | None = None,
        *,
        ip_address: str | None = None,
        user_agent: str | None = None,
    ) -> Environment:
        """Build an environment for a point in time.

        Args:
            when: Moment of the request, read on its own wall clock.
                Defaults to now in the local timezone, so time-of-day
                windows are in server local time.
            ip_address: Client address, if known.
            user_agent: Client user agent, if known.

        Returns:
            Environment with time of day and day of week filled in.
        """
        when = when or datetime.now().astimezone()
        return cls(
            current_time=when.strftime("%H:%M"),
            # datetime.weekday() is Monday=0; conditions use Sunday=0
            day_of_week=(when.weekday() + 1) % 7,
            ip_address=ip_address,
            user_agent=user_agent,
        )

    def as_attributes(self) -> dict[str, Any]:
        """Known environment attributes (None values dropped)."""
        return {k: v for k, v in self.attributes.items() if v is not None}
