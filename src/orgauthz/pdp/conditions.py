"""Structural condition models for authorization policies.

Conditions are a closed set of shapes, one per ABAC facet:

    SubjectCondition       attribute -> expected value(s)
    ResourceCondition      {type, attributes?}
    ActionCondition        {actions}
    EnvironmentCondition   {time_of_day?, days_of_week?, ip_allow_list?,
                            ip_deny_list?, attributes?}
    InvalidCondition       stand-in for a stored payload that failed to decode

Expected attribute values are a scalar (equality), a list of scalars (set
membership), or a ValueConstraint ({"in": [...]} and/or {"range": [lo, hi]}).

All models are frozen and reject unknown keys, so anything outside the closed
shape fails to decode and the owning policy never matches.
"""

from __future__ import annotations

__all__ = [
    "ActionCondition",
    "Condition",
    "EnvironmentCondition",
    "ExpectedValue",
    "InvalidCondition",
    "ResourceCondition",
    "SubjectCondition",
    "TimeRange",
    "ValueConstraint",
]

import ipaddress
from typing import Annotated, Any, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, RootModel, field_validator, model_validator

from orgauthz.constants import WILDCARD
from orgauthz.context.attributes import AttributeScalar
from orgauthz.context.resource import ResourceType

ConditionFacet = Literal["subject", "resource", "action", "environment"]

_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class ValueConstraint(BaseModel):
    """Constraint object for a single attribute.

    Attributes:
        in_values: Allowed values (wire key "in").
        range: Inclusive numeric bounds [min, max].
    """

    in_values: list[AttributeScalar] | None = Field(default=None, alias="in")
    range: tuple[float, float] | None = None

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    @model_validator(mode="after")
    def check_bounds(self) -> Self:
        """Require at least one constraint and an ordered range."""
        if self.in_values is None and self.range is None:
            raise ValueError("Value constraint needs 'in' or 'range'")
        if self.range is not None and self.range[0] > self.range[1]:
            raise ValueError(f"Range lower bound exceeds upper bound: {list(self.range)}")
        return self


# Order matters: a JSON object only validates as ValueConstraint
ExpectedValue = ValueConstraint | AttributeScalar | list[AttributeScalar]


def _check_attribute_keys(attributes: dict[str, Any] | None) -> dict[str, Any] | None:
    if attributes is None:
        return attributes
    for key in attributes:
        if not key.strip():
            raise ValueError("Attribute names cannot be empty or whitespace-only")
    return attributes


class SubjectCondition(RootModel[dict[str, ExpectedValue]]):
    """Who a policy applies to.

    The wire form is the mapping itself, e.g. ``{"role": ["owner", "admin"]}``.
    An empty mapping matches any subject.
    """

    root: dict[str, ExpectedValue] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @field_validator("root", mode="after")
    @classmethod
    def reject_empty_keys(cls, v: dict[str, ExpectedValue]) -> dict[str, ExpectedValue]:
        """Reject empty attribute names."""
        return _check_attribute_keys(v) or {}

    @property
    def attributes(self) -> dict[str, ExpectedValue]:
        """Expected subject attributes."""
        return self.root


class ResourceCondition(BaseModel):
    """What resources a policy applies to.

    Attributes:
        type: Resource type, or "*" for any type.
        attributes: Optional resource attribute constraints. When absent the
            type match alone decides.
    """

    type: ResourceType | Literal["*"]
    attributes: dict[str, ExpectedValue] | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("attributes", mode="after")
    @classmethod
    def reject_empty_keys(cls, v: dict[str, ExpectedValue] | None) -> dict[str, ExpectedValue] | None:
        """Reject empty attribute names."""
        return _check_attribute_keys(v)

    @property
    def is_wildcard(self) -> bool:
        """True when the condition accepts any resource type."""
        return self.type == WILDCARD


class ActionCondition(BaseModel):
    """What actions a policy applies to.

    Attributes:
        actions: Namespaced action ids. "*" matches any action; an empty
            list matches nothing.
    """

    actions: list[str]

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("actions", mode="after")
    @classmethod
    def reject_empty_strings(cls, v: list[str]) -> list[str]:
        """Reject empty or whitespace-only action ids."""
        for item in v:
            if not item.strip():
                raise ValueError("Action ids cannot be empty or whitespace-only")
        return v

    @property
    def is_wildcard(self) -> bool:
        """True when the condition accepts any action."""
        return WILDCARD in self.actions


class TimeRange(BaseModel):
    """Time-of-day window, "HH:MM" inclusive on both ends.

    A start later than the end spans midnight (e.g., 22:00 to 06:00).
    """

    start: str = Field(pattern=_TIME_PATTERN)
    end: str = Field(pattern=_TIME_PATTERN)

    model_config = ConfigDict(frozen=True, extra="forbid")


class EnvironmentCondition(BaseModel):
    """Contextual constraints on when/where a policy applies.

    Attributes:
        time_of_day: Allowed time window.
        days_of_week: Allowed days, 0 (Sunday) to 6 (Saturday). Empty means
            no day constraint.
        ip_allow_list: Addresses or CIDR blocks the client must be in.
        ip_deny_list: Addresses or CIDR blocks the client must not be in.
        attributes: Additional environment attribute constraints.
    """

    time_of_day: TimeRange | None = None
    days_of_week: list[Annotated[int, Field(ge=0, le=6)]] | None = None
    ip_allow_list: list[str] | None = None
    ip_deny_list: list[str] | None = None
    attributes: dict[str, ExpectedValue] | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("ip_allow_list", "ip_deny_list", mode="after")
    @classmethod
    def validate_ip_patterns(cls, v: list[str] | None) -> list[str] | None:
        """Reject patterns that are not an IP address or CIDR block."""
        if v is None:
            return v
        for pattern in v:
            try:
                ipaddress.ip_network(pattern, strict=False)
            except ValueError as e:
                raise ValueError(f"Invalid IP pattern '{pattern}': {e}") from e
        return v

    @field_validator("attributes", mode="after")
    @classmethod
    def reject_empty_keys(cls, v: dict[str, ExpectedValue] | None) -> dict[str, ExpectedValue] | None:
        """Reject empty attribute names."""
        return _check_attribute_keys(v)


class InvalidCondition(BaseModel):
    """A stored condition that could not be decoded.

    Never matches any request, so a corrupt policy can neither grant nor
    deny anything.

    Attributes:
        facet: Which condition failed to decode.
        error: Decoder error message.
        raw: The payload as stored, for diagnostics.
    """

    facet: ConditionFacet
    error: str
    raw: Any = None

    model_config = ConfigDict(frozen=True)


Condition = SubjectCondition | ResourceCondition | ActionCondition | EnvironmentCondition
