"""Attribute value types shared by request facets and conditions."""

from __future__ import annotations

__all__ = [
    "AttributeScalar",
    "AttributeValue",
]

# Scalars compared by equality. bool is listed first so pydantic keeps
# True/False as booleans instead of coercing them to 1/0.
AttributeScalar = bool | int | float | str

# A request attribute is a scalar, a collection of scalars (e.g. functional
# roles), or None when the fact is unknown.
AttributeValue = AttributeScalar | list[AttributeScalar] | None
