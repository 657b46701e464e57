"""Decoding of stored condition payloads.

Conditions are persisted as JSON text, one column per facet. Decoding is
strict: a payload that is not valid JSON, is not an object, or does not fit
the closed condition shape raises ConditionDecodeError.

The repository boundary calls decode_or_invalid(), which logs the failure and
substitutes an InvalidCondition so the policy fails closed (it never matches)
instead of widening to a wildcard.
"""

from __future__ import annotations

__all__ = [
    "decode_action_condition",
    "decode_environment_condition",
    "decode_or_invalid",
    "decode_resource_condition",
    "decode_subject_condition",
    "encode_condition",
]

import json
import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from orgauthz.exceptions import ConditionDecodeError
from orgauthz.pdp.conditions import (
    ActionCondition,
    ConditionFacet,
    EnvironmentCondition,
    InvalidCondition,
    ResourceCondition,
    SubjectCondition,
)

logger = logging.getLogger(__name__)

_ModelT = TypeVar("_ModelT", bound=BaseModel)

RawCondition = str | bytes | Mapping[str, Any]


def _load_object(facet: str, raw: RawCondition) -> Mapping[str, Any]:
    """Parse raw payload into a JSON object."""
    if isinstance(raw, (str, bytes)):
        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConditionDecodeError(facet, f"invalid JSON: {e}") from e
    else:
        data = raw
    if not isinstance(data, Mapping):
        raise ConditionDecodeError(facet, f"expected a JSON object, got {type(data).__name__}")
    return data


def _format_validation_error(e: ValidationError) -> str:
    """Condense pydantic errors into one line."""
    parts = []
    for err in e.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<root>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def _decode(facet: str, model: type[_ModelT], raw: RawCondition) -> _ModelT:
    data = _load_object(facet, raw)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ConditionDecodeError(facet, _format_validation_error(e)) from e


def decode_subject_condition(raw: RawCondition) -> SubjectCondition:
    """Decode a subject condition.

    Raises:
        ConditionDecodeError: If the payload is malformed.
    """
    return _decode("subject", SubjectCondition, raw)


def decode_resource_condition(raw: RawCondition) -> ResourceCondition:
    """Decode a resource condition.

    Raises:
        ConditionDecodeError: If the payload is malformed.
    """
    return _decode("resource", ResourceCondition, raw)


def decode_action_condition(raw: RawCondition) -> ActionCondition:
    """Decode an action condition.

    Raises:
        ConditionDecodeError: If the payload is malformed.
    """
    return _decode("action", ActionCondition, raw)


def decode_environment_condition(raw: RawCondition | None) -> EnvironmentCondition | None:
    """Decode an optional environment condition.

    A missing payload (None) means no environmental constraint.

    Raises:
        ConditionDecodeError: If the payload is present but malformed.
    """
    if raw is None:
        return None
    return _decode("environment", EnvironmentCondition, raw)


_DECODERS: dict[ConditionFacet, Callable[[Any], Any]] = {
    "subject": decode_subject_condition,
    "resource": decode_resource_condition,
    "action": decode_action_condition,
    "environment": decode_environment_condition,
}


def decode_or_invalid(facet: ConditionFacet, raw: Any, *, policy_id: str) -> Any:
    """Decode one stored condition, failing closed.

    Args:
        facet: Which condition column the payload came from.
        raw: Stored payload.
        policy_id: Owning policy, for the log record.

    Returns:
        The decoded condition (None for an absent environment), or an
        InvalidCondition that never matches.
    """
    try:
        return _DECODERS[facet](raw)
    except ConditionDecodeError as e:
        logger.warning(
            "Policy %s has an undecodable %s condition, it will never match: %s",
            policy_id,
            facet,
            e.message,
        )
        return InvalidCondition(facet=facet, error=e.message, raw=raw)


def encode_condition(condition: BaseModel) -> str:
    """Encode a condition for storage (canonical JSON, None fields dropped)."""
    return json.dumps(
        condition.model_dump(mode="json", by_alias=True, exclude_none=True),
        sort_keys=True,
    )
