"""Pydantic models for telemetry logs."""

from orgauthz.telemetry.models.audit import DenialEvent

__all__ = [
    "DenialEvent",
]
