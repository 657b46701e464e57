"""Audit logging for authorization denials."""

from orgauthz.telemetry.audit.denial_logger import (
    DenialEventLogger,
    create_denial_logger,
)

__all__ = [
    "DenialEventLogger",
    "create_denial_logger",
]
