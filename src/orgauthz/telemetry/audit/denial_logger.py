"""Denial logging for permission checks.

One JSONL record per denied check_permission() call, written to the path
configured as logging.audit_log_path.

Audit failures never change an authorization outcome: if a record cannot
be written, the failure goes to the system logger and the caller still
receives its PermissionDeniedError.
"""

from __future__ import annotations

__all__ = [
    "DenialEventLogger",
    "create_denial_logger",
]

import logging
from pathlib import Path

from orgauthz.constants import AUDIT_LOGGER_NAME, SYSTEM_LOGGER_NAME
from orgauthz.context.request import AccessRequest
from orgauthz.pdp.engine import EvaluationResult
from orgauthz.telemetry.models.audit import DenialEvent
from orgauthz.utils.logging.logger_setup import setup_jsonl_logger
from orgauthz.utils.logging.logging_helpers import serialize_audit_event


def create_denial_logger(log_path: Path) -> logging.Logger:
    """Create logger for denial events.

    Args:
        log_path: Path to the denials JSONL file.

    Returns:
        Configured logger instance.
    """
    return setup_jsonl_logger(AUDIT_LOGGER_NAME, log_path, log_level=logging.INFO)


class DenialEventLogger:
    """Logs denied permission checks as structured events."""

    def __init__(
        self,
        *,
        logger: logging.Logger,
        system_logger: logging.Logger | None = None,
    ) -> None:
        """Initialize denial event logger.

        Args:
            logger: Primary logger for denial events (JSONL).
            system_logger: Logger for write failures. Defaults to "orgauthz".
        """
        self._logger = logger
        self._system_logger = system_logger or logging.getLogger(SYSTEM_LOGGER_NAME)

    @classmethod
    def to_file(cls, log_path: Path) -> "DenialEventLogger":
        """Create a logger writing to a JSONL file."""
        return cls(logger=create_denial_logger(log_path))

    def log(self, request: AccessRequest, result: EvaluationResult) -> None:
        """Record one denied request.

        Args:
            request: The denied request.
            result: Evaluation outcome (reason and deciding policies).
        """
        event = DenialEvent(
            user_id=request.subject.user_id,
            organization_id=request.organization_id,
            action=request.action,
            resource_type=request.resource.type.value,
            resource_id=request.resource.id,
            denial_reason=result.reason,
            matched_policy_ids=result.matched_policy_ids,
            default_deny=result.default_deny,
            ip_address=request.environment.ip_address,
            user_agent=request.environment.user_agent,
        )

        try:
            self._logger.info(serialize_audit_event(event))
        except (OSError, ValueError) as e:
            self._system_logger.error(
                "Failed to write denial audit event for %s on %s: %s",
                request.action,
                request.organization_id,
                e,
            )
