"""Log formatters with ISO 8601 UTC timestamps.

- ISO8601Formatter: one JSON object per line (JSONL), "time" first
- ConsoleFormatter: human-readable line for the system logger
"""

from __future__ import annotations

__all__ = [
    "ConsoleFormatter",
    "ISO8601Formatter",
    "format_timestamp",
]

import json
import logging
from datetime import datetime, timezone


def format_timestamp(created: float) -> str:
    """Format a record creation time as YYYY-MM-DDTHH:MM:SS.sssZ (UTC)."""
    return datetime.fromtimestamp(created, tz=timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ISO8601Formatter(logging.Formatter):
    """JSONL formatter with ISO 8601 timestamps (UTC).

    Dict messages are written as-is (structured logging), anything else is
    wrapped as {"message": ...}. The "time" field always comes first.

    Example:
        {"time": "2025-12-04T10:48:37.123Z", "event": "permission_denied", ...}
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as one JSON line.

        Args:
            record: The log record to format.

        Returns:
            JSON-encoded log entry.
        """
        if isinstance(record.msg, dict):
            log_data = record.msg
        else:
            log_data = {"message": record.getMessage()}

        log_entry = {"time": format_timestamp(record.created), **log_data}
        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Single-line text formatter for the system logger.

    Example:
        2025-12-04T10:48:37.123Z WARNING orgauthz.store.guard: Rejected delete of system policy p1
    """

    def format(self, record: logging.LogRecord) -> str:
        line = f"{format_timestamp(record.created)} {record.levelname} {record.name}: {record.getMessage()}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line
