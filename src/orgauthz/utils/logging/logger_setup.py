"""Logger setup utilities.

Two loggers matter to orgauthz:

- The denial audit logger ("orgauthz.audit.denials"): JSONL file written by
  setup_jsonl_logger, isolated from the rest of the logging tree.
- The system logger ("orgauthz"): every module logger propagates to it.
  configure_logging gives it a level and one stderr handler.
"""

from __future__ import annotations

__all__ = [
    "configure_logging",
    "setup_jsonl_logger",
]

import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from orgauthz.constants import SYSTEM_LOGGER_NAME
from orgauthz.utils.logging.iso_formatter import ConsoleFormatter, ISO8601Formatter

if TYPE_CHECKING:
    from orgauthz.config import LoggingConfig

# Audit trails hold user ids and addresses
_LOG_DIR_MODE = 0o700
_LOG_FILE_MODE = 0o600


def _prepare_log_file(log_file: Path) -> None:
    """Create the log directory and file, owner-only on POSIX.

    Existing files keep their content. Permission tightening is best effort
    (some filesystems ignore chmod).

    Raises:
        OSError: If the directory or file cannot be created.
    """
    log_file.parent.mkdir(parents=True, exist_ok=True)
    fd = os.open(log_file, os.O_CREAT | os.O_APPEND | os.O_WRONLY, _LOG_FILE_MODE)
    os.close(fd)
    if sys.platform == "win32":
        return
    for path, mode in ((log_file.parent, _LOG_DIR_MODE), (log_file, _LOG_FILE_MODE)):
        try:
            path.chmod(mode)
        except OSError:
            logging.getLogger(SYSTEM_LOGGER_NAME).debug("Could not restrict permissions of %s", path)


def _replace_handlers(logger: logging.Logger, handler: logging.Handler) -> None:
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.addHandler(handler)


def setup_jsonl_logger(
    logger_name: str,
    log_file: Path,
    log_level: int = logging.INFO,
) -> logging.Logger:
    """Point a named logger at a JSONL file.

    Records are formatted by ISO8601Formatter. Calling this again for the
    same name swaps the file handler, so tests and reconfiguration never
    write to two files at once.

    Args:
        logger_name: Logger to configure (e.g., "orgauthz.audit.denials").
        log_file: JSONL destination. Parent directories are created.
        log_level: Minimum level written.

    Returns:
        The logger. It does not propagate to the system logger.

    Raises:
        OSError: If the log file cannot be created or opened.
    """
    _prepare_log_file(log_file)

    handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    handler.setFormatter(ISO8601Formatter())

    logger = logging.getLogger(logger_name)
    logger.setLevel(log_level)
    logger.propagate = False
    _replace_handlers(logger, handler)
    return logger


def configure_logging(config: "LoggingConfig") -> logging.Logger:
    """Apply the logging section of EngineConfig to the system logger.

    Args:
        config: Logging settings (level).

    Returns:
        The "orgauthz" logger, with a single stderr handler.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(ConsoleFormatter())

    logger = logging.getLogger(SYSTEM_LOGGER_NAME)
    logger.setLevel(config.log_level)
    _replace_handlers(logger, handler)
    return logger
