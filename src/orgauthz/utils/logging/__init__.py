"""Logging utilities.

This package provides logging infrastructure for orgauthz:
- iso_formatter: ISO 8601 timestamp formatting (JSONL and console)
- logger_setup: Factory functions for creating configured loggers
- logging_helpers: Event serialization

Import directly from submodules to avoid circular imports:
    from orgauthz.utils.logging.logger_setup import setup_jsonl_logger
"""

__all__: list[str] = []  # Direct submodule imports required (see docstring)
