"""Engine configuration for orgauthz.

Defines configuration models for logging and the policy snapshot cache.
Every field has a default, so an empty JSON object is a valid config.

Example usage:
    # Load from config file
    config = EngineConfig.load_from_file(config_path)

    # Build a service from it
    service = AuthorizationService.from_config(repository, config)
"""

from __future__ import annotations

__all__ = [
    "CacheConfig",
    "EngineConfig",
    "LoggingConfig",
]

import json
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field

from orgauthz.constants import (
    DEFAULT_CACHE_TTL_SECONDS,
    MAX_CACHE_TTL_SECONDS,
    MIN_CACHE_TTL_SECONDS,
)
from orgauthz.exceptions import ConfigurationError
from orgauthz.utils.file_helpers import load_validated_json, require_file_exists


class LoggingConfig(BaseModel):
    """Logging configuration settings.

    Attributes:
        log_level: Level for the "orgauthz" system logger.
        audit_log_path: JSONL file for the denial audit trail. When None,
            denials are not written to a file.
    """

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    audit_log_path: str | None = None


class CacheConfig(BaseModel):
    """Policy snapshot cache settings.

    Attributes:
        enabled: When False every evaluation reads the repository.
        ttl_seconds: Snapshot lifetime. Mutations through the service
            invalidate earlier than that.
    """

    enabled: bool = True
    ttl_seconds: int = Field(
        default=DEFAULT_CACHE_TTL_SECONDS,
        ge=MIN_CACHE_TTL_SECONDS,
        le=MAX_CACHE_TTL_SECONDS,
    )

    @property
    def effective_ttl_seconds(self) -> int:
        """TTL to hand to the cache (0 disables caching)."""
        return self.ttl_seconds if self.enabled else 0


class EngineConfig(BaseModel):
    """Top-level orgauthz configuration.

    Attributes:
        logging: Logging settings.
        cache: Policy snapshot cache settings.
    """

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to JSON file, creating parent directories.

        Args:
            config_path: Path where the config JSON file should be saved.
        """
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(self.model_dump(), f, indent=2)

    @classmethod
    def load_from_file(cls, config_path: Path) -> "EngineConfig":
        """Load configuration from JSON file.

        Args:
            config_path: Path to the config JSON file.

        Returns:
            EngineConfig instance with loaded configuration.

        Raises:
            ConfigurationError: If the file is missing, is not valid JSON
                or fails validation.
        """
        try:
            require_file_exists(config_path, file_type="configuration")
            return load_validated_json(config_path, cls, file_type="config")
        except (FileNotFoundError, ValueError) as e:
            raise ConfigurationError(str(e)) from e
