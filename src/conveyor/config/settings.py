"""Conveyor Settings Configuration.

Main Settings class that consolidates all configuration domains. Values
come from defaults, ``CONVEYOR_``-prefixed environment variables
(e.g. ``CONVEYOR_CHANNEL__CAPACITY=10``) and, when one is given, a TOML
file whose values take precedence over the environment.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import toml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from conveyor.config.models import (
    ChannelSettings,
    LoggingSettings,
    TimeoutSettings,
    WorkerSettings,
)
from conveyor.shared.errors import ApplicationError, ErrorCode, ErrorContext

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Unified configuration for a pipeline run."""

    model_config = SettingsConfigDict(
        env_prefix="CONVEYOR_",
        env_nested_delimiter="__",
        env_ignore_empty=True,
        extra="ignore",
    )

    channel: ChannelSettings = Field(default_factory=ChannelSettings)
    workers: WorkerSettings = Field(default_factory=WorkerSettings)
    timeouts: TimeoutSettings = Field(default_factory=TimeoutSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    @classmethod
    def from_toml_file(cls, file_path: str | Path) -> Settings:
        """Load settings from a TOML file.

        Raises:
            ApplicationError: If the file is missing or is not valid TOML.
        """
        file_path = Path(file_path)
        context = ErrorContext(
            operation="load_settings",
            additional_data={"file_path": file_path},
        )
        if not file_path.exists():
            raise ApplicationError(
                ErrorCode.CONFIG_MISSING,
                f"Configuration file not found: {file_path}",
                context,
            )

        try:
            raw_config: dict[str, Any] = toml.load(file_path)
        except toml.TomlDecodeError as e:
            raise ApplicationError(
                ErrorCode.CONFIG_ERROR,
                f"Invalid TOML in {file_path}: {e}",
                context,
                original_error=e,
            ) from e

        logger.debug("Loaded configuration from %s", file_path)
        return cls(**raw_config)

    def to_toml_file(self, file_path: str | Path) -> None:
        """Save settings to a TOML file."""
        file_path = Path(file_path)
        file_path.parent.mkdir(parents=True, exist_ok=True)
        config_dict = self.model_dump(exclude_none=True)
        with open(file_path, "w", encoding="utf-8") as f:
            toml.dump(config_dict, f)


__all__ = ["Settings"]
