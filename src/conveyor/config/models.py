"""Configuration domain models.

Each model groups the settings of one pipeline concern; they are composed
into the top-level Settings in ``conveyor.config.settings``.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from conveyor.shared.constants import Pipeline, Timeout

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ChannelSettings(BaseModel):
    """Bounded channel configuration."""

    capacity: int = Field(
        default=Pipeline.DEFAULT_CAPACITY,
        gt=0,
        description="Maximum number of items buffered between producers and consumers",
    )
    poll_interval: float = Field(
        default=Timeout.POLL_INTERVAL,
        gt=0,
        description="Longest single wait before a blocked worker re-checks cancellation",
    )


class WorkerSettings(BaseModel):
    """Worker pool configuration.

    The work delay range simulates per-item processing time; (0, 0)
    disables it.
    """

    num_producers: int = Field(default=Pipeline.DEFAULT_PRODUCERS, gt=0)
    num_consumers: int = Field(default=Pipeline.DEFAULT_CONSUMERS, gt=0)
    work_delay_min: float = Field(default=0.0, ge=0)
    work_delay_max: float = Field(default=0.0, ge=0)

    @model_validator(mode="after")
    def _check_delay_range(self) -> WorkerSettings:
        if self.work_delay_min > self.work_delay_max:
            msg = "work_delay_min must not exceed work_delay_max"
            raise ValueError(msg)
        return self

    @property
    def work_delay(self) -> tuple[float, float]:
        return (self.work_delay_min, self.work_delay_max)


class TimeoutSettings(BaseModel):
    """Liveness bounds used by the coordinator (seconds)."""

    producer_join: float = Field(default=Timeout.PRODUCER_JOIN, gt=0)
    consumer_join: float = Field(default=Timeout.CONSUMER_JOIN, gt=0)
    marker_put: float = Field(default=Timeout.MARKER_PUT, gt=0)
    cancel_join: float = Field(default=Timeout.CANCEL_JOIN, ge=0)


class LoggingSettings(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Logging level")
    file: str | None = Field(default=None, description="Optional JSON log file path")
    use_rich_console: bool = Field(default=True, description="Use Rich console output")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Normalize the level name and reject unknown levels."""
        level = v.strip().upper()
        if level not in LOG_LEVELS:
            msg = f"level must be one of {', '.join(LOG_LEVELS)}, got {v!r}"
            raise ValueError(msg)
        return level


__all__ = [
    "ChannelSettings",
    "LoggingSettings",
    "TimeoutSettings",
    "WorkerSettings",
]
