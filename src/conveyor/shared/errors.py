"""Conveyor Error Handling Module

This module defines the error handling system for Conveyor, providing
structured error classes with context information.

The error hierarchy follows these principles:
- One Source of Truth: All error codes are defined in ErrorCode enum
- Structured Context: ErrorContext provides additional information
- Proper Exception Chaining: Original exceptions are preserved
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Union

if TYPE_CHECKING:
    from conveyor.core.pipeline.domain.coordinator import RunResult

# Type alias for primitive context values (str, int, float, bool only)
PrimitiveContextValue = Union[str, int, float, bool]


class ErrorCode(str, Enum):
    """Error codes for Conveyor.

    This enum serves as the single source of truth for all error codes
    used throughout the package.
    """

    # Configuration Errors
    PIPELINE_CONFIGURATION_ERROR = "PIPELINE_CONFIGURATION_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    CONFIG_MISSING = "CONFIG_MISSING"

    # Channel Errors
    CHANNEL_CAPACITY_TIMEOUT = "CHANNEL_CAPACITY_TIMEOUT"
    CHANNEL_TAKE_TIMEOUT = "CHANNEL_TAKE_TIMEOUT"

    # Worker Errors
    OPERATION_CANCELLED = "OPERATION_CANCELLED"
    WORKER_LIVENESS_TIMEOUT = "WORKER_LIVENESS_TIMEOUT"
    PRODUCER_ERROR = "PRODUCER_ERROR"
    CONSUMER_ERROR = "CONSUMER_ERROR"

    # Pipeline Errors
    PIPELINE_EXECUTION_ERROR = "PIPELINE_EXECUTION_ERROR"


def _coerce_primitives(value: Any | None) -> dict[str, PrimitiveContextValue] | None:
    """Coerce additional_data values to primitives.

    Converts Path, Enum, Decimal to primitive types.

    Args:
        value: Input dictionary or None

    Returns:
        Dictionary with primitive values only, or None

    Raises:
        TypeError: If value is not a dict or contains unconvertible types
    """
    if value is None:
        return None

    if not isinstance(value, dict):
        error_msg = f"additional_data must be dict, got {type(value).__name__}"
        raise TypeError(error_msg)

    coerced: dict[str, PrimitiveContextValue] = {}
    for key, val in value.items():
        if isinstance(val, (str, int, float, bool)):
            coerced[key] = val
        elif isinstance(val, Path):
            coerced[key] = str(val)
        elif isinstance(val, Enum):
            coerced[key] = val.value
        elif isinstance(val, Decimal):
            coerced[key] = float(val)
        else:
            error_msg = (
                f"Cannot coerce {type(val).__name__} to primitive type. "
                f"Only str, int, float, bool, Path, Enum, Decimal are allowed."
            )
            raise TypeError(error_msg)

    return coerced


@dataclass(frozen=True)
class ErrorContext:
    """Context information for errors.

    Only primitive types (str, int, float, bool) are allowed in
    additional_data so the context can always be serialized into a log
    record.

    Attributes:
        operation: Optional operation name that caused the error
        worker_name: Optional name of the worker thread involved
        additional_data: Optional dict with primitive values only
    """

    operation: str | None = None
    worker_name: str | None = None
    additional_data: dict[str, PrimitiveContextValue] | None = None

    def __post_init__(self) -> None:
        """Post-initialization validation and coercion."""
        if self.additional_data is not None:
            coerced = _coerce_primitives(self.additional_data)
            object.__setattr__(self, "additional_data", coerced)

    def safe_dict(self) -> dict[str, Any]:
        """Export context as dict for logging.

        Returns:
            Dictionary with the set fields and a guaranteed additional_data key.

        Example:
            >>> ErrorContext(operation="take").safe_dict()
            {'operation': 'take', 'additional_data': {}}
        """
        data: dict[str, Any] = {}
        if self.operation is not None:
            data["operation"] = self.operation
        if self.worker_name is not None:
            data["worker_name"] = self.worker_name
        data["additional_data"] = dict(self.additional_data or {})
        return data


class ConveyorError(Exception):
    """Base exception class for all Conveyor errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """Initialize ConveyorError.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context information
            original_error: Original exception that caused this error
        """
        self.code = code
        self.message = message
        self.context = context or ErrorContext()
        self.original_error = original_error
        super().__init__(f"{code.value}: {message}")

    def __str__(self) -> str:
        """Return string representation of the error."""
        return f"{self.code.value}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging.

        Returns:
            Dictionary representation of the error with code, message,
            context, and original_error (if present)
        """
        return {
            "code": self.code.value,
            "message": self.message,
            "context": self.context.safe_dict(),
            "original_error": str(self.original_error) if self.original_error else None,
        }


class DomainError(ConveyorError):
    """Domain-specific errors.

    These errors occur when pipeline rules are violated, for example a
    run requested with a non-positive channel capacity.
    """


class InfrastructureError(ConveyorError):
    """Infrastructure-related errors.

    These errors occur in the threading machinery: channel waits that
    time out, cancelled workers, workers that never terminate.
    """


class ApplicationError(ConveyorError):
    """Application-level errors (configuration files, CLI handling)."""


class PipelineConfigurationError(DomainError):
    """Malformed run inputs detected before any worker thread starts."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            ErrorCode.PIPELINE_CONFIGURATION_ERROR,
            message,
            context,
            original_error,
        )


class CapacityTimeoutError(InfrastructureError):
    """A timed put could not complete because the channel stayed full.

    Recoverable: the caller decides whether to retry.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(ErrorCode.CHANNEL_CAPACITY_TIMEOUT, message, context)


class ChannelTimeoutError(InfrastructureError):
    """A timed take found the channel empty for the whole timeout."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(ErrorCode.CHANNEL_TAKE_TIMEOUT, message, context)


class WorkerCancelledError(InfrastructureError):
    """A blocked channel call or work delay observed a cancellation request."""

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(ErrorCode.OPERATION_CANCELLED, message, context)


class LivenessTimeoutError(InfrastructureError):
    """Workers failed to reach a terminal state within their bound.

    Fatal for the run. The counts gathered so far stay available through
    ``partial_result``.
    """

    def __init__(
        self,
        message: str,
        stuck_workers: list[str],
        partial_result: RunResult | None = None,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(ErrorCode.WORKER_LIVENESS_TIMEOUT, message, context)
        self.stuck_workers = list(stuck_workers)
        self.partial_result = partial_result

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["stuck_workers"] = list(self.stuck_workers)
        return data


# Convenience functions for common error scenarios
def create_capacity_timeout_error(
    capacity: int,
    timeout: float,
    worker_name: str | None = None,
) -> CapacityTimeoutError:
    """Create a CapacityTimeoutError for a put that waited too long."""
    context = ErrorContext(
        operation="channel_put",
        worker_name=worker_name,
        additional_data={"capacity": capacity, "timeout": timeout},
    )
    return CapacityTimeoutError(
        f"Channel stayed full (capacity={capacity}) for {timeout:.3f}s",
        context,
    )


def create_take_timeout_error(
    timeout: float,
    worker_name: str | None = None,
) -> ChannelTimeoutError:
    """Create a ChannelTimeoutError for a take that waited too long."""
    context = ErrorContext(
        operation="channel_take",
        worker_name=worker_name,
        additional_data={"timeout": timeout},
    )
    return ChannelTimeoutError(
        f"Channel stayed empty for {timeout:.3f}s",
        context,
    )


def create_cancelled_error(
    operation: str,
    worker_name: str | None = None,
) -> WorkerCancelledError:
    """Create a WorkerCancelledError for an interrupted wait."""
    context = ErrorContext(operation=operation, worker_name=worker_name)
    who = worker_name or "caller"
    return WorkerCancelledError(f"{operation} cancelled for {who}", context)


def create_configuration_error(
    field: str,
    value: Any,
    reason: str,
) -> PipelineConfigurationError:
    """Create a PipelineConfigurationError for an invalid run parameter."""
    context = ErrorContext(
        operation="validate_run_inputs",
        additional_data={"field": field, "value": str(value)},
    )
    return PipelineConfigurationError(
        f"Invalid {field}={value!r}: {reason}",
        context,
    )
