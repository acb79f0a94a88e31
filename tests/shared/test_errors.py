"""Tests for the Conveyor error hierarchy."""

from __future__ import annotations

from enum import Enum
from pathlib import Path

import pytest

from conveyor.shared.errors import (
    ApplicationError,
    ConveyorError,
    DomainError,
    ErrorCode,
    ErrorContext,
    InfrastructureError,
    LivenessTimeoutError,
    PipelineConfigurationError,
    create_cancelled_error,
    create_capacity_timeout_error,
    create_configuration_error,
    create_take_timeout_error,
)


class _Color(Enum):
    RED = "red"


class TestErrorContext:
    """Test cases for ErrorContext."""

    def test_coerces_primitive_like_values(self) -> None:
        context = ErrorContext(
            operation="load",
            additional_data={"path": Path("a/b.toml"), "color": _Color.RED, "n": 1},
        )

        assert context.additional_data == {
            "path": str(Path("a/b.toml")),
            "color": "red",
            "n": 1,
        }

    def test_rejects_complex_values(self) -> None:
        with pytest.raises(TypeError, match="Cannot coerce"):
            ErrorContext(additional_data={"obj": object()})

    def test_rejects_non_dict(self) -> None:
        with pytest.raises(TypeError, match="must be dict"):
            ErrorContext(additional_data=["a"])  # type: ignore[arg-type]

    def test_safe_dict(self) -> None:
        assert ErrorContext(operation="take").safe_dict() == {
            "operation": "take",
            "additional_data": {},
        }
        assert ErrorContext(worker_name="Consumer-1").safe_dict() == {
            "worker_name": "Consumer-1",
            "additional_data": {},
        }


class TestConveyorError:
    """Test cases for the base error and its subclasses."""

    def test_str_and_to_dict(self) -> None:
        cause = RuntimeError("low level")
        error = InfrastructureError(
            ErrorCode.PRODUCER_ERROR,
            "Producer-1 failed",
            ErrorContext(operation="producer_run"),
            original_error=cause,
        )

        assert str(error) == "PRODUCER_ERROR: Producer-1 failed"
        assert error.to_dict() == {
            "code": "PRODUCER_ERROR",
            "message": "Producer-1 failed",
            "context": {"operation": "producer_run", "additional_data": {}},
            "original_error": "low level",
        }

    def test_default_context(self) -> None:
        error = ApplicationError(ErrorCode.CONFIG_ERROR, "bad")

        assert error.context == ErrorContext()
        assert error.to_dict()["original_error"] is None

    def test_hierarchy(self) -> None:
        assert issubclass(PipelineConfigurationError, DomainError)
        assert issubclass(LivenessTimeoutError, InfrastructureError)
        assert issubclass(DomainError, ConveyorError)

    def test_liveness_error_carries_stuck_workers(self) -> None:
        error = LivenessTimeoutError("stuck", stuck_workers=["Consumer-2"])

        assert error.code == ErrorCode.WORKER_LIVENESS_TIMEOUT
        assert error.partial_result is None
        assert error.to_dict()["stuck_workers"] == ["Consumer-2"]


    def test_error_codes_are_all_in_use(self) -> None:
        assert {code.name for code in ErrorCode} == {
            "PIPELINE_CONFIGURATION_ERROR",
            "CONFIG_ERROR",
            "CONFIG_MISSING",
            "CHANNEL_CAPACITY_TIMEOUT",
            "CHANNEL_TAKE_TIMEOUT",
            "OPERATION_CANCELLED",
            "WORKER_LIVENESS_TIMEOUT",
            "PRODUCER_ERROR",
            "CONSUMER_ERROR",
            "PIPELINE_EXECUTION_ERROR",
        }


class TestErrorFactories:
    """Test cases for the create_* helpers."""

    def test_capacity_timeout(self) -> None:
        error = create_capacity_timeout_error(5, 0.25, "Producer-1")

        assert error.code == ErrorCode.CHANNEL_CAPACITY_TIMEOUT
        assert error.context.worker_name == "Producer-1"
        assert error.context.additional_data == {"capacity": 5, "timeout": 0.25}
        assert "capacity=5" in error.message

    def test_take_timeout(self) -> None:
        error = create_take_timeout_error(0.5)

        assert error.code == ErrorCode.CHANNEL_TAKE_TIMEOUT
        assert error.context.operation == "channel_take"

    def test_cancelled(self) -> None:
        error = create_cancelled_error("channel_put", "Producer-2")

        assert error.code == ErrorCode.OPERATION_CANCELLED
        assert error.message == "channel_put cancelled for Producer-2"

    def test_configuration(self) -> None:
        error = create_configuration_error("capacity", 0, "must be an int >= 1")

        assert isinstance(error, PipelineConfigurationError)
        assert error.message == "Invalid capacity=0: must be an int >= 1"
        assert error.context.additional_data == {"field": "capacity", "value": "0"}
