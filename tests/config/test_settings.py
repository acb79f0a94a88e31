"""Tests for Conveyor settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from conveyor.config import Settings, WorkerSettings
from conveyor.shared.constants import Pipeline, Timeout
from conveyor.shared.errors import ApplicationError, ErrorCode


class TestSettingsDefaults:
    """Test cases for default settings values."""

    def test_defaults(self) -> None:
        settings = Settings()

        assert settings.channel.capacity == Pipeline.DEFAULT_CAPACITY
        assert settings.channel.poll_interval == Timeout.POLL_INTERVAL
        assert settings.workers.num_producers == Pipeline.DEFAULT_PRODUCERS
        assert settings.workers.num_consumers == Pipeline.DEFAULT_CONSUMERS
        assert settings.workers.work_delay == (0.0, 0.0)
        assert settings.timeouts.producer_join == Timeout.PRODUCER_JOIN
        assert settings.logging.level == "INFO"
        assert settings.logging.file is None


class TestSettingsEnvironment:
    """Test cases for CONVEYOR_* environment variables."""

    def test_nested_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CONVEYOR_CHANNEL__CAPACITY", "9")
        monkeypatch.setenv("CONVEYOR_WORKERS__NUM_CONSUMERS", "4")
        monkeypatch.setenv("CONVEYOR_LOGGING__LEVEL", "DEBUG")

        settings = Settings()

        assert settings.channel.capacity == 9
        assert settings.workers.num_consumers == 4
        assert settings.logging.level == "DEBUG"

    def test_invalid_env_value(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CONVEYOR_CHANNEL__CAPACITY", "0")

        with pytest.raises(ValidationError):
            Settings()

    def test_unknown_log_level_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("CONVEYOR_LOGGING__LEVEL", "LOUD")

        with pytest.raises(ValidationError, match="level"):
            Settings()


class TestSettingsValidation:
    """Test cases for model validation."""

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"channel": {"capacity": 0}},
            {"channel": {"poll_interval": 0}},
            {"workers": {"num_producers": 0}},
            {"workers": {"work_delay_min": -1}},
            {"timeouts": {"marker_put": 0}},
            {"timeouts": {"cancel_join": -1}},
        ],
    )
    def test_rejects_invalid_values(self, kwargs: dict) -> None:
        with pytest.raises(ValidationError):
            Settings(**kwargs)

    def test_delay_range_must_be_ordered(self) -> None:
        with pytest.raises(ValidationError, match="work_delay_min"):
            WorkerSettings(work_delay_min=0.5, work_delay_max=0.1)

    def test_cancel_join_may_be_zero(self) -> None:
        assert Settings(timeouts={"cancel_join": 0}).timeouts.cancel_join == 0

    def test_log_level_is_normalized(self) -> None:
        assert Settings(logging={"level": " debug "}).logging.level == "DEBUG"


class TestSettingsTomlFile:
    """Test cases for TOML persistence."""

    def test_save_and_load(self, tmp_path: Path) -> None:
        """Test that a saved settings file loads back to the same values."""
        # Given
        original = Settings(
            channel={"capacity": 12},
            workers={"num_producers": 3, "work_delay_max": 0.2},
        )
        config_file = tmp_path / "nested" / "conveyor.toml"

        # When
        original.to_toml_file(config_file)
        loaded = Settings.from_toml_file(config_file)

        # Then
        assert config_file.exists()
        assert loaded == original

    def test_partial_file_keeps_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "conveyor.toml"
        config_file.write_text("[channel]\ncapacity = 3\n", encoding="utf-8")

        settings = Settings.from_toml_file(config_file)

        assert settings.channel.capacity == 3
        assert settings.workers.num_consumers == Pipeline.DEFAULT_CONSUMERS

    def test_file_values_win_over_environment(
        self,
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        monkeypatch.setenv("CONVEYOR_CHANNEL__CAPACITY", "8")
        config_file = tmp_path / "conveyor.toml"
        config_file.write_text("[channel]\ncapacity = 3\n", encoding="utf-8")

        assert Settings.from_toml_file(config_file).channel.capacity == 3

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ApplicationError) as exc_info:
            Settings.from_toml_file(tmp_path / "absent.toml")

        assert exc_info.value.code == ErrorCode.CONFIG_MISSING

    def test_invalid_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "broken.toml"
        config_file.write_text("[channel\ncapacity = ", encoding="utf-8")

        with pytest.raises(ApplicationError) as exc_info:
            Settings.from_toml_file(config_file)

        assert exc_info.value.code == ErrorCode.CONFIG_ERROR
        assert exc_info.value.original_error is not None
