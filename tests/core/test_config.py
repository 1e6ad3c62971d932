# tests/core/test_config.py
"""Tests for configuration schema and loading."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from lincheck.contracts import CorrelationPolicy
from lincheck.core.config import (
    CheckSettings,
    HistorySettings,
    LincheckSettings,
    LoggingSettings,
    load_settings,
)


class TestHistorySettings:
    def test_defaults(self) -> None:
        settings = HistorySettings()
        assert settings.path is None
        assert settings.fsync is False
        assert settings.correlation == CorrelationPolicy.STRICT

    def test_correlation_from_string(self) -> None:
        settings = HistorySettings(correlation="lenient")  # type: ignore[arg-type]
        assert settings.correlation == CorrelationPolicy.LENIENT

    def test_unknown_correlation_rejected(self) -> None:
        with pytest.raises(ValidationError):
            HistorySettings(correlation="sloppy")  # type: ignore[arg-type]

    def test_settings_are_frozen(self) -> None:
        settings = HistorySettings()
        with pytest.raises(ValidationError):
            settings.fsync = True  # type: ignore[misc]


class TestCheckSettings:
    def test_defaults(self) -> None:
        settings = CheckSettings()
        assert settings.adapter == "kv"
        assert settings.oracle == "wgl"
        assert settings.timeout_seconds is None

    @pytest.mark.parametrize("timeout", [0, -1.5])
    def test_timeout_must_be_positive(self, timeout: float) -> None:
        with pytest.raises(ValidationError):
            CheckSettings(timeout_seconds=timeout)

    def test_names_are_stripped(self) -> None:
        assert CheckSettings(adapter="  kv ").adapter == "kv"

    def test_blank_name_rejected(self) -> None:
        with pytest.raises(ValidationError, match="must not be empty"):
            CheckSettings(oracle="   ")

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValidationError):
            CheckSettings(retries=3)  # type: ignore[call-arg]


class TestLoggingSettings:
    def test_level_is_normalized(self) -> None:
        assert LoggingSettings(level="debug").level == "DEBUG"  # type: ignore[arg-type]

    def test_unknown_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            LoggingSettings(level="TRACE")  # type: ignore[arg-type]


class TestLoadSettings:
    def test_load_minimal_config(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            """
history:
  path: histories/run.jsonl
  correlation: lenient
check:
  timeout_seconds: 2.5
"""
        )

        settings = load_settings(config_file)

        assert isinstance(settings, LincheckSettings)
        assert settings.history.path == Path("histories/run.jsonl")
        assert settings.history.correlation == CorrelationPolicy.LENIENT
        assert settings.check.timeout_seconds == 2.5
        assert settings.check.adapter == "kv"
        assert settings.logging.level == "INFO"

    def test_env_override(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            """
check:
  adapter: kv
"""
        )
        monkeypatch.setenv("LINCHECK_LOGGING__LEVEL", "WARNING")

        settings = load_settings(config_file)

        assert settings.logging.level == "WARNING"
        assert settings.check.adapter == "kv"

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "nope.yaml")

    def test_invalid_value_raises_validation_error(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            """
check:
  timeout_seconds: -1
"""
        )

        with pytest.raises(ValidationError):
            load_settings(config_file)

    def test_unknown_section_rejected(self, tmp_path: Path) -> None:
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(
            """
datasource:
  plugin: csv
"""
        )

        with pytest.raises(ValidationError):
            load_settings(config_file)
