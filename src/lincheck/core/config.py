# src/lincheck/core/config.py
"""
Configuration schema and loading for lincheck.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction.

Example YAML:
    history:
      path: ./histories/run-42.jsonl
      fsync: false
      correlation: strict
    check:
      adapter: kv
      oracle: wgl
      timeout_seconds: 30
    logging:
      level: INFO
      json_output: false
"""

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from lincheck.contracts.enums import CorrelationPolicy


class HistorySettings(BaseModel):
    """Where the operation history lives and how it is written and read."""

    model_config = {"frozen": True, "extra": "forbid"}

    path: Path | None = Field(
        default=None,
        description="History file (newline-delimited JSON)",
    )
    fsync: bool = Field(
        default=False,
        description="fsync after every record (slower, survives hard crashes); read by HistoryRecorder.from_settings",
    )
    correlation: CorrelationPolicy = Field(
        default=CorrelationPolicy.STRICT,
        description="How replay treats records that break call/return pairing",
    )


class CheckSettings(BaseModel):
    """Which adapter and oracle verify the history, and with what budget."""

    model_config = {"frozen": True, "extra": "forbid"}

    adapter: str = Field(
        default="kv",
        description="Registered adapter supplying the model and parser",
    )
    oracle: str = Field(
        default="wgl",
        description="Registered oracle deciding linearizability",
    )
    timeout_seconds: float | None = Field(
        default=None,
        gt=0,
        description="Oracle time budget; exhaustion yields an inconclusive verdict",
    )

    @field_validator("adapter", "oracle")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("name must not be empty")
        return v.strip()


class LoggingSettings(BaseModel):
    """Log output configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")
    json_output: bool = Field(default=False)

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.upper()
        return v


class LincheckSettings(BaseModel):
    """Top-level lincheck configuration."""

    model_config = {"frozen": True, "extra": "forbid"}

    history: HistorySettings = Field(default_factory=HistorySettings)
    check: CheckSettings = Field(default_factory=CheckSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings(config_path: Path) -> LincheckSettings:
    """Load settings from YAML file with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (LINCHECK_*) - highest priority
    2. Config file
    3. Defaults from Pydantic schema - lowest priority

    Environment variable format: LINCHECK_CHECK__TIMEOUT_SECONDS for nested keys.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated LincheckSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config file doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix="LINCHECK",
        settings_files=[str(config_path)],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config = {k.lower(): _lower_keys(v) for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys}

    return LincheckSettings(**raw_config)


def _lower_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value
