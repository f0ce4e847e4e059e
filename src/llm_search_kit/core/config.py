"""Shared configuration primitives.

This module provides the configuration models shared by every component
(logging, retry policies) and the helpers used to load configuration files.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

_DOTENV_LOADED = False


def _load_env_once() -> None:
    """Load environment variables from a .env file exactly once."""

    global _DOTENV_LOADED
    if not _DOTENV_LOADED:
        load_dotenv()
        _DOTENV_LOADED = True


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in configuration data."""

    if isinstance(data, str):
        return os.path.expandvars(data)
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    return data


def load_config_data(path: str | Path) -> dict[str, Any]:
    """Read a YAML or JSON configuration file into a dictionary.

    The format is chosen from the file suffix (``.json`` is JSON, anything
    else is parsed as YAML). Environment variables are expanded in every
    string value.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file cannot be parsed
    """
    _load_env_once()
    config_path = Path(path)
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, encoding="utf-8") as handle:
        if config_path.suffix.lower() == ".json":
            try:
                config_data = json.load(handle)
            except json.JSONDecodeError as exc:
                raise ValueError(f"Invalid JSON in config file: {exc}") from exc
        else:
            try:
                config_data = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                raise ValueError(f"Invalid YAML in config file: {exc}") from exc

    if not config_data:
        return {}
    if not isinstance(config_data, dict):
        raise ValueError(f"Config file must contain a mapping, got {type(config_data).__name__}")

    return _expand_env_vars(config_data)


class RetryPolicyConfig(BaseModel):
    """Configuration for retry behaviour of a single provider."""

    max_attempts: int = Field(
        default=1,
        ge=1,
        description="Maximum number of attempts (including the first request)",
    )
    backoff_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Delay in seconds before retrying",
    )
    backoff_multiplier: float = Field(
        default=1.0,
        ge=1.0,
        description="Multiplier applied to the delay after each failure (1.0 = fixed delay)",
    )
    max_backoff_seconds: float = Field(
        default=30.0,
        ge=0.0,
        description="Maximum delay cap between retries",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Log level"
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format (file handler)",
    )
    log_file: str | None = Field(default=None, description="Log file path")
    max_bytes: int = Field(default=10485760, description="Max log file size (10MB)")
    backup_count: int = Field(default=5, description="Number of backup files")

    @field_validator("level", mode="before")
    @classmethod
    def normalise_level(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value
