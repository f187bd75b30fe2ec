"""
Configuration — typed, validated settings loaded from environment/.env.

Uses pydantic-settings to:
  - Load from environment variables
  - Fall back to a .env file
  - Validate types and constraints at startup

Sub-settings are plain BaseModel classes populated by AppSettings via
env_nested_delimiter="__", so DOWNLOAD__URL maps to download.url,
OUTPUT__TARGET maps to output.target, etc. Command-line flags (see
rootcerts.main) override whatever is loaded here.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from rootcerts.adapters.http_client import DEFAULT_CERTDATA_URL

# Resolve the .env file relative to the project root (two levels above this file),
# so settings load correctly regardless of the working directory at runtime.
_ENV_FILE = Path(__file__).parent.parent.parent / ".env"


class DownloadSettings(BaseModel):
    """Where and how to fetch certdata.txt when downloading is enabled."""

    enabled: bool = Field(default=False, description="Download instead of reading a local source")
    url: str = Field(default=DEFAULT_CERTDATA_URL, description="certdata.txt URL")
    timeout_seconds: int = Field(default=60, ge=1, description="HTTP timeout per attempt")


class OutputSettings(BaseModel):
    """
    Local input/output locations.

    "-" means stdin for `source` and stdout for `target`.
    """

    source: str = Field(default="-", description="certdata.txt path when not downloading")
    target: str = Field(default="-", description="Path of the generated Python module")


class AppSettings(BaseSettings):
    """
    Root application settings — aggregates all sub-settings.

    Load order (highest priority first):
      1. Environment variables
      2. .env file
      3. Default values
    """

    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    download: DownloadSettings = Field(default_factory=DownloadSettings)
    output: OutputSettings = Field(default_factory=OutputSettings)
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Accept standard logging level names only (case-insensitive)."""
        level = value.strip().upper()
        if not isinstance(logging.getLevelNamesMapping().get(level), int):
            raise ValueError(f"Unknown log level: {value!r}")
        return level
