"""
Unit tests for configuration — pydantic-settings loading and validation.

The .env file is disabled (_env_file=None) so only the variables set by
each test are seen.
"""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from rootcerts.adapters.http_client import DEFAULT_CERTDATA_URL
from rootcerts.config import AppSettings, DownloadSettings

_ENV_VARS = (
    "DOWNLOAD__ENABLED",
    "DOWNLOAD__URL",
    "DOWNLOAD__TIMEOUT_SECONDS",
    "OUTPUT__SOURCE",
    "OUTPUT__TARGET",
    "LOG_LEVEL",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestDefaults:
    """
    GIVEN no environment variables
    WHEN AppSettings is created
    THEN it reads stdin, writes stdout and does not download.
    """

    def test_defaults(self) -> None:
        settings = AppSettings(_env_file=None)

        assert settings.download.enabled is False
        assert settings.download.url == DEFAULT_CERTDATA_URL
        assert settings.download.timeout_seconds == 60
        assert settings.output.source == "-"
        assert settings.output.target == "-"
        assert settings.log_level == "INFO"


class TestEnvironmentOverrides:
    """Nested settings map from DOWNLOAD__* / OUTPUT__* variables."""

    def test_nested_variables(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOWNLOAD__ENABLED", "true")
        monkeypatch.setenv("DOWNLOAD__URL", "https://mirror.example.com/certdata.txt")
        monkeypatch.setenv("DOWNLOAD__TIMEOUT_SECONDS", "5")
        monkeypatch.setenv("OUTPUT__TARGET", "rootcerts_data.py")

        settings = AppSettings(_env_file=None)

        assert settings.download.enabled is True
        assert settings.download.url == "https://mirror.example.com/certdata.txt"
        assert settings.download.timeout_seconds == 5
        assert settings.output.target == "rootcerts_data.py"
        assert settings.output.source == "-"

    def test_log_level_is_normalized(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", " debug ")
        assert AppSettings(_env_file=None).log_level == "DEBUG"


class TestValidation:
    """Invalid values fail at startup."""

    def test_unknown_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError, match="Unknown log level"):
            AppSettings(_env_file=None)

    def test_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValidationError):
            DownloadSettings(timeout_seconds=0)
