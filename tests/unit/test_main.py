"""
Unit tests for the main module — composition root and command line.

Tests verify structlog configuration, flag handling and the wiring logic
without making real HTTP calls (respx stands in for the download).
"""

from __future__ import annotations

from pathlib import Path

import httpx
import pytest
import respx
import structlog

from rootcerts import __version__
from rootcerts.adapters.file_io import FileCertdataSource
from rootcerts.adapters.http_client import DEFAULT_CERTDATA_URL, HttpCertdataSource
from rootcerts.config import AppSettings
from rootcerts.main import (
    _create_source,
    apply_overrides,
    build_arg_parser,
    configure_structlog,
    main,
)
from tests.conftest import SAMPLE_SHA1, fixture_path


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("DOWNLOAD__ENABLED", "DOWNLOAD__URL", "OUTPUT__SOURCE", "OUTPUT__TARGET", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def _settings(*argv: str) -> AppSettings:
    return apply_overrides(AppSettings(_env_file=None), build_arg_parser().parse_args(list(argv)))


# ─────────────────────── structlog ───────────────────────


class TestConfigureStructlog:
    """Verify structlog configuration function."""

    def test_configure_structlog_sets_log_level(self) -> None:
        """
        GIVEN log_level="WARNING"
        WHEN configure_structlog is called
        THEN structlog is configured (no exception raised).
        """
        configure_structlog("WARNING")
        log = structlog.get_logger()
        assert log is not None

    def test_configure_structlog_invalid_level_falls_back(self) -> None:
        """
        GIVEN an invalid log_level string
        WHEN configure_structlog is called
        THEN it falls back to INFO (no crash).
        """
        configure_structlog("NONEXISTENT")
        log = structlog.get_logger()
        assert log is not None

    def test_logs_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_structlog("INFO")
        structlog.get_logger().info("probe.event")
        captured = capsys.readouterr()
        assert "probe.event" in captured.err
        assert captured.out == ""


# ─────────────────────── Flags ───────────────────────


class TestApplyOverrides:
    """
    GIVEN settings loaded from the environment
    WHEN command-line flags are applied
    THEN only the flags that were given take effect.
    """

    def test_no_flags_keeps_settings(self) -> None:
        assert _settings() == AppSettings(_env_file=None)

    def test_download_flags(self) -> None:
        settings = _settings("--download", "--url", "https://mirror.example.com/certdata.txt")
        assert settings.download.enabled is True
        assert settings.download.url == "https://mirror.example.com/certdata.txt"
        assert settings.download.timeout_seconds == 60

    def test_source_and_target(self) -> None:
        settings = _settings("--source", "certdata.txt", "--target", "out.py")
        assert settings.output.source == "certdata.txt"
        assert settings.output.target == "out.py"

    def test_log_level_flag_is_validated(self) -> None:
        assert _settings("--log-level", "warning").log_level == "WARNING"

    def test_flags_override_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("OUTPUT__TARGET", "from_env.py")
        settings = apply_overrides(
            AppSettings(_env_file=None), build_arg_parser().parse_args(["--target", "from_flag.py"])
        )
        assert settings.output.target == "from_flag.py"


class TestCreateSource:
    """The source adapter follows download.enabled."""

    def test_file_source_by_default(self) -> None:
        assert isinstance(_create_source(_settings()), FileCertdataSource)

    def test_http_source_when_downloading(self) -> None:
        assert isinstance(_create_source(_settings("--download")), HttpCertdataSource)


# ─────────────────────── main() ───────────────────────


class TestMain:
    """
    GIVEN command-line arguments
    WHEN main() runs
    THEN the module is generated, or the process exits with status 1.
    """

    def test_generates_module_from_file(self, tmp_path: Path) -> None:
        target = tmp_path / "rootcerts_data.py"

        main(
            [
                "--source", str(fixture_path("certdata_sample.txt")),
                "--target", str(target),
                "--log-level", "WARNING",
            ]
        )

        source = target.read_text(encoding="utf-8")
        assert f"Input file SHA1: {SAMPLE_SHA1}" in source
        assert "label='Example Server Root'" in source

    @respx.mock
    def test_generates_module_from_download(self, tmp_path: Path) -> None:
        respx.get(DEFAULT_CERTDATA_URL).mock(
            return_value=httpx.Response(
                200, content=fixture_path("certdata_sample.txt").read_bytes()
            )
        )
        target = tmp_path / "rootcerts_data.py"

        main(["--download", "--target", str(target), "--log-level", "ERROR"])

        assert f"Input file SHA1: {SAMPLE_SHA1}" in target.read_text(encoding="utf-8")

    def test_missing_source_exits_with_failure(
        self, tmp_path: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--source", str(tmp_path / "missing.txt"), "--target", str(tmp_path / "x.py")])

        assert exc_info.value.code == 1
        assert "pipeline.failed" in capsys.readouterr().err
        assert not (tmp_path / "x.py").exists()

    def test_malformed_input_exits_with_failure(self, tmp_path: Path) -> None:
        broken = tmp_path / "certdata.txt"
        broken.write_text("no sentinel\n")

        with pytest.raises(SystemExit) as exc_info:
            main(["--source", str(broken), "--target", str(tmp_path / "x.py")])

        assert exc_info.value.code == 1

    def test_configuration_error_exits_with_failure(
        self, capsys: pytest.CaptureFixture[str]
    ) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--log-level", "LOUD"])

        assert exc_info.value.code == 1
        assert "FATAL: Configuration error" in capsys.readouterr().err

    def test_version_flag(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert f"rootcerts {__version__}" in capsys.readouterr().out
