"""
Unit tests for the local file adapters — certdata source and module writer.
"""

from __future__ import annotations

import io
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from railway import ErrorCode, ResultAssertions

from rootcerts.adapters.file_io import FileCertdataSource, FileModuleWriter
from tests.conftest import fixture_path


class TestFileCertdataSource:
    """
    GIVEN a certdata path (or "-")
    WHEN open() is called
    THEN a binary stream is returned, or TECHNICAL_ERROR if it cannot be opened.
    """

    def test_opens_file_in_binary_mode(self) -> None:
        path = fixture_path("certdata_sample.txt")

        stream = ResultAssertions.assert_success(FileCertdataSource(path).open())

        with stream:
            assert stream.read() == path.read_bytes()

    def test_accepts_string_path(self) -> None:
        path = str(fixture_path("certdata_sample.txt"))
        stream = ResultAssertions.assert_success(FileCertdataSource(path).open())
        stream.close()

    @pytest.mark.parametrize("path", [None, "-"])
    def test_dash_or_none_reads_stdin(self, monkeypatch: pytest.MonkeyPatch, path: str | None) -> None:
        stdin = MagicMock()
        stdin.buffer = io.BytesIO(b"BEGINDATA\n")
        monkeypatch.setattr(sys, "stdin", stdin)

        stream = ResultAssertions.assert_success(FileCertdataSource(path).open())

        assert stream.read() == b"BEGINDATA\n"

    def test_missing_file_is_technical_error(self, tmp_path: Path) -> None:
        missing = tmp_path / "nope.txt"

        result = FileCertdataSource(missing).open()

        error = ResultAssertions.assert_failure(result, ErrorCode.TECHNICAL_ERROR)
        ResultAssertions.assert_failure_caused_by(result, FileNotFoundError)
        assert str(missing) in error.message


class TestFileModuleWriter:
    """
    GIVEN generated module source
    WHEN write() is called
    THEN it lands in the target file (UTF-8) or on stdout.
    """

    def test_writes_utf8_file(self, tmp_path: Path) -> None:
        target = tmp_path / "rootcerts_data.py"
        source = 'LABEL = "Example Réseau Root"\n'

        written = ResultAssertions.assert_success(FileModuleWriter(target).write(source))

        assert written == len(source)
        assert target.read_text(encoding="utf-8") == source

    def test_overwrites_existing_file(self, tmp_path: Path) -> None:
        target = tmp_path / "rootcerts_data.py"
        target.write_text("old contents, much longer than the new ones\n")

        ResultAssertions.assert_success(FileModuleWriter(str(target)).write("new\n"))

        assert target.read_text() == "new\n"

    def test_dash_writes_stdout(self, capsys: pytest.CaptureFixture[str]) -> None:
        written = ResultAssertions.assert_success(FileModuleWriter("-").write("X = 1\n"))

        assert written == 6
        assert capsys.readouterr().out == "X = 1\n"

    def test_unwritable_target_is_technical_error(self, tmp_path: Path) -> None:
        target = tmp_path / "missing-dir" / "rootcerts_data.py"

        result = FileModuleWriter(target).write("X = 1\n")

        ResultAssertions.assert_failure(result, ErrorCode.TECHNICAL_ERROR)
        ResultAssertions.assert_failure_caused_by(result, OSError)
        ResultAssertions.assert_failure_message_contains(result, "rootcerts_data.py")
