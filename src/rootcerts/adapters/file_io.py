"""
Local file adapters — certdata source and generated module writer.

A path of None or "-" means stdin (source) / stdout (writer), so the tool
composes in shell pipelines:

    curl -s $URL | rootcerts > rootcerts_data.py
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import BinaryIO

import structlog
from railway import ErrorCode
from railway.result import Result

log = structlog.get_logger()

STDIO = "-"


def _is_stdio(path: str | Path | None) -> bool:
    return path is None or str(path) == STDIO


class FileCertdataSource:
    """
    Open a certdata.txt file (or stdin) for binary reading.

    Implements the CertdataSource port.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = None if _is_stdio(path) else Path(path)  # type: ignore[arg-type]

    def open(self) -> Result[BinaryIO]:
        """
        Returns Result[BinaryIO] on success,
        or Result.failure(TECHNICAL_ERROR, ...) if the file cannot be opened.
        """
        if self._path is None:
            log.info("source.stdin")
            return Result.success(sys.stdin.buffer)
        path = self._path
        return Result.from_computation(
            lambda: path.open("rb"),
            ErrorCode.TECHNICAL_ERROR,
            f"Failed to open certdata source {path}",
        ).peek(lambda _: log.info("source.opened", path=str(path)))


class FileModuleWriter:
    """
    Write generated module source to a file (or stdout).

    Implements the ModuleWriter port. Returns the number of characters written.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = None if _is_stdio(path) else Path(path)  # type: ignore[arg-type]

    def write(self, source: str) -> Result[int]:
        return Result.from_computation(
            lambda: self._do_write(source),
            ErrorCode.TECHNICAL_ERROR,
            f"Failed to write generated module to {self._path or 'stdout'}",
        )

    def _do_write(self, source: str) -> int:
        if self._path is None:
            written = sys.stdout.write(source)
            sys.stdout.flush()
            return written
        with self._path.open("w", encoding="utf-8") as fh:
            written = fh.write(source)
        log.info("writer.complete", path=str(self._path), chars=written)
        return written
