"""
Fatal certdata format errors.

Raised inside the parsing core and converted into Result failures at the
adapter boundary. Every error remembers the input line where it was
detected, so upstream format drift can be located quickly.

Per-record problems (missing trust declaration, explicit distrust,
undecodable certificate) are NOT errors: they are skipped by policy.
"""

from __future__ import annotations


class CertdataFormatError(Exception):
    """The input does not follow the certdata.txt dialect this parser understands."""

    def __init__(self, message: str, line_number: int | None = None) -> None:
        self.message = message
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class MissingBeginDataError(CertdataFormatError):
    """Stream ended before the BEGINDATA marker was found."""


class UnterminatedMultilineError(CertdataFormatError):
    """A MULTILINE_* value was not closed by an END line."""


class MalformedOctalError(CertdataFormatError):
    r"""A MULTILINE_OCTAL line contains something other than \ooo groups."""


class UnknownTrustCodeError(CertdataFormatError):
    """A trust declaration uses a code outside the known vocabulary."""


class DuplicateTrustDeclarationError(CertdataFormatError):
    """More than one trust declaration references the same label."""
