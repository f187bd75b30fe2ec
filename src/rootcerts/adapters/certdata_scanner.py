"""
certdata.txt scanner — line tokenizer and object assembler.

The NSS certdata.txt dump is a line-oriented text format:

    # comment
    BEGINDATA
    CKA_CLASS CK_OBJECT_CLASS CKO_CERTIFICATE
    CKA_LABEL UTF8 "GlobalSign Root CA"
    CKA_VALUE MULTILINE_OCTAL
    \060\202\003\165\060\202\002\135\240\003\002\001\002\002\013\004
    END

Two layers live here:
  1. scan_value()  → FieldToken per `FIELD TYPE [value]` line or multiline block
  2. scan_object() → sealed field → value mapping, one per CKA_CLASS run

Objects have no explicit start marker: each CKA_CLASS token starts a new
object, so the assembler keeps that boundary token pending until the next
call. Nothing is buffered beyond that one token.

The format changes occasionally. Anything unexpected is a fatal
CertdataFormatError carrying the line number; the scanner never tries to
resynchronize.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator
from types import MappingProxyType

import structlog

from rootcerts.domain.models import CKA_CLASS, CertdataObject, FieldToken, FieldValue
from rootcerts.errors import (
    CertdataFormatError,
    MalformedOctalError,
    MissingBeginDataError,
    UnterminatedMultilineError,
)

log = structlog.get_logger()

BEGIN_DATA = "BEGINDATA"
MULTILINE_END = "END"
MULTILINE_PREFIX = "MULTILINE"
UTF8_TYPE = "UTF8"

_OCTAL_GROUP = re.compile(r"\\([0-7]{3})")

# Escapes understood inside UTF8 "quoted" values.
_SIMPLE_ESCAPES = {
    "a": 0x07, "b": 0x08, "f": 0x0C, "n": 0x0A, "r": 0x0D, "t": 0x09,
    "v": 0x0B, "\\": 0x5C, "'": 0x27, '"': 0x22,
}


# ─────────────────────── Value decoders ───────────────────────


def unquote(quoted: str) -> str:
    r"""
    Decode a double-quoted certdata UTF8 value.

    Supports \\ \" \n \t (and friends), \ooo octal bytes, \xhh bytes,
    \uXXXX and \UXXXXXXXX. Octal and hex escapes are raw bytes, and the
    whole result must be valid UTF-8. Raises ValueError otherwise.
    """
    if len(quoted) < 2 or quoted[0] != '"' or quoted[-1] != '"':
        raise ValueError(f"not a quoted string: {quoted!r}")
    body = quoted[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == '"':
            raise ValueError("unescaped quote inside string")
        if ch != "\\":
            out += ch.encode("utf-8")
            i += 1
            continue
        if i + 1 >= len(body):
            raise ValueError("dangling backslash")
        esc = body[i + 1]
        if esc in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[esc])
            i += 2
        elif esc in "01234567":
            digits = body[i + 1 : i + 4]
            if len(digits) != 3 or any(d not in "01234567" for d in digits):
                raise ValueError(f"bad octal escape {digits!r}")
            number = int(digits, 8)
            if number > 0xFF:
                raise ValueError(f"octal escape out of range {digits!r}")
            out.append(number)
            i += 4
        elif esc == "x":
            out.append(int(_hex_digits(body, i + 2, 2), 16))
            i += 4
        elif esc in "uU":
            width = 4 if esc == "u" else 8
            out += chr(int(_hex_digits(body, i + 2, width), 16)).encode("utf-8")
            i += 2 + width
        else:
            raise ValueError(f"unknown escape \\{esc}")
    return out.decode("utf-8")


def _hex_digits(text: str, start: int, width: int) -> str:
    digits = text[start : start + width]
    if len(digits) != width or any(d not in "0123456789abcdefABCDEF" for d in digits):
        raise ValueError(f"bad hex escape {digits!r}")
    return digits


def decode_octal_line(line: str) -> bytes:
    r"""
    Decode one MULTILINE_OCTAL line of back-to-back \ooo groups.

    Raises ValueError on anything else: stray characters, short groups or
    values above \377.
    """
    if len(line) % 4:
        raise ValueError(f"octal line length {len(line)} is not a multiple of 4")
    out = bytearray()
    for offset in range(0, len(line), 4):
        group = _OCTAL_GROUP.fullmatch(line, offset, offset + 4)
        if group is None:
            raise ValueError(f"malformed octal group {line[offset:offset + 4]!r}")
        number = int(group.group(1), 8)
        if number > 0xFF:
            raise ValueError(f"octal group {group.group(0)!r} exceeds one byte")
        out.append(number)
    return bytes(out)


def encode_octal(data: bytes, per_line: int = 16) -> list[str]:
    r"""Encode bytes back into certdata's \ooo line form (used by tests and tooling)."""
    return [
        "".join(f"\\{b:03o}" for b in data[i : i + per_line])
        for i in range(0, len(data), per_line)
    ]


# ─────────────────────── Scanner ───────────────────────


class CertdataScanner:
    """
    Pull-based tokenizer and object assembler over one certdata stream.

    Accepts any iterable of lines, bytes (decoded as UTF-8) or str.
    One instance scans exactly one stream; it holds no shared state.

        scanner = CertdataScanner(stream)
        while scanner.scan_object():
            handle(scanner.object)
        if scanner.object_error:
            raise scanner.object_error
    """

    def __init__(self, stream: Iterable[bytes] | Iterable[str]) -> None:
        self._lines: Iterator[bytes | str] = iter(stream)
        self._line_number = 0
        self._skipped_header = False
        self._value: FieldToken | None = None
        self._value_error: CertdataFormatError | None = None
        self._pending: FieldToken | None = None
        self._object: CertdataObject | None = None
        self._object_error: CertdataFormatError | None = None

    # ─────────── accessors ───────────

    @property
    def line_number(self) -> int:
        """Number of the last line read."""
        return self._line_number

    @property
    def value(self) -> FieldToken:
        """The token produced by the last successful scan_value()."""
        if self._value is None:
            raise LookupError("scan_value() has not produced a token yet")
        return self._value

    @property
    def value_error(self) -> CertdataFormatError | None:
        """The fatal error that stopped scan_value(), or None at a clean end of stream."""
        return self._value_error

    @property
    def object(self) -> CertdataObject:
        """The object produced by the last successful scan_object()."""
        if self._object is None:
            raise LookupError("scan_object() has not produced an object yet")
        return self._object

    @property
    def object_error(self) -> CertdataFormatError | None:
        """The fatal error that stopped scan_object(), or None at a clean end of stream."""
        return self._object_error

    # ─────────── tokenizer ───────────

    def scan_value(self) -> bool:
        """
        Advance to the next token.

        Returns False at end of stream or on a fatal error (see value_error).
        Errors are sticky: once one is recorded no more tokens are produced.
        """
        if self._value_error is not None:
            return False
        try:
            token = self._next_token()
        except CertdataFormatError as e:
            self._value_error = e
            log.debug("scanner.error", line=e.line_number, error=e.message)
            return False
        if token is None:
            return False
        self._value = token
        return True

    def _next_token(self) -> FieldToken | None:
        if not self._skipped_header:
            self._skip_header()

        while (line := self._read_line()) is not None:
            if not line or line.startswith("#"):
                continue
            parts = line.split(" ", 2)
            if len(parts) < 2:
                continue
            field, type_tag = parts[0], parts[1]
            inline = parts[2] if len(parts) > 2 else None
            return FieldToken(field, type_tag, self._decode_value(type_tag, inline))
        return None

    def _decode_value(self, type_tag: str, inline: str | None) -> FieldValue:
        if type_tag == UTF8_TYPE and inline is not None:
            try:
                return unquote(inline)
            except ValueError:
                return inline[1:-1]
        if type_tag.startswith(MULTILINE_PREFIX):
            encoding = type_tag[len(MULTILINE_PREFIX) + 1 :]
            if encoding == "OCTAL":
                return self._read_multiline_octal()
            return "\n".join(self._read_multiline())
        return inline if inline is not None else ""

    def _skip_header(self) -> None:
        while (line := self._read_line()) is not None:
            if line == BEGIN_DATA:
                self._skipped_header = True
                log.debug("scanner.begindata_found", line=self._line_number)
                return
        raise MissingBeginDataError(
            "BEGINDATA line not found in certdata input", self._line_number
        )

    def _read_line(self) -> str | None:
        raw = next(self._lines, None)
        if raw is None:
            return None
        self._line_number += 1
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as e:
                raise CertdataFormatError(f"invalid UTF-8: {e}", self._line_number) from e
        return raw.rstrip("\n").removesuffix("\r")

    def _read_multiline(self) -> Iterator[str]:
        start = self._line_number
        while (line := self._read_line()) is not None:
            if line == MULTILINE_END:
                return
            yield line
        raise UnterminatedMultilineError(
            f"unexpected end of input in multiline value started at line {start}",
            self._line_number,
        )

    def _read_multiline_octal(self) -> bytes:
        data = bytearray()
        for line in self._read_multiline():
            try:
                data += decode_octal_line(line)
            except ValueError as e:
                raise MalformedOctalError(str(e), self._line_number) from e
        return bytes(data)

    # ─────────── assembler ───────────

    def scan_object(self) -> bool:
        """
        Advance to the next complete object.

        Tokens before the first CKA_CLASS are discarded. An object ends when
        the next CKA_CLASS token arrives; that token is kept pending and seeds
        the following object. The object still open at end of stream is
        returned once. Returns False at end of stream or on a fatal error
        (see object_error).
        """
        self._object_error = None
        token, self._pending = self._pending, None

        while token is None or token.field != CKA_CLASS:
            if not self.scan_value():
                self._object_error = self._value_error
                return False
            token = self.value

        fields: dict[str, FieldValue] = {token.field: token.value}
        while self.scan_value():
            token = self.value
            if token.field == CKA_CLASS:
                self._pending = token
                break
            fields[token.field] = token.value
        else:
            if self._value_error is not None:
                self._object_error = self._value_error
                return False

        self._object = MappingProxyType(fields)
        return True

    def __iter__(self) -> Iterator[CertdataObject]:
        """Iterate over objects; raises the recorded error once scanning stops on one."""
        while self.scan_object():
            yield self.object
        if self._object_error is not None:
            raise self._object_error


def read_objects(stream: Iterable[bytes] | Iterable[str]) -> list[CertdataObject]:
    """
    Parse every object from a certdata.txt stream.

    Raises CertdataFormatError if the stream is malformed.
    """
    scanner = CertdataScanner(stream)
    objects = list(scanner)
    log.debug("scanner.complete", objects=len(objects), lines=scanner.line_number)
    return objects
