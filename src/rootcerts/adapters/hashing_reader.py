"""Pass-through reader that hashes everything read from the wrapped stream."""

from __future__ import annotations

import hashlib
from collections.abc import Iterator
from typing import BinaryIO


class HashingReader:
    """
    Wrap a binary stream and feed every byte read into a digest.

    The parser reads lines through this wrapper; the digest of the whole
    input is available once the stream has been consumed. The hash is only
    used for provenance stamping and never interpreted.

        reader = HashingReader(stream)
        certs = read_trusted_certs(reader)
        reader.hexdigest()
    """

    def __init__(self, stream: BinaryIO, algorithm: str = "sha1") -> None:
        self._stream = stream
        self._hash = hashlib.new(algorithm)
        self.bytes_read = 0

    def _record(self, data: bytes) -> bytes:
        self._hash.update(data)
        self.bytes_read += len(data)
        return data

    def read(self, size: int = -1) -> bytes:
        return self._record(self._stream.read(size))

    def readline(self, size: int = -1) -> bytes:
        return self._record(self._stream.readline(size))

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        line = self.readline()
        if not line:
            raise StopIteration
        return line

    def hexdigest(self) -> str:
        return self._hash.hexdigest()

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> HashingReader:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
