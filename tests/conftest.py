"""
Shared test fixtures and helpers for the rootcerts test suite.

Provides path resolution for the certdata.txt sample under fixtures/ and a
helper that builds small in-memory certdata streams line by line.

The sample (certdata_sample.txt) holds, in order:
  - the builtin root list object
  - "Example Server Root"      trusted for server auth only
  - "Example Réseau Root"      trusted for all three purposes (escaped label)
  - "Example Distrusted Root"  vetoed by a NOT_TRUSTED vote
  - "Example Orphan Root"      certificate with no trust object
  - "Example Verify Only Root" MUST_VERIFY_TRUST everywhere
  - "Example Broken Root"      trusted, but its DER does not decode
"""

from __future__ import annotations

import io
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

FIXTURES_DIR = Path(__file__).parent / "fixtures"

SAMPLE_CERTDATA = "certdata_sample.txt"
SAMPLE_SHA1 = "1c4791d807b0d9c7b4d2ee0a18e6936a739ed750"
SERVER_ROOT = "Example Server Root"
RESEAU_ROOT = "Example Réseau Root"


@pytest.fixture(autouse=True)
def _reset_structlog() -> Iterator[None]:
    """Undo configure_structlog() so no test keeps logging into a closed capture stream."""
    yield
    structlog.reset_defaults()


@pytest.fixture()
def fixtures_dir() -> Path:
    """Return the absolute path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture()
def sample_bytes() -> bytes:
    """Raw bytes of the certdata.txt sample."""
    return fixture_path(SAMPLE_CERTDATA).read_bytes()


def fixture_path(filename: str) -> Path:
    """
    Resolve the absolute path to a test fixture file.

    Raises FileNotFoundError if the fixture does not exist.
    """
    path = FIXTURES_DIR / filename
    if not path.exists():
        raise FileNotFoundError(f"Test fixture not found: {path}")
    return path


def certdata_stream(*lines: str, begin: bool = True) -> io.BytesIO:
    """
    Build a binary certdata stream from lines.

    A BEGINDATA line is prepended unless `begin` is False.
    """
    body = (["BEGINDATA"] if begin else []) + list(lines)
    return io.BytesIO("".join(f"{line}\n" for line in body).encode("utf-8"))


def trust_object(
    label: str,
    server: str = "CKT_NSS_TRUSTED_DELEGATOR",
    email: str = "CKT_NSS_MUST_VERIFY_TRUST",
    code: str = "CKT_NSS_MUST_VERIFY_TRUST",
) -> dict[str, str]:
    """A CKO_NSS_TRUST object as the scanner would assemble it."""
    return {
        "CKA_CLASS": "CKO_NSS_TRUST",
        "CKA_LABEL": label,
        "CKA_TRUST_SERVER_AUTH": server,
        "CKA_TRUST_EMAIL_PROTECTION": email,
        "CKA_TRUST_CODE_SIGNING": code,
    }
