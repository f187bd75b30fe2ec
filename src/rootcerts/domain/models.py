"""
Domain models — immutable value objects for certdata parsing.

  FieldToken         one `FIELD TYPE value` line (or multiline block)
  CertdataObject     sealed field → value mapping bounded by CKA_CLASS
  TrustCode          closed vocabulary of NSS trust codes
  TrustLevel         purposes a root is trusted to issue certificates for
  TrustedCertificate terminal artifact: label + DER + decoded cert + trust
  CertBundle         all trusted certificates plus the input SHA1

All models are frozen dataclasses or enums.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum, unique
from typing import TypeAlias

from cryptography import x509

from rootcerts.errors import UnknownTrustCodeError

# ─────────────────────── certdata.txt vocabulary ───────────────────────

CKA_CLASS = "CKA_CLASS"
CKA_LABEL = "CKA_LABEL"
CKA_VALUE = "CKA_VALUE"
CKA_TRUST_SERVER_AUTH = "CKA_TRUST_SERVER_AUTH"
CKA_TRUST_EMAIL_PROTECTION = "CKA_TRUST_EMAIL_PROTECTION"
CKA_TRUST_CODE_SIGNING = "CKA_TRUST_CODE_SIGNING"

CKO_CERTIFICATE = "CKO_CERTIFICATE"
CKO_NSS_TRUST = "CKO_NSS_TRUST"

FieldValue: TypeAlias = str | bytes
CertdataObject: TypeAlias = Mapping[str, FieldValue]


@dataclass(frozen=True, slots=True)
class FieldToken:
    """
    A single value scanned from certdata.txt.

    `value` is bytes for MULTILINE_OCTAL blocks and str for everything else.
    """

    field: str
    type_tag: str
    value: FieldValue = ""


@unique
class TrustCode(Enum):
    """The only trust codes a CKO_NSS_TRUST object may carry."""

    TRUSTED_DELEGATOR = "CKT_NSS_TRUSTED_DELEGATOR"
    MUST_VERIFY_TRUST = "CKT_NSS_MUST_VERIFY_TRUST"
    NOT_TRUSTED = "CKT_NSS_NOT_TRUSTED"

    @classmethod
    def parse(cls, raw: FieldValue | None, label: str = "") -> TrustCode:
        """
        Convert a raw field value into a TrustCode.

        Anything outside the vocabulary (including a missing field) raises
        UnknownTrustCodeError: it means the file format has changed.
        """
        try:
            return cls(raw)
        except ValueError:
            raise UnknownTrustCodeError(
                f"unknown trust level {raw!r} referenced by {label!r}"
            ) from None


@dataclass(frozen=True, slots=True)
class TrustLevel:
    """Purposes for which a certificate is trusted to act as a CA."""

    server: bool = False
    email: bool = False
    code_signing: bool = False

    @property
    def is_trusted(self) -> bool:
        return self.server or self.email or self.code_signing

    @property
    def flags(self) -> int:
        """Bitmask form: server=1, email=2, code signing=4."""
        return int(self.server) | int(self.email) << 1 | int(self.code_signing) << 2


@dataclass(frozen=True, slots=True)
class TrustedCertificate:
    """
    A root certificate that is trusted for at least one purpose.

    `raw_bytes` holds the DER exactly as found in CKA_VALUE; the decoded form
    is produced eagerly during extraction so malformed entries never get here.
    """

    label: str
    raw_bytes: bytes = field(repr=False)
    parsed_certificate: x509.Certificate = field(repr=False, compare=False)
    trust: TrustLevel

    @property
    def serial_number(self) -> int:
        return self.parsed_certificate.serial_number

    @property
    def issuer(self) -> str:
        return self.parsed_certificate.issuer.rfc4514_string()

    @property
    def subject(self) -> str:
        return self.parsed_certificate.subject.rfc4514_string()


@dataclass(frozen=True, slots=True)
class CertBundle:
    """
    Everything the code generator needs from one parsing run.

    `source_sha1` is the hex SHA1 of every input byte, stamped into the
    generated module for provenance.
    """

    certificates: tuple[TrustedCertificate, ...]
    source_sha1: str

    def by_trust(self, trust: TrustLevel) -> list[TrustedCertificate]:
        """Certificates whose trust includes every purpose set in `trust`."""
        wanted = trust.flags
        return [c for c in self.certificates if c.trust.flags & wanted == wanted]
