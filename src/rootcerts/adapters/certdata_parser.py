"""
Trusted certificate extraction — trust resolution + X.509 decoding.

Adapter layer — implements the CertdataParser port using:
  - CertdataScanner: certdata.txt tokens → objects
  - cryptography (PyCA): DER decoding of each CKA_VALUE

Pipeline:
  certdata stream
    → read_objects()                    (CKO_* objects, input order)
    → resolve_trust()                   (label → TrustLevel from CKO_NSS_TRUST)
    → extract_trusted_certificates()    (CKO_CERTIFICATE joined on CKA_LABEL)
    → list[TrustedCertificate]

Skip policy: a certificate without a trust declaration, with an explicit
distrust vote, or whose DER cannot be decoded is left out of the result.
Some upstream roots carry encodings the decoder refuses (the EC-ACC root
has a negative serial number), and one such entry must not take the whole
run down. Only format drift is fatal.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import BinaryIO

import structlog
from cryptography import x509
from railway import ErrorCode, FailureDescription
from railway.result import Result

from rootcerts.adapters.certdata_scanner import read_objects
from rootcerts.domain.models import (
    CKA_CLASS,
    CKA_LABEL,
    CKA_TRUST_CODE_SIGNING,
    CKA_TRUST_EMAIL_PROTECTION,
    CKA_TRUST_SERVER_AUTH,
    CKA_VALUE,
    CKO_CERTIFICATE,
    CKO_NSS_TRUST,
    CertdataObject,
    TrustCode,
    TrustedCertificate,
    TrustLevel,
)
from rootcerts.errors import CertdataFormatError, DuplicateTrustDeclarationError

log = structlog.get_logger()


def _label(obj: CertdataObject) -> str:
    label = obj.get(CKA_LABEL, "")
    return label if isinstance(label, str) else label.decode("utf-8", "replace")


# ─────────────────────── Trust Resolution ───────────────────────


def resolve_trust(objects: Iterable[CertdataObject]) -> dict[str, TrustLevel]:
    """
    Build the label → TrustLevel map from CKO_NSS_TRUST objects.

    Rules:
      - every purpose field must hold a known TrustCode, else the whole run
        fails with UnknownTrustCodeError
      - one NOT_TRUSTED vote discards the declaration for every purpose
      - a purpose is trusted iff its code is TRUSTED_DELEGATOR
        (MUST_VERIFY_TRUST counts as untrusted)
      - labels with no trusted purpose are omitted
      - a label may be declared only once (DuplicateTrustDeclarationError)
    """
    trusted: dict[str, TrustLevel] = {}
    declared: set[str] = set()

    for obj in objects:
        if obj.get(CKA_CLASS) != CKO_NSS_TRUST:
            continue
        label = _label(obj)
        if label in declared:
            raise DuplicateTrustDeclarationError(
                f"label {label!r} has more than one trust declaration"
            )
        declared.add(label)

        server = TrustCode.parse(obj.get(CKA_TRUST_SERVER_AUTH), label)
        email = TrustCode.parse(obj.get(CKA_TRUST_EMAIL_PROTECTION), label)
        code = TrustCode.parse(obj.get(CKA_TRUST_CODE_SIGNING), label)

        # Distrust for one purpose means distrust for all.
        if TrustCode.NOT_TRUSTED in (server, email, code):
            log.debug("trust.declaration_vetoed", label=label)
            continue

        trust = TrustLevel(
            server=server is TrustCode.TRUSTED_DELEGATOR,
            email=email is TrustCode.TRUSTED_DELEGATOR,
            code_signing=code is TrustCode.TRUSTED_DELEGATOR,
        )
        if trust.is_trusted:
            trusted[label] = trust

    log.debug("trust.resolved", declarations=len(declared), trusted=len(trusted))
    return trusted


# ─────────────────────── Certificate Extraction ───────────────────────


def _decode_certificate(obj: CertdataObject, label: str) -> x509.Certificate | None:
    """Decode CKA_VALUE as DER, or None if it is missing or unparseable."""
    der = obj.get(CKA_VALUE)
    if not isinstance(der, bytes) or not der:
        log.info("extractor.certificate_skipped", label=label, reason="no DER value")
        return None
    try:
        return x509.load_der_x509_certificate(der)
    except ValueError as e:
        log.info("extractor.certificate_skipped", label=label, reason=str(e))
        return None


def extract_trusted_certificates(
    objects: Iterable[CertdataObject],
    trust: dict[str, TrustLevel],
) -> list[TrustedCertificate]:
    """
    Join CKO_CERTIFICATE objects against the trust map, preserving input order.

    Certificates with no trusted label or undecodable DER are skipped.
    """
    certs: list[TrustedCertificate] = []
    for obj in objects:
        if obj.get(CKA_CLASS) != CKO_CERTIFICATE:
            continue
        label = _label(obj)
        level = trust.get(label)
        if level is None:
            continue
        parsed = _decode_certificate(obj, label)
        if parsed is None:
            continue
        certs.append(
            TrustedCertificate(
                label=label,
                raw_bytes=obj[CKA_VALUE],  # type: ignore[arg-type]
                parsed_certificate=parsed,
                trust=level,
            )
        )
    return certs


def read_trusted_certs(stream: Iterable[bytes] | Iterable[str]) -> list[TrustedCertificate]:
    """
    Parse a certdata.txt stream and return the certificates trusted as a CA.

    Raises CertdataFormatError (or a subclass) if the input is malformed.
    """
    objects = read_objects(stream)
    trust = resolve_trust(objects)
    return extract_trusted_certificates(objects, trust)


# ─────────────────────── Public Parser Class ───────────────────────


def _classify_failure(failure: FailureDescription) -> FailureDescription:
    """Format drift is a validation failure; anything else stays technical."""
    if isinstance(failure.exception, CertdataFormatError):
        return FailureDescription(
            ErrorCode.VALIDATION_ERROR,
            f"Malformed certdata input: {failure.exception}",
            failure.exception,
        )
    return failure


class CertdataTrustedCertParser:
    """
    Parse a certdata.txt byte stream into trusted certificates.

    Implements the CertdataParser port.
    All exceptions are caught at this adapter boundary via Result.from_computation().
    """

    def parse(self, stream: BinaryIO) -> Result[list[TrustedCertificate]]:
        """
        Returns Result[list[TrustedCertificate]] on success (possibly empty).
        Returns Result.failure(VALIDATION_ERROR, ...) on certdata format drift.
        Returns Result.failure(TECHNICAL_ERROR, ...) when the stream cannot be read.
        """
        return Result.from_computation(
            lambda: self._do_parse(stream),
            ErrorCode.TECHNICAL_ERROR,
            "Failed to read certdata input",
        ).map_failure(_classify_failure)

    def _do_parse(self, stream: BinaryIO) -> list[TrustedCertificate]:
        certs = read_trusted_certs(stream)
        log.info(
            "parser.complete",
            trusted_certificates=len(certs),
            server=sum(c.trust.server for c in certs),
            email=sum(c.trust.email for c in certs),
            code_signing=sum(c.trust.code_signing for c in certs),
        )
        return certs
