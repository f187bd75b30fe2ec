"""
Ports — Protocol-based interfaces for infrastructure adapters.

These define WHAT the pipeline needs without specifying HOW:

  Domain ← Ports (protocols) ← Adapters (implementations)

Each port is a Protocol (structural typing), so adapters satisfy the
contract simply by implementing the method — no inheritance.

  CertdataSource  → file, stdin or HTTP download
  CertdataParser  → certdata.txt stream → trusted certificates
  ModuleGenerator → CertBundle → Python module source
  ModuleWriter    → source → file or stdout
"""

from __future__ import annotations

from typing import BinaryIO, Protocol, runtime_checkable

from railway.result import Result

from rootcerts.domain.models import CertBundle, TrustedCertificate


@runtime_checkable
class CertdataSource(Protocol):
    """
    Port: provide a ready-to-read binary certdata.txt stream.

    The pipeline takes ownership of the stream and closes it after parsing.
    Retries, timeouts and TLS are the adapter's business.
    """

    def open(self) -> Result[BinaryIO]: ...


@runtime_checkable
class CertdataParser(Protocol):
    """
    Port: parse certdata.txt into the certificates trusted as a CA.

    The implementation handles:
      1. tokenizing lines and multiline octal blocks
      2. grouping tokens into CKA_CLASS-delimited objects
      3. resolving CKO_NSS_TRUST declarations by label
      4. decoding CKO_CERTIFICATE DER values
    """

    def parse(self, stream: BinaryIO) -> Result[list[TrustedCertificate]]: ...


@runtime_checkable
class ModuleGenerator(Protocol):
    """Port: render a CertBundle into Python module source text."""

    def render(self, bundle: CertBundle) -> Result[str]: ...


@runtime_checkable
class ModuleWriter(Protocol):
    """Port: persist generated source. Returns the number of characters written."""

    def write(self, source: str) -> Result[int]: ...
