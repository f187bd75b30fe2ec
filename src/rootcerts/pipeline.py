"""
Pipeline — the ROP pipeline orchestrating the full workflow.

All I/O is injected via ports (Protocol interfaces). Stages are connected
via flat_map, forming a railway:

  source.open()
    → parse(HashingReader(stream))  → CertBundle(certs, input SHA1)
      → render(bundle)
        → write(source)

Each stage returns Result[T]. Failures short-circuit automatically
through the railway — no try/except needed.
"""

from __future__ import annotations

from typing import BinaryIO

from railway.result import Result

from rootcerts.adapters.hashing_reader import HashingReader
from rootcerts.domain.models import CertBundle
from rootcerts.domain.ports import (
    CertdataParser,
    CertdataSource,
    ModuleGenerator,
    ModuleWriter,
)


def parse_bundle(stream: BinaryIO, parser: CertdataParser) -> Result[CertBundle]:
    """
    Parse a certdata stream and stamp the result with the input's SHA1.

    The stream is wrapped in a HashingReader so the digest covers exactly
    the bytes the parser consumed. The stream is closed afterwards.
    """
    with HashingReader(stream) as reader:
        return parser.parse(reader).map(  # type: ignore[arg-type]
            lambda certs: CertBundle(
                certificates=tuple(certs),
                source_sha1=reader.hexdigest(),
            )
        )


def run_pipeline(
    source: CertdataSource,
    parser: CertdataParser,
    generator: ModuleGenerator,
    writer: ModuleWriter,
) -> Result[CertBundle]:
    """
    Execute the certdata → Python module pipeline.

    Flow:
      1. Open the certdata source (file, stdin or HTTP)
      2. Parse trusted certificates while hashing the input
      3. Render the generated module
      4. Write it out

    Returns Result[CertBundle] on success so the caller can report what was
    generated, or the failure from the first failing stage.
    """
    return (
        source.open()
        .flat_map(lambda stream: parse_bundle(stream, parser))
        .flat_map(
            lambda bundle: generator.render(bundle)
            .flat_map(writer.write)
            .map(lambda _: bundle)
        )
    )
