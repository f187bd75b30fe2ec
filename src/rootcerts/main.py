"""
Application entry point — wires dependencies and runs the pipeline once.

Composition root: creates concrete adapters, injects them into the
pipeline and runs it inside a LoggingExecutionContext.

This is the ONLY place where concrete classes are instantiated.
Everything else depends on Protocol interfaces.

Responsibilities:
  1. Load and validate configuration from environment
  2. Apply command-line overrides
  3. Configure structlog (to stderr: stdout may carry the generated module)
  4. Create concrete adapters (source + parser + generator + writer)
  5. Run the pipeline and map the outcome to an exit status

Usage:
  rootcerts --source certdata.txt --target rootcerts_data.py
  rootcerts --download > rootcerts_data.py
"""

from __future__ import annotations

import argparse
import logging
import sys

import structlog
from railway import LoggingExecutionContext

from rootcerts import __version__
from rootcerts.adapters.certdata_parser import CertdataTrustedCertParser
from rootcerts.adapters.file_io import FileCertdataSource, FileModuleWriter
from rootcerts.adapters.http_client import HttpCertdataSource
from rootcerts.adapters.module_generator import JinjaModuleGenerator
from rootcerts.config import AppSettings
from rootcerts.domain.ports import CertdataSource
from rootcerts.pipeline import run_pipeline


def configure_structlog(log_level: str = "INFO") -> None:
    """
    Configure structlog for structured logging on stderr.

    Colored, human-readable console output; stdout is left to the
    generated module.
    """
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rootcerts",
        description=(
            "Convert Mozilla NSS certdata.txt into a Python module containing "
            "the root certificates trusted to act as a CA."
        ),
    )
    parser.add_argument(
        "--download",
        action="store_true",
        default=None,
        help="download the latest certdata.txt (see --url) instead of reading --source",
    )
    parser.add_argument("--url", help="URL to download certdata.txt from when --download is set")
    parser.add_argument("--source", help="certdata.txt to read; '-' for stdin (default)")
    parser.add_argument("--target", help="file to write the module to; '-' for stdout (default)")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING or ERROR")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def apply_overrides(settings: AppSettings, args: argparse.Namespace) -> AppSettings:
    """Return settings with any command-line flags that were given applied on top."""
    download = {
        key: value
        for key, value in (("enabled", args.download), ("url", args.url))
        if value is not None
    }
    output = {
        key: value
        for key, value in (("source", args.source), ("target", args.target))
        if value is not None
    }
    return AppSettings.model_validate(
        {
            "download": settings.download.model_copy(update=download),
            "output": settings.output.model_copy(update=output),
            "log_level": args.log_level or settings.log_level,
        }
    )


def _create_source(settings: AppSettings) -> CertdataSource:
    if settings.download.enabled:
        return HttpCertdataSource(
            url=settings.download.url,
            timeout=settings.download.timeout_seconds,
        )
    return FileCertdataSource(settings.output.source)


def main(argv: list[str] | None = None) -> None:
    """Parse flags, wire dependencies and generate the module."""
    args = build_arg_parser().parse_args(argv)
    try:
        settings = apply_overrides(AppSettings(), args)
    except Exception as e:
        print(f"FATAL: Configuration error — {e}", file=sys.stderr)  # noqa: T201
        sys.exit(1)

    configure_structlog(settings.log_level)
    log = structlog.get_logger()

    log.info(
        "app.starting",
        version=__version__,
        log_level=settings.log_level,
        download=settings.download.enabled,
        source=settings.download.url if settings.download.enabled else settings.output.source,
        target=settings.output.target,
    )

    source = _create_source(settings)
    parser = CertdataTrustedCertParser()
    generator = JinjaModuleGenerator()
    writer = FileModuleWriter(settings.output.target)

    ctx = LoggingExecutionContext(operation="CertdataGenerate")
    result = ctx.execute(lambda: run_pipeline(source, parser, generator, writer))

    if result.is_failure():
        failure = result.error()
        log.error("pipeline.failed", failure=str(failure), exc_info=failure.exception)
        sys.exit(1)

    bundle = result.value()
    log.info(
        "pipeline.complete",
        certificates=len(bundle.certificates),
        source_sha1=bundle.source_sha1,
    )


if __name__ == "__main__":
    main()
