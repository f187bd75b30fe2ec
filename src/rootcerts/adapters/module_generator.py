"""
Code generator adapter — renders a CertBundle into a Python module via Jinja2.

Adapter layer — implements the ModuleGenerator port.

The generated module is stdlib-only so it can be dropped into any project:
it embeds the DER of every trusted root and exposes certs(),
certs_by_trust(), create_ssl_context() and server_ssl_context().
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime
from email.utils import format_datetime

import structlog
from jinja2 import Environment, PackageLoader, StrictUndefined
from railway import ErrorCode
from railway.result import Result

from rootcerts import __version__
from rootcerts.domain.models import CertBundle

log = structlog.get_logger()

TEMPLATE_NAME = "rootcerts_module.py.j2"
BYTES_PER_LINE = 16


def bytes_literal(data: bytes, indent: int = 0) -> str:
    r"""
    Render bytes as adjacent b"\x.." literals, BYTES_PER_LINE bytes per line.

    Continuation lines are indented by `indent` spaces; the first line is not.
    """
    chunks = [
        'b"' + "".join(f"\\x{b:02x}" for b in data[i : i + BYTES_PER_LINE]) + '"'
        for i in range(0, len(data), BYTES_PER_LINE)
    ]
    return ("\n" + " " * indent).join(chunks) or 'b""'


def _build_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("rootcerts", "templates"),
        undefined=StrictUndefined,
        keep_trailing_newline=True,
        autoescape=False,
    )
    env.filters["pyrepr"] = repr
    env.filters["bytes_literal"] = bytes_literal
    return env


class JinjaModuleGenerator:
    """
    Render a CertBundle into Python module source.

    Implements the ModuleGenerator port. The clock is injectable so output
    can be made fully deterministic.
    """

    def __init__(self, clock: Callable[[], datetime] = lambda: datetime.now(UTC)) -> None:
        self._clock = clock
        self._env = _build_environment()

    def render(self, bundle: CertBundle) -> Result[str]:
        """
        Returns Result[str] with the module source on success,
        or Result.failure(TECHNICAL_ERROR, ...) if rendering fails.
        """
        return Result.from_computation(
            lambda: self._do_render(bundle),
            ErrorCode.TECHNICAL_ERROR,
            "Failed to render certificate module",
        )

    def _do_render(self, bundle: CertBundle) -> str:
        template = self._env.get_template(TEMPLATE_NAME)
        source = template.render(
            version=__version__,
            generated_at=format_datetime(self._clock()),
            source_sha1=bundle.source_sha1,
            certs=bundle.certificates,
        )
        log.info("generator.rendered", certificates=len(bundle.certificates), chars=len(source))
        return source
