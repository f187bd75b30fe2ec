"""
HTTP adapter — certdata.txt download via httpx.

Adapter layer — implements the CertdataSource port over HTTP(S).

Retry/backoff via tenacity on transient errors (network, timeout).
Non-2xx responses and exhausted retries become Result failures — no
exceptions leak to the pipeline.

Note: downloading over https needs a working CA bundle on the host; this
is the bootstrap step that produces one.
"""

from __future__ import annotations

import io
from typing import BinaryIO

import httpx
import structlog
from railway import ErrorCode
from railway.result import Result
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

log = structlog.get_logger()

DEFAULT_CERTDATA_URL = (
    "https://hg.mozilla.org/releases/mozilla-release/raw-file/default/"
    "security/nss/lib/ckfw/builtins/certdata.txt"
)


class HttpCertdataSource:
    """
    Download certdata.txt with a single HTTP GET.

    Implements the CertdataSource port.
    Uses tenacity retry on transient network errors only.
    """

    def __init__(self, url: str = DEFAULT_CERTDATA_URL, timeout: int = 60) -> None:
        self._url = url
        self._timeout = timeout

    def open(self) -> Result[BinaryIO]:
        """
        Fetch the dump and hand it over as an in-memory binary stream.

        Returns Result[BinaryIO] on success,
        or Result.failure(EXTERNAL_SERVICE_ERROR, ...) on failure.
        """
        return Result.from_computation(
            lambda: io.BytesIO(self._do_download()),
            ErrorCode.EXTERNAL_SERVICE_ERROR,
            f"Failed to download certdata from {self._url}",
        )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=0.1, max=30),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.NetworkError)),
        reraise=True,
    )
    def _do_download(self) -> bytes:
        """HTTP GET with retry — exceptions caught by from_computation."""
        log.info("download.started", url=self._url)
        with httpx.Client(timeout=self._timeout, follow_redirects=True) as client:
            response = client.get(self._url)
            response.raise_for_status()
            data = response.content
            log.info("download.complete", url=self._url, size_bytes=len(data))
            return data
