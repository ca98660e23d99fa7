"""HTTP fetcher - one bounded GET per candidate URL.

Every HTTP status is a successful fetch here, 404 and 503 included: the
status code is classification input, not an error. Only transport problems
(DNS, refused connection, TLS, timeout) come back as FetchFailure, mapped
through a fixed table so results aggregate cleanly across domains.

No retries at this layer. Trying another URL is the scheduler's job.
"""

import asyncio
import errno
import logging
import socket
import ssl
from typing import Optional

import aiohttp

from domain_intel.util.types import (
    FailureReason, FetchFailure, FetchOutcome, FetchSuccess, ScanConfig,
)

logger = logging.getLogger(__name__)

# Keep result records small
MAX_DETAIL_CHARS = 60

_CHUNK_SIZE = 64 * 1024

# aiohttp >= 3.10 raises a dedicated subclass for resolver failures
_DNS_ERRORS = tuple(
    cls for cls in (getattr(aiohttp, 'ClientConnectorDNSError', None), socket.gaierror) if cls
)


def _truncate(text: str, limit: int = MAX_DETAIL_CHARS) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[:limit].rstrip()


def _root_os_error(exc: BaseException) -> Optional[BaseException]:
    """Dig out the OS-level error aiohttp wraps in connector errors."""
    if isinstance(exc, aiohttp.ClientConnectorError):
        return exc.os_error
    return exc if isinstance(exc, OSError) else None


def classify_exception(exc: BaseException, url: str = "") -> FetchFailure:
    """Map a transport exception to a FetchFailure.

    Order matters: aiohttp's SSL errors are connector errors too, and
    ServerTimeoutError is both a connection error and a TimeoutError.
    """
    detail = _truncate(str(exc) or type(exc).__name__)

    if isinstance(exc, (aiohttp.ClientSSLError, ssl.SSLError, ssl.CertificateError)):
        return FetchFailure(FailureReason.SSL_ERROR.value, detail, url)

    if isinstance(exc, (asyncio.TimeoutError, TimeoutError)):
        return FetchFailure(FailureReason.TIMED_OUT.value, detail, url)

    os_error = _root_os_error(exc)
    if isinstance(exc, _DNS_ERRORS) or isinstance(os_error, socket.gaierror):
        return FetchFailure(FailureReason.DNS_NOT_FOUND.value, detail, url)
    if isinstance(os_error, ConnectionRefusedError) or getattr(os_error, 'errno', None) == errno.ECONNREFUSED:
        return FetchFailure(FailureReason.CONNECTION_REFUSED.value, detail, url)
    if isinstance(os_error, (ssl.SSLError, ssl.CertificateError)):
        return FetchFailure(FailureReason.SSL_ERROR.value, detail, url)

    return FetchFailure(f"{FailureReason.UNKNOWN.value}: {detail}", detail, url)


def _decode(raw: bytes, charset: Optional[str]) -> str:
    try:
        return raw.decode(charset or 'utf-8', errors='replace')
    except LookupError:
        # Server sent a charset Python doesn't know
        return raw.decode('utf-8', errors='replace')


class HTTPFetcher:
    """Async HTTP client returning a uniform FetchOutcome.

    Uses one aiohttp session for the whole batch:

        async with HTTPFetcher(config) as fetcher:
            outcome = await fetcher.fetch("https://example.com")
    """

    def __init__(self, config: ScanConfig):
        """Initialize fetcher with the batch configuration."""
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        """Set up aiohttp session with a browser-like identity."""
        timeout = aiohttp.ClientTimeout(total=self.config.http_timeout)
        connector = aiohttp.TCPConnector(
            limit=max(10, self.config.concurrency * 4),
            limit_per_host=4,
            ttl_dns_cache=300,
            ssl=None if self.config.verify_ssl else False,
        )
        self.session = aiohttp.ClientSession(
            timeout=timeout,
            connector=connector,
            headers={
                'User-Agent': self.config.user_agent,
                'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
                'Accept-Language': 'en-US,en;q=0.9',
            },
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Clean up session."""
        if self.session:
            await self.session.close()
            self.session = None

    async def _read_body(self, resp: aiohttp.ClientResponse) -> str:
        """Read at most max_body_bytes and decode leniently."""
        limit = self.config.max_body_bytes
        chunks = []
        size = 0
        async for chunk in resp.content.iter_chunked(_CHUNK_SIZE):
            chunks.append(chunk)
            size += len(chunk)
            if size >= limit:
                break
        return _decode(b"".join(chunks)[:limit], resp.charset)

    async def fetch(self, url: str) -> FetchOutcome:
        """GET a URL, following redirects up to the configured cap.

        Returns FetchSuccess for any HTTP response, FetchFailure otherwise.
        Never raises for network problems.
        """
        if self.session is None:
            raise RuntimeError("HTTPFetcher must be used as an async context manager")

        try:
            async with self.session.get(
                url,
                allow_redirects=True,
                max_redirects=self.config.max_redirects,
            ) as resp:
                body = await self._read_body(resp)
                outcome = FetchSuccess(
                    status_code=resp.status,
                    final_url=str(resp.url),
                    body=body,
                    headers=dict(resp.headers),
                )
                logger.debug(f"GET {url} -> {resp.status} ({len(body)} chars, final {outcome.final_url})")
                return outcome

        except (aiohttp.ClientError, asyncio.TimeoutError, OSError, ValueError) as e:
            failure = classify_exception(e, url)
            logger.debug(f"GET {url} failed: {failure.classification} ({type(e).__name__})")
            return failure
