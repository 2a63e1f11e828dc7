"""
Async page fetcher with per-domain rate limiting.

Built on httpx with:
- Browser-like identity headers
- Per-domain rate limiting
- Per-fetch timeout mapped to TransportError

The fetcher performs one request per call and never judges status codes;
retry policy belongs to the caller (see fetch_with_retry).
"""

import asyncio
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlparse

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
)

from .errors import TransportError
from .models import FetchResult

logger = structlog.get_logger(__name__)


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

DEFAULT_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "ko,en;q=0.9",
}


@dataclass
class RateLimiter:
    """Per-domain rate limiter."""
    requests_per_second: float = 1.0
    last_request: float = 0.0
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)

    async def acquire(self) -> None:
        """Wait for rate limit slot."""
        if self.requests_per_second <= 0:
            return

        async with self.lock:
            now = time.monotonic()
            min_interval = 1.0 / self.requests_per_second
            elapsed = now - self.last_request

            if elapsed < min_interval:
                await asyncio.sleep(min_interval - elapsed)

            self.last_request = time.monotonic()


class HttpClient:
    """
    Async page fetcher.

    Usage:
        async with HttpClient() as client:
            result = await client.fetch("https://www.pathofexile.com/forum/view-forum/2211")
            html = result.body_text
    """

    def __init__(
        self,
        requests_per_second: float = 1.0,
        timeout: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize HTTP client.

        Args:
            requests_per_second: Rate limit per domain (0 disables it)
            timeout: Per-fetch timeout in seconds
            user_agent: Identity string sent with every request
            transport: Optional httpx transport (used by tests)
        """
        self.requests_per_second = requests_per_second
        self.timeout = timeout
        self.user_agent = user_agent
        self.transport = transport

        self._client: Optional[httpx.AsyncClient] = None
        self._rate_limiters: dict[str, RateLimiter] = {}

    async def __aenter__(self) -> "HttpClient":
        """Enter async context."""
        self._client = httpx.AsyncClient(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            headers={**DEFAULT_HEADERS, "User-Agent": self.user_agent},
            transport=self.transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _get_rate_limiter(self, url: str) -> RateLimiter:
        """Get or create rate limiter for domain."""
        domain = urlparse(url).netloc
        if domain not in self._rate_limiters:
            self._rate_limiters[domain] = RateLimiter(
                requests_per_second=self.requests_per_second
            )
        return self._rate_limiters[domain]

    async def fetch(self, url: str, headers: Optional[dict] = None) -> FetchResult:
        """
        GET a page once.

        Args:
            url: Absolute URL to fetch
            headers: Extra headers merged over the client defaults

        Returns:
            FetchResult for any HTTP response, including 4xx/5xx

        Raises:
            TransportError: On DNS, connection or timeout failures
        """
        if not self._client:
            raise RuntimeError("Client not initialized. Use 'async with' context.")

        limiter = self._get_rate_limiter(url)
        await limiter.acquire()

        logger.debug("http_get", url=url)

        try:
            response = await self._client.get(url, headers=headers or {})
        except (httpx.TransportError, httpx.TimeoutException) as e:
            logger.warning("http_transport_error", url=url, error=str(e), error_type=type(e).__name__)
            raise TransportError(url, e) from e

        content = response.content
        result = FetchResult(
            url=str(response.url),
            status_code=response.status_code,
            body_text=response.text,
            byte_length=len(content),
            fetched_at=datetime.now(timezone.utc),
        )

        logger.debug(
            "http_response",
            url=result.url,
            status_code=result.status_code,
            bytes=result.byte_length,
        )
        return result


def _log_retry(retry_state: RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "fetch_retry",
        attempt=retry_state.attempt_number,
        url=getattr(exc, "url", None),
        error=str(exc) if exc else None,
    )


async def fetch_with_retry(
    client: HttpClient,
    url: str,
    headers: Optional[dict] = None,
    attempts: int = 3,
    backoff: float = 1.0,
) -> FetchResult:
    """
    Fetch with caller-side retry on transport failures.

    Only TransportError is retried. Blocked or oddly shaped pages come back
    as normal results and are classified afterwards.

    Args:
        client: Open HttpClient
        url: URL to fetch
        headers: Extra request headers
        attempts: Total attempts including the first
        backoff: Base wait in seconds for exponential backoff

    Returns:
        FetchResult of the first successful attempt

    Raises:
        TransportError: When every attempt failed
    """
    retrying = AsyncRetrying(
        stop=stop_after_attempt(max(1, attempts)),
        wait=wait_exponential(multiplier=backoff, min=backoff, max=10 * backoff),
        retry=retry_if_exception_type(TransportError),
        before_sleep=_log_retry,
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            return await client.fetch(url, headers=headers)
