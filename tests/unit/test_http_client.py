"""Tests for the page fetcher and retry policy."""

import httpx
import pytest

from forum_notices.core.errors import TransportError
from forum_notices.core.http_client import (
    DEFAULT_USER_AGENT,
    HttpClient,
    RateLimiter,
    fetch_with_retry,
)

URL = "https://www.pathofexile.com/forum/view-forum/2211"


def _client(handler):
    return HttpClient(requests_per_second=0, transport=httpx.MockTransport(handler))


class TestHttpClient:
    """Tests for HttpClient.fetch."""

    @pytest.mark.asyncio
    async def test_fetch_returns_result(self):
        """Test body, status and byte length are captured."""
        body = "<html><body>공지</body></html>"

        def handler(request):
            return httpx.Response(200, content=body.encode("utf-8"), headers={"Content-Type": "text/html; charset=utf-8"})

        async with _client(handler) as client:
            result = await client.fetch(URL)

        assert result.url == URL
        assert result.status_code == 200
        assert result.body_text == body
        assert result.byte_length == len(body.encode("utf-8"))
        assert result.fetched_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_browser_identity_sent(self):
        """Test a realistic User-Agent and caller headers are sent."""
        seen = {}

        def handler(request):
            seen.update(request.headers)
            return httpx.Response(200, text="ok")

        async with _client(handler) as client:
            await client.fetch(URL, headers={"Referer": "https://poe.game.daum.net/forum/view-forum/news2"})

        assert seen["user-agent"] == DEFAULT_USER_AGENT
        assert seen["referer"] == "https://poe.game.daum.net/forum/view-forum/news2"

    @pytest.mark.asyncio
    async def test_error_status_not_raised(self):
        """Test HTTP errors are returned, not raised."""
        def handler(request):
            return httpx.Response(503, text="Service Unavailable")

        async with _client(handler) as client:
            result = await client.fetch(URL)

        assert result.status_code == 503

    @pytest.mark.asyncio
    async def test_timeout_is_transport_error(self):
        """Test timeouts map to TransportError."""
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransportError) as exc_info:
                await client.fetch(URL)

        assert exc_info.value.url == URL
        assert isinstance(exc_info.value.cause, httpx.ReadTimeout)

    @pytest.mark.asyncio
    async def test_connection_error_is_transport_error(self):
        """Test connection failures map to TransportError."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransportError):
                await client.fetch(URL)

    @pytest.mark.asyncio
    async def test_requires_context(self):
        """Test fetch outside the context manager fails."""
        client = HttpClient()
        with pytest.raises(RuntimeError):
            await client.fetch(URL)

    @pytest.mark.asyncio
    async def test_single_request_per_fetch(self):
        """Test the fetcher itself never retries."""
        calls = []

        def handler(request):
            calls.append(request.url)
            raise httpx.ConnectError("reset", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransportError):
                await client.fetch(URL)

        assert len(calls) == 1


class TestFetchWithRetry:
    """Tests for caller-side retry."""

    @pytest.mark.asyncio
    async def test_retries_transport_errors(self):
        """Test transient failures are retried until success."""
        calls = []

        def handler(request):
            calls.append(1)
            if len(calls) < 3:
                raise httpx.ConnectError("reset", request=request)
            return httpx.Response(200, text="ok")

        async with _client(handler) as client:
            result = await fetch_with_retry(client, URL, attempts=3, backoff=0)

        assert result.status_code == 200
        assert len(calls) == 3

    @pytest.mark.asyncio
    async def test_gives_up(self):
        """Test the last TransportError is raised after all attempts."""
        calls = []

        def handler(request):
            calls.append(1)
            raise httpx.ConnectTimeout("timeout", request=request)

        async with _client(handler) as client:
            with pytest.raises(TransportError):
                await fetch_with_retry(client, URL, attempts=2, backoff=0)

        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_status_codes_not_retried(self):
        """Test a 403 response is returned after one attempt."""
        calls = []

        def handler(request):
            calls.append(1)
            return httpx.Response(403, text="denied")

        async with _client(handler) as client:
            result = await fetch_with_retry(client, URL, attempts=3, backoff=0)

        assert result.status_code == 403
        assert len(calls) == 1


class TestRateLimiter:
    """Tests for RateLimiter."""

    @pytest.mark.asyncio
    async def test_disabled(self):
        """Test zero rate disables waiting."""
        limiter = RateLimiter(requests_per_second=0)
        await limiter.acquire()
        assert limiter.last_request == 0.0

    @pytest.mark.asyncio
    async def test_records_request_time(self):
        """Test acquire updates the last request time."""
        limiter = RateLimiter(requests_per_second=100)
        await limiter.acquire()
        assert limiter.last_request > 0
