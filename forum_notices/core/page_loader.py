"""
Fetch-and-classify step shared by the listing and thread extractors.

Combines the fetcher, the caller-side retry policy, the challenge
detector and a bounded fan-out semaphore. Every failure mode comes back
as a FetchOutcome; nothing here raises for a single bad page.
"""

import asyncio
from typing import Optional

import structlog

from .detector import ChallengeDetector
from .errors import TransportError
from .http_client import HttpClient, fetch_with_retry
from .models import FetchOutcome, SelectorChain

logger = structlog.get_logger(__name__)


class PageLoader:
    """
    Bounded, retrying page loader.

    Usage:
        async with HttpClient() as client:
            loader = PageLoader(client, max_concurrency=4)
            outcome = await loader.load(url, SelectorChain.of("#view_forum_table"))
    """

    def __init__(
        self,
        http_client: HttpClient,
        detector: Optional[ChallengeDetector] = None,
        max_concurrency: int = 4,
        retry_attempts: int = 3,
        retry_backoff: float = 1.0,
    ):
        """
        Initialize loader.

        Args:
            http_client: Open HTTP client
            detector: Challenge detector (defaults to packaged markers)
            max_concurrency: Maximum in-flight fetches
            retry_attempts: Attempts per URL on transport errors
            retry_backoff: Base backoff in seconds between attempts
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be at least 1")

        self.http_client = http_client
        self.detector = detector or ChallengeDetector()
        self.max_concurrency = max_concurrency
        self.retry_attempts = retry_attempts
        self.retry_backoff = retry_backoff
        self.semaphore = asyncio.Semaphore(max_concurrency)

    async def load(
        self,
        url: str,
        anchors: SelectorChain,
        headers: Optional[dict] = None,
    ) -> FetchOutcome:
        """
        Fetch a page and classify it.

        Args:
            url: Page URL
            anchors: Chain the page must match to count as OK
            headers: Extra request headers

        Returns:
            FetchOutcome (OK, BLOCKED, UNEXPECTED_SHAPE or TRANSPORT_ERROR)
        """
        async with self.semaphore:
            try:
                result = await fetch_with_retry(
                    self.http_client,
                    url,
                    headers=headers,
                    attempts=self.retry_attempts,
                    backoff=self.retry_backoff,
                )
            except TransportError as e:
                logger.error(
                    "fetch_failed",
                    url=url,
                    attempts=self.retry_attempts,
                    error=str(e),
                    classification="transport_error",
                )
                return FetchOutcome.transport_error(url, e)

        return self.detector.classify(result, anchors)
