"""
Base class for parser strategies.

Parsers implement the extraction phase: converting a thread page into
cleaned post content.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

import structlog

from forum_notices.core.models import (
    ExtractedContent,
    ExtractionStatus,
    FetchOutcome,
    PostSummary,
    ThreadResult,
)
from forum_notices.core.http_client import HttpClient
from forum_notices.core.page_loader import PageLoader
from forum_notices.navigators.base import ForumConfig, SourceConfig

logger = structlog.get_logger(__name__)


class ParserStrategy(ABC):
    """
    Abstract base class for parser strategies.

    `extract_thread` works on an already classified page; `extract` adds
    the fetch; `extract_batch` runs many extractions concurrently and
    isolates their failures.
    """

    def __init__(
        self,
        http_client: Optional[HttpClient] = None,
        loader: Optional[PageLoader] = None,
    ):
        """
        Initialize parser.

        Args:
            http_client: Shared HTTP client (creates own if not provided)
            loader: Shared page loader (built on http_client if not provided)
        """
        if loader is not None:
            http_client = loader.http_client
        elif http_client is not None:
            loader = PageLoader(http_client)

        self.http_client = http_client
        self.loader = loader
        self._owns_client = http_client is None
        self.logger = logger.bind(parser=self.__class__.__name__)

    async def __aenter__(self) -> "ParserStrategy":
        """Enter async context."""
        if self._owns_client:
            self.http_client = HttpClient()
            await self.http_client.__aenter__()
            self.loader = PageLoader(self.http_client)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context."""
        if self._owns_client and self.http_client:
            await self.http_client.__aexit__(exc_type, exc_val, exc_tb)

    @abstractmethod
    def extract_thread(
        self,
        outcome: FetchOutcome,
        source: SourceConfig,
    ) -> Optional[ExtractedContent]:
        """
        Extract cleaned content from a classified thread page.

        Args:
            outcome: Classified fetch of the thread page
            source: Source configuration

        Returns:
            ExtractedContent, or None when no content was found
        """
        pass

    @abstractmethod
    async def extract(
        self,
        summary: PostSummary,
        source: SourceConfig,
        forum: Optional[ForumConfig] = None,
    ) -> ThreadResult:
        """Fetch and extract a single thread."""
        pass

    async def extract_batch(
        self,
        summaries: list[PostSummary],
        source: SourceConfig,
        forum: Optional[ForumConfig] = None,
    ) -> list[ThreadResult]:
        """
        Extract many threads concurrently.

        Concurrency is bounded by the loader's semaphore. A failure in one
        thread never cancels the others.

        Args:
            summaries: Threads to process
            source: Source configuration
            forum: Forum the threads were listed in

        Returns:
            One ThreadResult per summary, in input order
        """
        tasks = [self.extract(summary, source, forum) for summary in summaries]
        gathered = await asyncio.gather(*tasks, return_exceptions=True)

        results: list[ThreadResult] = []
        for summary, item in zip(summaries, gathered):
            if isinstance(item, Exception):
                self.logger.error(
                    "extraction_failed",
                    url=summary.thread_url,
                    error=str(item),
                    error_type=type(item).__name__,
                )
                item = ThreadResult(
                    summary=summary,
                    status=ExtractionStatus.NOT_FOUND,
                    reason=str(item),
                )
            results.append(item)

        return results
