"""
Forum thread parser: thread page → cleaned first-post content.
"""

from typing import Optional

from forum_notices.core.cleaner import clean
from forum_notices.core.models import (
    ExtractedContent,
    ExtractionStatus,
    FetchOutcome,
    OutcomeStatus,
    PostSummary,
    ThreadResult,
)
from forum_notices.core.selectors import resolve
from forum_notices.navigators.base import ForumConfig, SourceConfig

from .base import ParserStrategy


# FetchOutcome classification -> per-thread status
OUTCOME_TO_STATUS = {
    OutcomeStatus.BLOCKED: ExtractionStatus.BLOCKED,
    OutcomeStatus.UNEXPECTED_SHAPE: ExtractionStatus.UNEXPECTED_SHAPE,
    OutcomeStatus.TRANSPORT_ERROR: ExtractionStatus.TRANSPORT_ERROR,
}


class ForumThreadParser(ParserStrategy):
    """
    Parser for /forum/view-thread/{id} pages.

    The content node is resolved through the source's content chain and
    cleaned with its unwanted-selector list.
    """

    def extract_thread(
        self,
        outcome: FetchOutcome,
        source: SourceConfig,
    ) -> Optional[ExtractedContent]:
        if not outcome.is_ok:
            return None

        match = resolve(outcome.document, source.thread.content)
        if not match.found:
            self.logger.warning(
                "thread_content_not_found",
                url=outcome.url,
                selectors=str(source.thread.content),
                classification="not_found",
            )
            return None

        cleaned = clean(match.element, source.thread.unwanted)

        self.logger.debug(
            "thread_extracted",
            url=outcome.url,
            selector=match.selector,
            removed=cleaned.removed,
            length=len(cleaned.plain_text),
        )
        return ExtractedContent(html=cleaned.html, plain_text=cleaned.plain_text)

    async def extract(
        self,
        summary: PostSummary,
        source: SourceConfig,
        forum: Optional[ForumConfig] = None,
    ) -> ThreadResult:
        """
        Fetch a thread and extract its content.

        Args:
            summary: Listing row pointing at the thread
            source: Source configuration
            forum: Forum the thread was listed in (used as Referer)

        Returns:
            ThreadResult; non-OK statuses carry no content
        """
        if not self.loader:
            raise RuntimeError("Parser not initialized. Use 'async with' context.")

        headers = {}
        if source.send_referer and forum is not None:
            headers["Referer"] = forum.url

        outcome = await self.loader.load(summary.thread_url, source.thread.anchors, headers=headers)

        if not outcome.is_ok:
            self.logger.warning(
                "thread_skipped",
                source=source.source_id,
                title=summary.title,
                **outcome.describe(),
            )
            return ThreadResult(
                summary=summary,
                status=OUTCOME_TO_STATUS.get(outcome.status, ExtractionStatus.NOT_FOUND),
                reason=outcome.reason,
            )

        content = self.extract_thread(outcome, source)
        if content is None:
            return ThreadResult(
                summary=summary,
                status=ExtractionStatus.NOT_FOUND,
                reason=f"no match for {source.thread.content}",
            )

        return ThreadResult(summary=summary, status=ExtractionStatus.OK, content=content)
