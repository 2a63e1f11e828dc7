"""
Forum listing navigator: index page → post summaries.

Both forums render a table of threads; each data row carries a title
link and a post date. Rows are returned in page order, which is newest
first on both sites (sticky rows aside).
"""

from typing import Optional

from bs4 import Tag

from forum_notices.core.models import FetchOutcome, PostSummary
from forum_notices.core.normalizer import (
    clean_date_text,
    extract_thread_id,
    normalize_title,
    parse_post_date,
)
from forum_notices.core.selectors import link_url, node_text, resolve, resolve_all

from .base import ForumConfig, NavigatorStrategy, SourceConfig


def is_header_row(row: Tag) -> bool:
    """True for table header rows."""
    return row.find("th") is not None or row.find_parent("thead") is not None


class ForumListingNavigator(NavigatorStrategy):
    """
    Navigator for /forum/view-forum/{id} pages.

    Locates the thread table through the source's table chain, skips the
    header row and resolves title, date and sticky flag per row.
    """

    def extract_listing(
        self,
        outcome: FetchOutcome,
        source: SourceConfig,
        forum: Optional[ForumConfig] = None,
        limit: Optional[int] = None,
    ) -> list[PostSummary]:
        if not outcome.is_ok:
            self.logger.warning(
                "listing_unavailable",
                source=source.source_id,
                forum=forum.key if forum else None,
                **outcome.describe(),
            )
            return []

        table = resolve(outcome.document, source.listing.table)
        if not table.found:
            self.logger.warning(
                "listing_table_not_found",
                url=outcome.url,
                selectors=str(source.listing.table),
                classification="not_found",
            )
            return []

        summaries: list[PostSummary] = []

        rows = resolve_all(table.element, source.listing.rows)

        for index, row in enumerate(rows.elements):
            if limit is not None and len(summaries) >= limit:
                break

            if is_header_row(row):
                continue

            summary = self._extract_row(row, index, outcome.url, source, forum)
            if summary:
                summaries.append(summary)

        self.logger.info(
            "listing_extracted",
            source=source.source_id,
            forum=forum.key if forum else None,
            url=outcome.url,
            table_selector=table.selector,
            count=len(summaries),
        )
        return summaries

    def _extract_row(
        self,
        row: Tag,
        index: int,
        page_url: str,
        source: SourceConfig,
        forum: Optional[ForumConfig],
    ) -> Optional[PostSummary]:
        """Build a PostSummary from one table row, or None to skip it."""
        anchor = resolve(row, source.listing.title)
        if not anchor.found:
            self.logger.debug(
                "row_skipped",
                url=page_url,
                row=index,
                reason="no_title_anchor",
                selectors=str(source.listing.title),
            )
            return None

        thread_url = link_url(anchor.element, source.base_url)
        if not thread_url:
            self.logger.debug("row_skipped", url=page_url, row=index, reason="no_href")
            return None

        date_cell = resolve(row, source.listing.date)
        date_text = clean_date_text(node_text(date_cell.element)) if date_cell.found else ""
        posted_at = parse_post_date(date_text)

        if date_text and posted_at is None:
            self.logger.info("post_date_unparsed", url=thread_url, date_text=date_text)

        return PostSummary(
            title=normalize_title(node_text(anchor.element)),
            thread_url=thread_url,
            posted_at=posted_at,
            thread_id=extract_thread_id(anchor.element.get("href", "")),
            is_sticky=resolve(row, source.listing.sticky).found,
            date_text=date_text,
            source_id=source.source_id,
            category=forum.category if forum else "",
        )

    async def discover(
        self,
        source: SourceConfig,
        forum: ForumConfig,
        limit: Optional[int] = None,
    ) -> list[PostSummary]:
        """
        Fetch and extract one forum listing.

        Args:
            source: Source configuration
            forum: Forum to fetch
            limit: Optional maximum number of posts

        Returns:
            List of PostSummary objects
        """
        if not self.loader:
            raise RuntimeError("Navigator not initialized. Use 'async with' context.")

        self.logger.info(
            "discovering_posts",
            source=source.source_id,
            forum=forum.key,
            url=forum.url,
        )

        outcome = await self.loader.load(forum.url, source.listing.table)
        return self.extract_listing(outcome, source, forum, limit)
