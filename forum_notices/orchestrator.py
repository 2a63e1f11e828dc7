"""
Pipeline orchestrator for forum notice publishing.

Coordinates:
- Settings and source configuration loading
- Listing discovery and thread extraction (bounded fan-out)
- Notice index build and atomic write
- Secondary publish target sync
"""

import asyncio
from pathlib import Path
from typing import Optional, Union

import httpx
import structlog

from .config.loader import PipelineSettings, load_settings, load_sources
from .core.detector import ChallengeDetector
from .core.errors import ConfigError
from .core.http_client import HttpClient
from .core.models import (
    ExtractionStatus,
    PipelineResult,
    PostSummary,
    ThreadResult,
)
from .core.page_loader import PageLoader
from .indexer import (
    INDEX_FILENAME,
    build_index,
    entries_from_threads,
    scan_notice_documents,
    write_index,
)
from .navigators.base import ForumConfig, SourceConfig
from .navigators.forum_listing import ForumListingNavigator
from .parsers.forum_thread import ForumThreadParser
from .publisher import PublishSynchronizer

logger = structlog.get_logger(__name__)


class NoticePipeline:
    """
    Orchestrator for the notice pipeline.

    Usage:
        pipeline = NoticePipeline(notice_dir="notice")
        result = await pipeline.run()
    """

    def __init__(
        self,
        config_path: Optional[str] = None,
        settings: Optional[PipelineSettings] = None,
        notice_dir: Union[str, Path, None] = None,
        project_root: Union[str, Path, None] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        detector: Optional[ChallengeDetector] = None,
    ):
        """
        Initialize pipeline.

        Args:
            config_path: Path to sources.yml (defaults to packaged config)
            settings: Pipeline settings (loaded from config_path if omitted)
            notice_dir: Override for the primary notice directory
            project_root: Base for relative paths (defaults to the notice
                          directory's parent)
            transport: Optional httpx transport (used by tests)
            detector: Optional challenge detector
        """
        self.config_path = config_path
        self.settings = settings or load_settings(config_path)

        notice_dir = Path(notice_dir or self.settings.notice_dir)
        if not notice_dir.is_absolute():
            notice_dir = (Path(project_root) if project_root is not None else Path.cwd()) / notice_dir
        self.notice_dir = notice_dir

        # Publish candidates are relative to the checkout that holds notice/
        self.project_root = Path(project_root) if project_root is not None else notice_dir.parent

        self.transport = transport
        self.detector = detector

        # Statistics
        self.stats = {
            "notices_authored": 0,
            "forums_processed": 0,
            "posts_discovered": 0,
            "threads_extracted": 0,
            "threads_failed": 0,
            "threads_blocked": 0,
            "index_entries": 0,
            "errors": 0,
        }

    async def run(
        self,
        sources: Optional[list[str]] = None,
        max_posts: Optional[int] = None,
        skip_forums: bool = False,
        dry_run: bool = False,
        sync: bool = True,
    ) -> PipelineResult:
        """
        Run the pipeline.

        Args:
            sources: Optional source_ids to process (None = all enabled)
            max_posts: Posts per forum (defaults to settings.max_posts)
            skip_forums: Index authored notices only
            dry_run: Fetch listings only; write nothing
            sync: Mirror output into the publish target

        Returns:
            PipelineResult

        Raises:
            NoticeSourceMissingError: If the notice directory is missing
            ConfigError: If max_posts is not positive
        """
        logger.info(
            "starting_pipeline",
            notice_dir=str(self.notice_dir),
            sources=sources or "all",
            skip_forums=skip_forums,
            dry_run=dry_run,
        )

        if max_posts is None:
            max_posts = self.settings.max_posts
        elif max_posts < 1:
            raise ConfigError("max_posts must be positive")

        # Fatal precondition, checked before any network traffic
        documents = scan_notice_documents(self.notice_dir)
        self.stats["notices_authored"] = len(documents)

        listings: dict[str, list[PostSummary]] = {}
        threads: list[ThreadResult] = []

        if not skip_forums:
            listings, threads = await self._collect_forums(
                source_ids=sources,
                max_posts=max_posts,
                dry_run=dry_run,
            )

        index = build_index(
            documents,
            entries_from_threads(threads),
            base_url=self.settings.notice_base_url,
        )
        self.stats["index_entries"] = len(index)

        result = PipelineResult(index=index, listings=listings, threads=threads, stats=self.stats)

        if dry_run:
            for key, summaries in listings.items():
                for summary in summaries:
                    logger.info("discovered_post", forum=key, **summary.to_dict())
            logger.info("dry_run_complete", **self.stats)
            return result

        result.index_path = write_index(index, self.notice_dir / INDEX_FILENAME)

        if sync:
            synchronizer = PublishSynchronizer(
                candidates=self.settings.publish_candidates,
                root=self.project_root,
            )
            result.sync = synchronizer.sync(index, documents)

        logger.info("pipeline_complete", **self.stats)
        return result

    async def _collect_forums(
        self,
        source_ids: Optional[list[str]],
        max_posts: int,
        dry_run: bool,
    ) -> tuple[dict[str, list[PostSummary]], list[ThreadResult]]:
        """Fetch all configured forums concurrently."""
        source_configs = self._load_sources(source_ids)
        if not source_configs:
            logger.warning("no_sources_to_process")
            return {}, []

        jobs = [(source, forum) for source in source_configs for forum in source.active_forums]
        logger.info("forums_scheduled", sources=len(source_configs), forums=len(jobs))

        client = HttpClient(
            requests_per_second=self.settings.requests_per_second,
            timeout=self.settings.timeout,
            user_agent=self.settings.user_agent,
            transport=self.transport,
        )

        async with client:
            loader = PageLoader(
                client,
                detector=self.detector,
                max_concurrency=self.settings.max_concurrency,
                retry_attempts=self.settings.retry_attempts,
                retry_backoff=self.settings.retry_backoff,
            )
            navigator = ForumListingNavigator(loader=loader)
            parser = ForumThreadParser(loader=loader)

            gathered = await asyncio.gather(
                *[
                    self._process_forum(navigator, parser, source, forum, max_posts, dry_run)
                    for source, forum in jobs
                ],
                return_exceptions=True,
            )

        listings: dict[str, list[PostSummary]] = {}
        threads: list[ThreadResult] = []

        for (source, forum), item in zip(jobs, gathered):
            if isinstance(item, Exception):
                logger.error(
                    "forum_processing_failed",
                    source=source.source_id,
                    forum=forum.key,
                    url=forum.url,
                    error=str(item),
                    error_type=type(item).__name__,
                )
                self.stats["errors"] += 1
                continue

            summaries, forum_threads = item
            listings[forum.key] = summaries
            threads.extend(forum_threads)

        return listings, threads

    async def _process_forum(
        self,
        navigator: ForumListingNavigator,
        parser: ForumThreadParser,
        source: SourceConfig,
        forum: ForumConfig,
        max_posts: int,
        dry_run: bool,
    ) -> tuple[list[PostSummary], list[ThreadResult]]:
        """
        Process one forum listing and its threads.

        Returns:
            (summaries, thread results)
        """
        summaries = await navigator.discover(source, forum, limit=max_posts)
        self.stats["forums_processed"] += 1
        self.stats["posts_discovered"] += len(summaries)

        if dry_run or not summaries:
            return summaries, []

        results = await parser.extract_batch(summaries, source, forum)

        for thread in results:
            if thread.ok:
                self.stats["threads_extracted"] += 1
            else:
                self.stats["threads_failed"] += 1
                if thread.status == ExtractionStatus.BLOCKED:
                    self.stats["threads_blocked"] += 1

        logger.info(
            "forum_complete",
            source=source.source_id,
            forum=forum.key,
            posts=len(summaries),
            extracted=sum(1 for t in results if t.ok),
        )
        return summaries, results

    def _load_sources(self, source_ids: Optional[list[str]]) -> list[SourceConfig]:
        """
        Load and filter source configurations.

        Args:
            source_ids: Optional list of source_ids to include

        Returns:
            Filtered list of enabled SourceConfig
        """
        all_sources = [s for s in load_sources(self.config_path) if s.enabled]

        if source_ids:
            return [s for s in all_sources if s.source_id in source_ids]

        return all_sources
