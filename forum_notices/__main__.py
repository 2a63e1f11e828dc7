"""
CLI entry point for forum-notices.

Usage:
    python -m forum_notices
    python -m forum_notices --sources ggg --max-posts 3
    python -m forum_notices --skip-forums
    python -m forum_notices --dry-run --log-level DEBUG
"""

import argparse
import asyncio
import logging
import sys

import structlog

from .core.errors import ConfigError, NoticeSourceMissingError

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ]
    else:
        processors = [
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="forum-notices",
        description="Build the launcher notice index from authored notices and forum posts",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Index notice/*.md plus all configured forums, write notice/list.json
  python -m forum_notices

  # Only the publisher forum, three posts per listing
  python -m forum_notices --sources ggg --max-posts 3

  # Authored notices only (no network)
  python -m forum_notices --skip-forums

  # Fetch listings and print them without writing anything
  python -m forum_notices --dry-run
        """,
    )

    parser.add_argument(
        "--notice-dir",
        type=str,
        help="Directory with authored Markdown notices (default: from config, 'notice')",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to sources.yml config file",
    )

    parser.add_argument(
        "--sources",
        type=str,
        help="Comma-separated list of source_ids to process (default: all)",
    )

    parser.add_argument(
        "--max-posts",
        type=int,
        help="Maximum posts per forum listing (default: from config)",
    )

    parser.add_argument(
        "--concurrency",
        type=int,
        help="Maximum concurrent requests (default: from config)",
    )

    parser.add_argument(
        "--skip-forums",
        action="store_true",
        help="Index authored notices only, without fetching forums",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Fetch listings only - don't fetch threads or write files",
    )

    parser.add_argument(
        "--no-sync",
        action="store_true",
        help="Don't mirror output into the gh-pages checkout",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
        help="Logging level (default: INFO)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON (for CI)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    return parser


def parse_args(argv=None):
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


async def main_async(args):
    """Async main function."""
    from dataclasses import replace

    from .config.loader import load_settings
    from .orchestrator import NoticePipeline

    logger = structlog.get_logger(__name__)

    settings = load_settings(args.config)
    if args.concurrency is not None:
        settings = replace(settings, max_concurrency=args.concurrency)

    sources = None
    if args.sources:
        sources = [s.strip() for s in args.sources.split(",") if s.strip()]

    pipeline = NoticePipeline(
        config_path=args.config,
        settings=settings,
        notice_dir=args.notice_dir,
    )

    result = await pipeline.run(
        sources=sources,
        max_posts=args.max_posts,
        skip_forums=args.skip_forums,
        dry_run=args.dry_run,
        sync=not args.no_sync,
    )

    for thread in result.failed_threads:
        logger.warning(
            "thread_not_extracted",
            url=thread.summary.thread_url,
            classification=thread.status.value,
            reason=thread.reason,
        )

    if result.sync is not None and not result.sync.ok:
        logger.warning("publish_sync_incomplete", failed=sorted(result.sync.failed))

    return result


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Version check
    if args.version:
        from . import __version__
        print(f"forum-notices {__version__}")
        sys.exit(0)

    # Setup logging
    setup_logging(args.log_level, args.json_logs)
    logger = structlog.get_logger(__name__)

    try:
        asyncio.run(main_async(args))
    except NoticeSourceMissingError as e:
        logger.error("notice_dir_missing", path=str(e.path), error=str(e))
        sys.exit(1)
    except ConfigError as e:
        logger.error("invalid_config", error=str(e))
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        logger.exception("fatal_error", error=str(e))
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
