"""
Source configuration and base class for navigator strategies.

Navigators implement the listing phase: turning a forum index page into
an ordered list of post summaries.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional

import structlog

from forum_notices.core.cleaner import DEFAULT_UNWANTED_SELECTORS
from forum_notices.core.errors import ConfigError
from forum_notices.core.models import FetchOutcome, PostSummary, SelectorChain
from forum_notices.core.http_client import HttpClient
from forum_notices.core.page_loader import PageLoader

logger = structlog.get_logger(__name__)


def _chain(data: dict, key: str, default: list[str]) -> SelectorChain:
    value = data.get(key, default)
    if isinstance(value, str):
        value = [value]
    try:
        return SelectorChain(tuple(value))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid selector chain '{key}': {e}") from e


@dataclass
class ListingSelectors:
    """Selector chains for a forum index page."""
    table: SelectorChain = field(
        default_factory=lambda: SelectorChain.of("#view_forum_table", "table.forumTable", ".forumTable")
    )
    rows: SelectorChain = field(default_factory=lambda: SelectorChain.of("tr"))
    title: SelectorChain = field(
        default_factory=lambda: SelectorChain.of(".title a", "td.thread .thread_title a")
    )
    date: SelectorChain = field(
        default_factory=lambda: SelectorChain.of(".post_date", ".postBy .date", ".date")
    )
    sticky: SelectorChain = field(
        default_factory=lambda: SelectorChain.of("td.flags.first div.flag.sticky", ".flag.sticky")
    )

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ListingSelectors":
        defaults = cls()
        data = data or {}
        return cls(
            table=_chain(data, "table", list(defaults.table)),
            rows=_chain(data, "rows", list(defaults.rows)),
            title=_chain(data, "title", list(defaults.title)),
            date=_chain(data, "date", list(defaults.date)),
            sticky=_chain(data, "sticky", list(defaults.sticky)),
        )


@dataclass
class ThreadSelectors:
    """Selector chains and cleanup list for a thread page."""
    anchors: SelectorChain = field(
        default_factory=lambda: SelectorChain.of(
            ".forumPost", ".newsPost", ".content-container", ".forumPostContainer", "table.forumPostTable"
        )
    )
    content: SelectorChain = field(
        default_factory=lambda: SelectorChain.of(
            ".forumPost .content",
            ".newsPost .content",
            ".content-container .content",
            ".forumPostContainer .content",
            "tr:first-child .content",
        )
    )
    unwanted: list[str] = field(default_factory=lambda: list(DEFAULT_UNWANTED_SELECTORS))

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ThreadSelectors":
        defaults = cls()
        data = data or {}
        unwanted = data.get("unwanted", defaults.unwanted)
        if not isinstance(unwanted, list):
            raise ConfigError("Thread 'unwanted' must be a list of selectors")
        return cls(
            anchors=_chain(data, "anchors", list(defaults.anchors)),
            content=_chain(data, "content", list(defaults.content)),
            unwanted=[str(s) for s in unwanted],
        )


@dataclass
class ForumConfig:
    """One forum listing of a source (e.g. POE2 patch notes)."""
    key: str
    url: str
    game: str = ""
    category: str = ""
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "ForumConfig":
        for name in ("key", "url"):
            if not data.get(name):
                raise ConfigError(f"Forum missing required field: {name}")
        return cls(
            key=data["key"],
            url=data["url"],
            game=data.get("game", ""),
            category=data.get("category", ""),
            enabled=bool(data.get("enabled", True)),
        )


@dataclass
class SourceConfig:
    """Configuration for one forum site."""

    source_id: str
    source_name: str
    base_url: str

    forums: list[ForumConfig] = field(default_factory=list)
    listing: ListingSelectors = field(default_factory=ListingSelectors)
    thread: ThreadSelectors = field(default_factory=ThreadSelectors)

    # Send the listing URL as Referer when fetching threads
    send_referer: bool = True

    enabled: bool = True
    metadata: dict = field(default_factory=dict)

    @property
    def active_forums(self) -> list[ForumConfig]:
        return [f for f in self.forums if f.enabled]

    @classmethod
    def from_dict(cls, data: dict) -> "SourceConfig":
        """Create from dictionary (e.g., from YAML)."""
        for name in ("source_id", "source_name", "base_url"):
            if not data.get(name):
                raise ConfigError(f"Missing required field: {name}")

        return cls(
            source_id=data["source_id"],
            source_name=data["source_name"],
            base_url=data["base_url"],
            forums=[ForumConfig.from_dict(f) for f in data.get("forums", [])],
            listing=ListingSelectors.from_dict(data.get("listing")),
            thread=ThreadSelectors.from_dict(data.get("thread")),
            send_referer=bool(data.get("send_referer", True)),
            enabled=bool(data.get("enabled", True)),
            metadata=data.get("metadata", {}),
        )


class NavigatorStrategy(ABC):
    """
    Abstract base class for navigator strategies.

    Navigators turn a listing page into PostSummary objects. Parsing is
    kept separate from fetching: `extract_listing` works on an already
    classified FetchOutcome, `discover` does the fetch first.
    """

    def __init__(
        self,
        http_client: Optional[HttpClient] = None,
        loader: Optional[PageLoader] = None,
    ):
        """
        Initialize navigator.

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
        self.logger = logger.bind(navigator=self.__class__.__name__)

    async def __aenter__(self) -> "NavigatorStrategy":
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
    def extract_listing(
        self,
        outcome: FetchOutcome,
        source: SourceConfig,
        forum: Optional[ForumConfig] = None,
        limit: Optional[int] = None,
    ) -> list[PostSummary]:
        """
        Extract post summaries from a classified listing page.

        Args:
            outcome: Classified fetch of the listing page
            source: Source configuration
            forum: Forum the page belongs to
            limit: Optional maximum number of rows

        Returns:
            PostSummary list in page order (empty for non-OK outcomes)
        """
        pass

    @abstractmethod
    async def discover(
        self,
        source: SourceConfig,
        forum: ForumConfig,
        limit: Optional[int] = None,
    ) -> list[PostSummary]:
        """Fetch a forum listing and extract its post summaries."""
        pass
