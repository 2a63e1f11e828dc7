"""
Core layer - stable foundation for the notice pipeline.

Components:
- models: fetch results, outcomes, summaries and notice dataclasses
- http_client: rate-limited page fetcher and caller-side retry
- detector: bot-challenge classification
- selectors: ordered selector-chain resolution
- cleaner: removal of non-content markup
- normalizer: forum date and title normalization
- deduplicator: url-keyed notice deduplication
"""

from .models import (
    ExtractedContent,
    ExtractionStatus,
    FetchOutcome,
    FetchResult,
    NoticeEntry,
    NoticeIndex,
    OutcomeStatus,
    PostSummary,
    SelectorChain,
    SyncResult,
    ThreadResult,
)
from .errors import (
    ConfigError,
    FilesystemError,
    ForumNoticesError,
    NoticeSourceMissingError,
    TransportError,
)
from .selectors import SelectorResult, resolve, resolve_all
from .cleaner import CleanedNode, clean
from .normalizer import parse_post_date, normalize_title
from .deduplicator import Deduplicator

__all__ = [
    "ExtractedContent",
    "ExtractionStatus",
    "FetchOutcome",
    "FetchResult",
    "NoticeEntry",
    "NoticeIndex",
    "OutcomeStatus",
    "PostSummary",
    "SelectorChain",
    "SyncResult",
    "ThreadResult",
    "ConfigError",
    "FilesystemError",
    "ForumNoticesError",
    "NoticeSourceMissingError",
    "TransportError",
    "SelectorResult",
    "resolve",
    "resolve_all",
    "CleanedNode",
    "clean",
    "parse_post_date",
    "normalize_title",
    "Deduplicator",
]
