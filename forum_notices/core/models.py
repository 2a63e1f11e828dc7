"""
Data models for the forum notice pipeline.

Fetch-level values (FetchResult, FetchOutcome) are transient and live for
a single request. NoticeIndex is the only structure that gets persisted.
"""

import json
from dataclasses import dataclass, field, asdict
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Iterator, Optional

from bs4 import BeautifulSoup


class OutcomeStatus(str, Enum):
    """Classification of a fetched page."""
    OK = "ok"
    BLOCKED = "blocked"  # Bot-mitigation challenge page
    UNEXPECTED_SHAPE = "unexpected_shape"  # Structural anchor missing
    TRANSPORT_ERROR = "transport_error"  # Network-level failure


class ExtractionStatus(str, Enum):
    """Result status of a single thread extraction."""
    OK = "ok"
    NOT_FOUND = "not_found"  # No content candidate matched
    BLOCKED = "blocked"
    UNEXPECTED_SHAPE = "unexpected_shape"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class SelectorChain:
    """
    Ordered CSS queries tried in priority order until one matches.

    Most specific candidates go first; new markup variants are added by
    appending candidates.
    """
    candidates: tuple[str, ...]

    def __post_init__(self):
        if isinstance(self.candidates, str):
            raise ValueError("SelectorChain expects a sequence of selectors, not a string")
        candidates = tuple(c.strip() for c in self.candidates)
        if not candidates:
            raise ValueError("SelectorChain requires at least one selector")
        if any(not c for c in candidates):
            raise ValueError("SelectorChain selectors must be non-empty")
        object.__setattr__(self, "candidates", candidates)

    @classmethod
    def of(cls, *candidates: str) -> "SelectorChain":
        return cls(tuple(candidates))

    def __iter__(self) -> Iterator[str]:
        return iter(self.candidates)

    def __len__(self) -> int:
        return len(self.candidates)

    def __str__(self) -> str:
        return " | ".join(self.candidates)


@dataclass(frozen=True)
class FetchResult:
    """Raw response of a single GET request."""
    url: str
    status_code: int
    body_text: str
    byte_length: int
    fetched_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class FetchOutcome:
    """
    Classified fetch: exactly one of Ok, Blocked, UnexpectedShape or
    TransportError.

    Use the classmethod constructors instead of building one directly.
    """
    status: OutcomeStatus
    url: str
    result: Optional[FetchResult] = None
    document: Optional[BeautifulSoup] = None
    reason: Optional[str] = None
    signature: Optional[str] = None
    anchors: Optional[SelectorChain] = None
    cause: Optional[BaseException] = None

    @classmethod
    def ok(cls, result: FetchResult, document: BeautifulSoup) -> "FetchOutcome":
        return cls(status=OutcomeStatus.OK, url=result.url, result=result, document=document)

    @classmethod
    def blocked(cls, result: FetchResult, marker: str, signature: Optional[str] = None) -> "FetchOutcome":
        return cls(
            status=OutcomeStatus.BLOCKED,
            url=result.url,
            result=result,
            reason=marker,
            signature=signature,
        )

    @classmethod
    def unexpected_shape(
        cls,
        result: FetchResult,
        anchors: Optional[SelectorChain] = None,
        reason: str = "anchor_not_found",
    ) -> "FetchOutcome":
        return cls(
            status=OutcomeStatus.UNEXPECTED_SHAPE,
            url=result.url,
            result=result,
            anchors=anchors,
            reason=reason,
        )

    @classmethod
    def transport_error(cls, url: str, cause: BaseException) -> "FetchOutcome":
        return cls(
            status=OutcomeStatus.TRANSPORT_ERROR,
            url=url,
            cause=cause,
            reason=str(cause),
        )

    @property
    def is_ok(self) -> bool:
        return self.status == OutcomeStatus.OK and self.document is not None

    def describe(self) -> dict:
        """Context for log events."""
        info = {"url": self.url, "classification": self.status.value}
        if self.result is not None:
            info["status_code"] = self.result.status_code
        if self.reason:
            info["reason"] = self.reason
        if self.signature:
            info["signature"] = self.signature
        if self.anchors is not None:
            info["selectors"] = str(self.anchors)
        return info


@dataclass
class PostSummary:
    """One row of a forum listing page."""
    title: str
    thread_url: str
    posted_at: Optional[datetime] = None

    thread_id: str = ""
    is_sticky: bool = False
    date_text: str = ""
    source_id: str = ""
    category: str = ""

    def to_dict(self) -> dict:
        data = asdict(self)
        data["posted_at"] = self.posted_at.isoformat() if self.posted_at else None
        return data


@dataclass(frozen=True)
class ExtractedContent:
    """Cleaned thread content; both fields come from the same node."""
    html: str
    plain_text: str


@dataclass
class ThreadResult:
    """Per-thread outcome of a batch extraction."""
    summary: PostSummary
    status: ExtractionStatus
    content: Optional[ExtractedContent] = None
    reason: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == ExtractionStatus.OK and self.content is not None


@dataclass(frozen=True)
class NoticeEntry:
    """A published notice. Uniqueness key is `url`."""
    title: str
    url: str
    date: str  # ISO 8601 calendar date, YYYY-MM-DD
    priority: bool = False

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "url": self.url,
            "date": self.date,
            "priority": self.priority,
        }


@dataclass
class NoticeIndex:
    """
    Published notice list.

    Entries are ordered by date, newest first, with unique urls. Build it
    through indexer.build_index to get those guarantees.
    """
    entries: list[NoticeEntry] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[NoticeEntry]:
        return iter(self.entries)

    def to_list(self) -> list[dict]:
        return [entry.to_dict() for entry in self.entries]

    def to_json(self) -> str:
        return json.dumps(self.to_list(), ensure_ascii=False, indent=2)


@dataclass
class SyncResult:
    """Result of mirroring the index into a secondary publish target."""
    target: Optional[Path] = None
    copied: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)  # filename -> error

    @property
    def skipped(self) -> bool:
        """True when no publish target was present."""
        return self.target is None

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass
class PipelineResult:
    """Everything a pipeline run produced."""
    index: NoticeIndex
    listings: dict[str, list[PostSummary]] = field(default_factory=dict)
    threads: list[ThreadResult] = field(default_factory=list)
    sync: Optional[SyncResult] = None
    index_path: Optional[Path] = None
    stats: dict = field(default_factory=dict)

    @property
    def failed_threads(self) -> list[ThreadResult]:
        return [t for t in self.threads if not t.ok]
