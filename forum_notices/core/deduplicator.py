"""
Notice deduplication keyed on url.

The first entry seen for a url wins; later ones are dropped. Feed entries
in final order (already sorted) so "first" means "first after sorting".
"""

from typing import Iterable, Optional

import structlog

from .models import NoticeEntry

logger = structlog.get_logger(__name__)


class Deduplicator:
    """
    First-wins url deduplicator for notice entries.

    Keeps insertion order of accepted entries.
    """

    def __init__(self):
        """Initialize deduplicator with empty url index."""
        self._entries: dict[str, NoticeEntry] = {}
        self.dropped = 0

    def check(self, entry: NoticeEntry) -> bool:
        """Return True if an entry with the same url was already accepted."""
        return entry.url in self._entries

    def add(self, entry: NoticeEntry) -> None:
        """Accept entry unconditionally."""
        self._entries[entry.url] = entry

    def process(self, entry: NoticeEntry) -> Optional[NoticeEntry]:
        """
        Accept entry unless its url was seen before.

        Args:
            entry: Candidate entry

        Returns:
            The entry if accepted, None if it was a duplicate
        """
        if self.check(entry):
            kept = self._entries[entry.url]
            logger.debug(
                "duplicate_notice_dropped",
                url=entry.url,
                kept_title=kept.title,
                dropped_title=entry.title,
            )
            self.dropped += 1
            return None

        self.add(entry)
        return entry

    def process_all(self, entries: Iterable[NoticeEntry]) -> list[NoticeEntry]:
        """Process entries in order and return the accepted ones."""
        return [e for e in entries if self.process(e) is not None]

    def __len__(self) -> int:
        return len(self._entries)
