"""
Notice index builder.

Merges hand-authored Markdown notices with forum extraction results into
the list.json structure read by the launcher. The index is rebuilt from
scratch on every run.
"""

import os
import tempfile
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Union

import structlog

from .core.deduplicator import Deduplicator
from .core.errors import FilesystemError, NoticeSourceMissingError
from .core.models import NoticeEntry, NoticeIndex, ThreadResult

logger = structlog.get_logger(__name__)


DEFAULT_NOTICE_BASE_URL = "https://nerdhead-lab.github.io/POE2-unofficial-launcher/notice/"
INDEX_FILENAME = "list.json"
EXCLUDED_FILENAMES = {"README.md"}

# Filename substrings that flag a notice as priority
PRIORITY_MARKERS = ("priority", "notice")


def is_priority_filename(filename: str) -> bool:
    """True if the filename carries a priority marker."""
    return any(marker in filename for marker in PRIORITY_MARKERS)


def extract_heading(content: str) -> str:
    """Title from a leading "# " line, or "" if the first line is not one."""
    first_line = content.lstrip("\ufeff").split("\n", 1)[0].rstrip("\r")
    if first_line.startswith("# "):
        return first_line[2:].strip()
    return ""


@dataclass(frozen=True)
class NoticeDocument:
    """An authored Markdown notice on disk."""
    path: Path
    title: str
    modified: datetime

    @property
    def filename(self) -> str:
        return self.path.name

    @classmethod
    def from_path(cls, path: Union[str, Path]) -> "NoticeDocument":
        """
        Read a notice file.

        Raises:
            FilesystemError: If the file cannot be read
        """
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
            mtime = path.stat().st_mtime
        except OSError as e:
            raise FilesystemError(f"Cannot read notice {path}: {e}", path) from e

        return cls(
            path=path,
            title=extract_heading(content) or path.stem,
            modified=datetime.fromtimestamp(mtime, tz=timezone.utc),
        )

    def to_entry(self, base_url: str = DEFAULT_NOTICE_BASE_URL) -> NoticeEntry:
        return NoticeEntry(
            title=self.title,
            url=base_url.rstrip("/") + "/" + self.filename,
            date=self.modified.date().isoformat(),
            priority=is_priority_filename(self.filename),
        )


def scan_notice_documents(notice_dir: Union[str, Path]) -> list[NoticeDocument]:
    """
    Load every Markdown notice in a directory.

    Args:
        notice_dir: Primary notice directory

    Returns:
        Documents sorted by filename (README.md excluded)

    Raises:
        NoticeSourceMissingError: If the directory does not exist
    """
    notice_dir = Path(notice_dir)
    if not notice_dir.is_dir():
        raise NoticeSourceMissingError(notice_dir)

    documents = []
    for path in sorted(notice_dir.glob("*.md")):
        if path.name in EXCLUDED_FILENAMES or not path.is_file():
            continue
        try:
            documents.append(NoticeDocument.from_path(path))
        except FilesystemError as e:
            logger.error("notice_read_failed", path=str(path), error=str(e))

    logger.info("notices_scanned", directory=str(notice_dir), count=len(documents))
    return documents


def entries_from_threads(results: Iterable[ThreadResult]) -> list[NoticeEntry]:
    """
    Convert successful thread extractions into notice entries.

    Only threads whose content was extracted and whose listing date could
    be parsed are included. Sticky threads are flagged priority.
    """
    entries = []
    for result in results:
        if not result.ok:
            continue

        summary = result.summary
        if summary.posted_at is None:
            logger.info(
                "thread_without_date_skipped",
                url=summary.thread_url,
                date_text=summary.date_text,
            )
            continue

        entries.append(
            NoticeEntry(
                title=summary.title,
                url=summary.thread_url,
                date=summary.posted_at.date().isoformat(),
                priority=summary.is_sticky,
            )
        )
    return entries


def build_index(
    documents: Iterable[NoticeDocument],
    extracted: Iterable[NoticeEntry] = (),
    base_url: str = DEFAULT_NOTICE_BASE_URL,
) -> NoticeIndex:
    """
    Build the notice index.

    Authored notices come first, then extracted entries. The merged list
    is sorted by date descending (stable, so ties keep that order) and
    deduplicated by url, keeping the first occurrence.

    Args:
        documents: Authored notice documents
        extracted: Entries derived from forum threads
        base_url: Published URL prefix for authored notices

    Returns:
        NoticeIndex
    """
    merged = [doc.to_entry(base_url) for doc in documents]
    merged.extend(extracted)

    ordered = sorted(merged, key=lambda entry: entry.date, reverse=True)

    deduplicator = Deduplicator()
    entries = deduplicator.process_all(ordered)

    logger.info(
        "index_built",
        entries=len(entries),
        duplicates=deduplicator.dropped,
    )
    return NoticeIndex(entries=entries)


def write_atomic(path: Union[str, Path], text: str) -> Path:
    """
    Replace a file's contents in one step.

    Writes to a temporary file in the same directory and renames it over
    the target, so readers see either the old or the new file.

    Raises:
        FilesystemError: If the file cannot be written
    """
    path = Path(path)
    tmp_name = None
    try:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as f:
            f.write(text)
        # mkstemp creates 0600 files
        os.chmod(tmp_name, 0o644)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise FilesystemError(f"Cannot write {path}: {e}", path) from e

    return path


def write_index(index: NoticeIndex, path: Union[str, Path]) -> Path:
    """Serialize the index (2-space indent) and write it atomically."""
    path = write_atomic(path, index.to_json())
    logger.info("index_written", path=str(path), entries=len(index))
    return path
