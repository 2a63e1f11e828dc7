"""
Mirror of the notice index into a secondary publish checkout.

The secondary target (a gh-pages working copy next to this project) is
optional. When none of the candidate directories exists, syncing does
nothing and still succeeds.
"""

import shutil
from pathlib import Path
from typing import Iterable, Optional, Sequence, Union

import structlog

from .core.errors import FilesystemError
from .core.models import NoticeIndex, SyncResult
from .indexer import INDEX_FILENAME, NoticeDocument, write_atomic

logger = structlog.get_logger(__name__)


DEFAULT_PUBLISH_CANDIDATES = [
    "../POE2-unofficial-launcher-gh-pages",
    "../POE2-quick-launch-for-kakao-gh-pages",
]


class PublishSynchronizer:
    """
    Copies list.json and the Markdown notices into <target>/notice/.

    Usage:
        sync = PublishSynchronizer(root=Path.cwd())
        result = sync.sync(index, documents)
    """

    def __init__(
        self,
        candidates: Optional[Sequence[Union[str, Path]]] = None,
        root: Union[str, Path, None] = None,
        subdirectory: str = "notice",
    ):
        """
        Initialize synchronizer.

        Args:
            candidates: Candidate target directories, checked in order
            root: Base for relative candidates (defaults to cwd)
            subdirectory: Folder inside the target that receives the files
        """
        if candidates is None:
            candidates = DEFAULT_PUBLISH_CANDIDATES
        self.root = Path(root) if root is not None else Path.cwd()
        self.candidates = [self.root / Path(c) for c in candidates]
        self.subdirectory = subdirectory

    def find_target(self) -> Optional[Path]:
        """Return the first existing candidate directory."""
        for candidate in self.candidates:
            if candidate.is_dir():
                return candidate
        return None

    def sync(
        self,
        index: NoticeIndex,
        documents: Iterable[Union[NoticeDocument, Path]],
    ) -> SyncResult:
        """
        Mirror index and documents into the publish target.

        Individual copy failures are recorded and logged; files copied
        before a failure stay in place.

        Args:
            index: Notice index to write as list.json
            documents: Source documents to copy verbatim

        Returns:
            SyncResult (target=None when no candidate exists)
        """
        target = self.find_target()
        if target is None:
            logger.info(
                "publish_target_not_found",
                candidates=[str(c) for c in self.candidates],
            )
            return SyncResult()

        notice_dir = target / self.subdirectory
        result = SyncResult(target=notice_dir)

        logger.info("publish_target_detected", target=str(target))

        try:
            notice_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error("publish_dir_create_failed", path=str(notice_dir), error=str(e))
            result.failed[self.subdirectory] = str(e)
            return result

        try:
            write_atomic(notice_dir / INDEX_FILENAME, index.to_json())
            result.copied.append(INDEX_FILENAME)
        except FilesystemError as e:
            logger.error("publish_write_failed", path=str(notice_dir / INDEX_FILENAME), error=str(e))
            result.failed[INDEX_FILENAME] = str(e)

        for document in documents:
            source = document.path if isinstance(document, NoticeDocument) else Path(document)
            try:
                shutil.copyfile(source, notice_dir / source.name)
                result.copied.append(source.name)
            except OSError as e:
                logger.error(
                    "publish_copy_failed",
                    source=str(source),
                    target=str(notice_dir),
                    error=str(e),
                )
                result.failed[source.name] = str(e)

        logger.info(
            "publish_sync_complete",
            target=str(notice_dir),
            copied=len(result.copied),
            failed=len(result.failed),
        )
        return result
