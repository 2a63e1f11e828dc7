"""
Exception hierarchy for the notice pipeline.

Only conditions that stop a unit of work are exceptions. Blocked pages,
unexpected page shapes and missing content are returned as values
(see models.FetchOutcome and models.ThreadResult).
"""

from pathlib import Path
from typing import Optional, Union


class ForumNoticesError(Exception):
    """Base class for all pipeline errors."""


class TransportError(ForumNoticesError):
    """
    Network-level failure for a single fetch.

    Raised for DNS errors, refused or reset connections and timeouts.
    HTTP status codes never raise this; they are judged by the detector.
    """

    def __init__(self, url: str, cause: Optional[BaseException] = None):
        self.url = url
        self.cause = cause
        reason = f"{type(cause).__name__}: {cause}" if cause else "unknown error"
        super().__init__(f"Transport error for {url}: {reason}")


class FilesystemError(ForumNoticesError):
    """Failure reading or writing a file the pipeline depends on."""

    def __init__(self, message: str, path: Union[str, Path, None] = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class NoticeSourceMissingError(FilesystemError):
    """The primary notice directory does not exist."""

    def __init__(self, path: Union[str, Path]):
        super().__init__(f"Notice directory not found: {path}", path)


class ConfigError(ForumNoticesError):
    """Invalid configuration file content."""
