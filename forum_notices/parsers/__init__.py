"""
Parser strategies for thread content extraction.

Parsers handle the extraction phase - converting a thread page into
cleaned post content.

Strategies:
- ForumThreadParser: /forum/view-thread/{id} pages
"""

from .base import ParserStrategy
from .forum_thread import ForumThreadParser

__all__ = [
    "ParserStrategy",
    "ForumThreadParser",
]
