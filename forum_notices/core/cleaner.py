"""
Content cleaning for matched thread nodes.

Works on a private copy of the node, so the parsed document handed in by
the caller is never modified.
"""

import copy
from dataclasses import dataclass
from typing import Iterable, Optional, Union

from bs4 import BeautifulSoup, Tag

import structlog

from .selectors import node_text

logger = structlog.get_logger(__name__)


# Author bylines, report/flag buttons, footers, share widgets, inline code
DEFAULT_UNWANTED_SELECTORS = [
    ".post_author_info",
    ".report_button",
    ".content-footer",
    ".social-buttons",
    "script",
    "style",
    ".post_author",
    ".posted-by",
]


@dataclass
class CleanedNode:
    """Cleaned working copy and the two renderings derived from it."""
    node: Tag
    html: str
    plain_text: str
    removed: int = 0


def clean(
    node: Union[Tag, BeautifulSoup],
    unwanted: Optional[Iterable[str]] = None,
) -> CleanedNode:
    """
    Remove unwanted substructures from a copy of a node.

    Selectors are applied in list order; each matching descendant is
    detached. Selectors with no match are skipped silently.

    Args:
        node: Matched content node (left untouched)
        unwanted: Selectors to strip (defaults to DEFAULT_UNWANTED_SELECTORS)

    Returns:
        CleanedNode with markup and flattened text
    """
    if unwanted is None:
        unwanted = DEFAULT_UNWANTED_SELECTORS

    working = copy.copy(node)
    removed = 0

    for selector in unwanted:
        for element in working.select(selector):
            # Already gone if an earlier match contained it
            if element.decomposed:
                continue
            element.decompose()
            removed += 1

    html = working.decode_contents().strip()
    plain_text = node_text(working)

    logger.debug("content_cleaned", removed=removed, length=len(plain_text))

    return CleanedNode(node=working, html=html, plain_text=plain_text, removed=removed)
