"""
Ordered-priority selector resolution.

A SelectorChain lists CSS queries from most site-specific to most
generic. Resolution returns the first candidate that matches; it never
merges matches from several candidates.
"""

from dataclasses import dataclass, field
from typing import Optional, Union
from urllib.parse import urljoin

from bs4 import BeautifulSoup, Tag

import structlog

from .models import SelectorChain

logger = structlog.get_logger(__name__)

Node = Union[BeautifulSoup, Tag]


@dataclass
class SelectorResult:
    """Result of resolving a chain. `found=False` is the NotFound value."""
    element: Optional[Tag] = None
    elements: list[Tag] = field(default_factory=list)
    selector: Optional[str] = None  # Candidate that matched
    found: bool = False

    @property
    def value(self) -> Optional[str]:
        """Visible text of the matched element."""
        if self.element is None:
            return None
        return node_text(self.element)

    def __bool__(self) -> bool:
        return self.found


def as_chain(selectors: Union[SelectorChain, list[str], tuple[str, ...], str]) -> SelectorChain:
    """Coerce a selector or list of selectors into a SelectorChain."""
    if isinstance(selectors, SelectorChain):
        return selectors
    if isinstance(selectors, str):
        return SelectorChain((selectors,))
    return SelectorChain(tuple(selectors))


def resolve(node: Optional[Node], chain: Union[SelectorChain, list[str]]) -> SelectorResult:
    """
    Return the first element matched by the chain.

    Args:
        node: Parsed document or element to search within
        chain: Candidate selectors in priority order

    Returns:
        SelectorResult for the first matching candidate, or NotFound
    """
    if node is None:
        return SelectorResult(found=False)

    for selector in as_chain(chain):
        element = node.select_one(selector)
        if element is not None:
            return SelectorResult(
                element=element,
                elements=[element],
                selector=selector,
                found=True,
            )

    return SelectorResult(found=False)


def resolve_all(node: Optional[Node], chain: Union[SelectorChain, list[str]]) -> SelectorResult:
    """
    Return every element of the first candidate that matches anything.

    Args:
        node: Parsed document or element to search within
        chain: Candidate selectors in priority order

    Returns:
        SelectorResult with all matches of one candidate, or NotFound
    """
    if node is None:
        return SelectorResult(found=False)

    for selector in as_chain(chain):
        elements = node.select(selector)
        if elements:
            return SelectorResult(
                element=elements[0],
                elements=list(elements),
                selector=selector,
                found=True,
            )

    return SelectorResult(found=False)


def node_text(node: Node) -> str:
    """Visible text of a node with whitespace collapsed."""
    return " ".join(node.get_text(" ", strip=True).split())


def link_url(anchor: Tag, base_url: str) -> Optional[str]:
    """
    Absolute URL of an anchor's href.

    Returns:
        Resolved URL or None when the anchor has no usable href
    """
    href = (anchor.get("href") or "").strip()
    if not href or href.startswith(("javascript:", "#")):
        return None
    return urljoin(base_url, href)
