"""
Bot-mitigation detection for fetched pages.

Challenge markers are data: they are loaded from
config/challenge_markers.yml so new challenge pages can be recognised
without touching this module. Some challenge pages come back with HTTP
200, so the status code plays no part in the decision.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from bs4 import BeautifulSoup

import structlog

from .models import FetchOutcome, FetchResult, SelectorChain
from .selectors import resolve

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ChallengeSignature:
    """Named group of case-sensitive marker strings."""
    name: str
    markers: tuple[str, ...]

    def match(self, text: str) -> Optional[str]:
        """Return the first marker present in text, if any."""
        for marker in self.markers:
            if marker in text:
                return marker
        return None


class ChallengeDetector:
    """
    Classifies a FetchResult as Ok, Blocked or UnexpectedShape.

    Usage:
        detector = ChallengeDetector()
        outcome = detector.classify(result, SelectorChain.of("#view_forum_table"))
    """

    def __init__(
        self,
        signatures: Optional[Sequence[ChallengeSignature]] = None,
        parser: str = "lxml",
    ):
        """
        Initialize detector.

        Args:
            signatures: Challenge signatures (defaults to the packaged list)
            parser: BeautifulSoup parser backend
        """
        if signatures is None:
            from ..config.loader import load_challenge_signatures
            signatures = load_challenge_signatures()

        self.signatures = list(signatures)
        self.parser = parser

    def find_marker(self, text: str) -> Optional[tuple[ChallengeSignature, str]]:
        """Return (signature, marker) for the first challenge marker in text."""
        for signature in self.signatures:
            marker = signature.match(text)
            if marker is not None:
                return signature, marker
        return None

    def classify(self, result: FetchResult, anchors: SelectorChain) -> FetchOutcome:
        """
        Classify a fetched page.

        Args:
            result: Raw fetch result
            anchors: Chain locating the structure the page must contain
                     (listing table, post container)

        Returns:
            FetchOutcome with status OK, BLOCKED or UNEXPECTED_SHAPE
        """
        hit = self.find_marker(result.body_text)
        if hit is not None:
            signature, marker = hit
            logger.warning(
                "fetch_blocked",
                url=result.url,
                status_code=result.status_code,
                signature=signature.name,
                marker=marker,
                classification="blocked",
            )
            return FetchOutcome.blocked(result, marker, signature.name)

        if not result.body_text.strip():
            logger.warning(
                "fetch_unexpected_shape",
                url=result.url,
                status_code=result.status_code,
                reason="empty_body",
                selectors=str(anchors),
                classification="unexpected_shape",
            )
            return FetchOutcome.unexpected_shape(result, anchors, reason="empty_body")

        document = BeautifulSoup(result.body_text, self.parser)

        if not resolve(document, anchors).found:
            logger.warning(
                "fetch_unexpected_shape",
                url=result.url,
                status_code=result.status_code,
                reason="anchor_not_found",
                selectors=str(anchors),
                classification="unexpected_shape",
            )
            return FetchOutcome.unexpected_shape(result, anchors)

        return FetchOutcome.ok(result, document)
