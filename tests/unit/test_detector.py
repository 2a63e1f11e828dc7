"""Tests for bot-mitigation detection."""

import pytest

from forum_notices.config.loader import load_challenge_signatures
from forum_notices.core.detector import ChallengeDetector, ChallengeSignature
from forum_notices.core.models import OutcomeStatus, SelectorChain


LISTING_ANCHORS = SelectorChain.of("#view_forum_table", ".forumTable")


@pytest.fixture
def detector():
    """Detector with the packaged signatures."""
    return ChallengeDetector()


class TestClassify:
    """Tests for ChallengeDetector.classify."""

    def test_ok(self, detector, fetch_result, listing_html):
        """Test listing page with its table classifies as OK."""
        outcome = detector.classify(fetch_result(listing_html), LISTING_ANCHORS)

        assert outcome.status == OutcomeStatus.OK
        assert outcome.is_ok
        assert outcome.document.select_one("#view_forum_table") is not None

    def test_blocked_with_status_200(self, detector, fetch_result, blocked_html):
        """Test challenge marker wins over a 200 status."""
        outcome = detector.classify(fetch_result(blocked_html, status_code=200), LISTING_ANCHORS)

        assert outcome.status == OutcomeStatus.BLOCKED
        assert outcome.reason == "cf-browser-verification"
        assert outcome.signature == "cloudflare_browser_verification"
        assert outcome.document is None
        assert not outcome.is_ok

    def test_blocked_with_error_status(self, detector, fetch_result):
        """Test block page served with 403."""
        body = '<html><body><div id="cf-error-details">Sorry, you have been blocked</div></body></html>'
        outcome = detector.classify(fetch_result(body, status_code=403), LISTING_ANCHORS)

        assert outcome.status == OutcomeStatus.BLOCKED

    def test_blocked_even_with_anchor_present(self, detector, fetch_result, listing_html):
        """Test marker check runs before structural check."""
        body = listing_html.replace("</body>", '<div class="cf-browser-verification"></div></body>')
        outcome = detector.classify(fetch_result(body), LISTING_ANCHORS)

        assert outcome.status == OutcomeStatus.BLOCKED

    @pytest.mark.parametrize(
        "sentence",
        [
            "You are unable to access the Atlas until Act 4.",
            "Sorry, you have been blocked from trading until the league ends.",
            "Attention Required: rewards for Cloudflare outage compensation.",
        ],
    )
    def test_post_prose_is_not_a_challenge(self, detector, fetch_result, thread_html, sentence):
        """Test ordinary sentences in a thread body don't mark it blocked."""
        body = thread_html.replace("<h2>", f"<p>{sentence}</p><h2>")
        outcome = detector.classify(fetch_result(body), SelectorChain.of(".forumPost"))

        assert outcome.status == OutcomeStatus.OK

    def test_unexpected_shape(self, detector, fetch_result, unrelated_html):
        """Test well-formed page without the anchor is not OK."""
        outcome = detector.classify(fetch_result(unrelated_html), LISTING_ANCHORS)

        assert outcome.status == OutcomeStatus.UNEXPECTED_SHAPE
        assert outcome.anchors == LISTING_ANCHORS
        assert outcome.reason == "anchor_not_found"

    def test_empty_body(self, detector, fetch_result):
        """Test empty body is an unexpected shape."""
        outcome = detector.classify(fetch_result("   "), LISTING_ANCHORS)

        assert outcome.status == OutcomeStatus.UNEXPECTED_SHAPE
        assert outcome.reason == "empty_body"

    def test_markers_case_sensitive(self, fetch_result):
        """Test marker matching respects case."""
        detector = ChallengeDetector([ChallengeSignature("test", ("Cloudflare",))])
        body = '<html><body><table id="view_forum_table"></table>cdn.cloudflare.com</body></html>'
        outcome = detector.classify(fetch_result(body), LISTING_ANCHORS)

        assert outcome.status == OutcomeStatus.OK

    def test_custom_signatures(self, fetch_result):
        """Test new challenge pages are recognised through data only."""
        detector = ChallengeDetector([ChallengeSignature("captcha_wall", ("g-recaptcha",))])
        body = '<html><body><div class="g-recaptcha"></div></body></html>'
        outcome = detector.classify(fetch_result(body), LISTING_ANCHORS)

        assert outcome.status == OutcomeStatus.BLOCKED
        assert outcome.signature == "captcha_wall"

    def test_describe(self, detector, fetch_result, unrelated_html):
        """Test outcome log context."""
        outcome = detector.classify(fetch_result(unrelated_html), LISTING_ANCHORS)
        info = outcome.describe()

        assert info["classification"] == "unexpected_shape"
        assert info["selectors"] == "#view_forum_table | .forumTable"
        assert info["status_code"] == 200


class TestSignatures:
    """Tests for the packaged signature list."""

    def test_packaged_signatures_load(self):
        """Test challenge_markers.yml loads."""
        signatures = load_challenge_signatures()
        markers = [m for s in signatures for m in s.markers]

        assert len(signatures) > 0
        assert "cf-browser-verification" in markers

    def test_signature_match(self):
        """Test first present marker is returned."""
        signature = ChallengeSignature("cf", ("cf-error-details", "Just a moment"))

        assert signature.match("<title>Just a moment</title>") == "Just a moment"
        assert signature.match("<p>hello</p>") is None
