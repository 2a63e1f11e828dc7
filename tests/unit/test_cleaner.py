"""Tests for content cleaning."""

import pytest
from bs4 import BeautifulSoup

from forum_notices.core.cleaner import DEFAULT_UNWANTED_SELECTORS, clean


@pytest.fixture
def soup(thread_html):
    """Parsed thread page."""
    return BeautifulSoup(thread_html, "lxml")


@pytest.fixture
def content(soup):
    """Matched content node."""
    return soup.select_one(".forumPost .content")


class TestClean:
    """Tests for clean()."""

    def test_removes_unwanted(self, content):
        """Test author info, report button, script and style are removed."""
        cleaned = clean(content)

        assert cleaned.node.select_one(".post_author_info") is None
        assert cleaned.node.select_one(".report_button") is None
        assert cleaned.node.find("script") is None
        assert cleaned.node.find("style") is None
        assert cleaned.removed == 4

    def test_keeps_content(self, content):
        """Test real content survives."""
        cleaned = clean(content)

        assert "<strong>Friday</strong>" in cleaned.html
        assert "New league launches on" in cleaned.plain_text
        assert "Posted by" not in cleaned.plain_text
        assert "trackView" not in cleaned.plain_text
        assert "color: red" not in cleaned.html

    def test_source_document_untouched(self, soup, content):
        """Test cleaning works on a copy."""
        clean(content)

        assert soup.select_one(".forumPost .content .post_author_info") is not None
        assert soup.find("script") is not None

    def test_idempotent(self, content):
        """Test cleaning an already cleaned node changes nothing."""
        first = clean(content)
        second = clean(first.node)

        assert second.html == first.html
        assert second.plain_text == first.plain_text
        assert second.removed == 0

    def test_absent_selectors_are_noop(self):
        """Test selectors with no match don't fail."""
        node = BeautifulSoup("<div><p>Only text</p></div>", "lxml").div
        cleaned = clean(node, [".social-buttons", ".content-footer"])

        assert cleaned.html == "<p>Only text</p>"
        assert cleaned.plain_text == "Only text"
        assert cleaned.removed == 0

    def test_nested_unwanted(self):
        """Test a match inside an already removed match is skipped."""
        html = '<div><div class="content-footer"><div class="social-buttons">x</div></div><p>Body</p></div>'
        node = BeautifulSoup(html, "lxml").div
        cleaned = clean(node, [".content-footer", ".social-buttons"])

        assert cleaned.html == "<p>Body</p>"
        assert cleaned.removed == 1

    def test_list_order_applied(self):
        """Test selectors run in list order."""
        html = '<div><div class="social-buttons"><span class="posted-by">by X</span></div><p>Body</p></div>'
        node = BeautifulSoup(html, "lxml").div
        cleaned = clean(node, [".posted-by", ".social-buttons"])

        assert cleaned.html == "<p>Body</p>"
        assert cleaned.removed == 2

    def test_default_list(self):
        """Test default unwanted list covers bylines and widgets."""
        assert ".post_author_info" in DEFAULT_UNWANTED_SELECTORS
        assert ".posted-by" in DEFAULT_UNWANTED_SELECTORS
        assert "script" in DEFAULT_UNWANTED_SELECTORS
