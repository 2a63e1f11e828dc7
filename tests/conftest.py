"""Shared fixtures: forum page samples and helpers."""

import pytest

from forum_notices.core.models import FetchResult


LISTING_HTML = """
<html>
<head><title>Patch Notes - Forum - Path of Exile</title></head>
<body>
<div class="forumTable">
<table id="view_forum_table" class="forumTable viewForumTable">
    <tr>
        <th class="flags first"></th>
        <th class="thread">Thread</th>
        <th class="replies">Replies</th>
    </tr>
    <tr>
        <td class="flags first"><div class="flag sticky"></div></td>
        <td class="thread">
            <div class="thread_title">
                <div class="title"><a href="/forum/view-thread/3741">  0.4.0 Patch Notes </a></div>
            </div>
            <div class="postBy">
                <span class="profile-link"><a href="/account/view-profile/Bex">Bex_GGG</a></span><span class="post_date">, Dec 10, 2025, 8:00:35 PM</span>
            </div>
        </td>
        <td class="replies">120</td>
    </tr>
    <tr>
        <td class="flags first"></td>
        <td class="thread">
            <div class="thread_title">
                <div class="title"><a href="https://www.pathofexile.com/forum/view-thread/3738">0.3.1d Hotfix</a></div>
            </div>
            <div class="postBy">
                <span class="post_date">, Dec 8, 2025, 11:15:02 AM</span>
            </div>
        </td>
        <td class="replies">45</td>
    </tr>
</table>
</div>
</body>
</html>
"""

THREAD_HTML = """
<html>
<body>
<table class="forumTable forumPostListTable">
<tr>
<td class="content-container">
    <div class="forumPost">
        <div class="content">
            <h2>0.4.0 Patch Notes</h2>
            <p>New league launches on <strong>Friday</strong>.</p>
            <div class="post_author_info">Posted by Bex_GGG</div>
            <div class="report_button"><a href="#">Report Forum Post</a></div>
            <script>trackView();</script>
            <style>.content { color: red; }</style>
        </div>
    </div>
</td>
</tr>
</table>
</body>
</html>
"""

BLOCKED_HTML = """
<!DOCTYPE html>
<html>
<head><title>Just a moment...</title></head>
<body>
<div id="cf-browser-verification" class="cf-browser-verification">
    Checking your browser before accessing the site.
</div>
</body>
</html>
"""

UNRELATED_HTML = """
<html>
<body>
<h1>Welcome to Path of Exile</h1>
<p>Maintenance in progress.</p>
</body>
</html>
"""


MIXED_LISTING_HTML = """
<html>
<body>
<table id="view_forum_table" class="forumTable viewForumTable">
    <thead>
    <tr><td class="flags first"></td><td class="thread">Thread</td></tr>
    </thead>
    <tr class="promo-row">
        <td class="flags first"></td>
        <td class="thread">
            <div class="promo"><a href="/forum/view-thread/999">Buy supporter pack</a></div>
        </td>
    </tr>
    <tr>
        <td class="flags first"></td>
        <td class="thread">
            <div class="thread_title">
                <div class="title"><a href="/forum/view-thread/3750">서버 점검 안내</a></div>
            </div>
            <div class="postBy"><span class="post_date">, 어제</span></div>
        </td>
    </tr>
    <tr>
        <td class="flags first"></td>
        <td class="thread">
            <div class="thread_title">
                <div class="title"><a href="/forum/view-thread/3748">0.4.0 패치 노트</a></div>
            </div>
            <div class="postBy"><span class="post_date">, 2025. 12. 10. 오후 8:00:35</span></div>
        </td>
    </tr>
</table>
</body>
</html>
"""

KAKAO_THREAD_HTML = """
<html>
<body>
<div class="forumPostContainer">
<table class="forumPostTable">
    <tr>
        <td class="content-cell">
            <div class="content">
                <p>0.4.0 업데이트가 적용되었습니다.</p>
                <div class="post_author">Kakao_GM</div>
                <div class="posted-by">2025. 12. 10.</div>
            </div>
        </td>
    </tr>
    <tr>
        <td><div class="content">첫 번째 댓글</div></td>
    </tr>
</table>
</div>
</body>
</html>
"""


def make_result(body: str, url: str = "https://www.pathofexile.com/forum/view-forum/2212", status_code: int = 200) -> FetchResult:
    """FetchResult for a literal body."""
    return FetchResult(
        url=url,
        status_code=status_code,
        body_text=body,
        byte_length=len(body.encode("utf-8")),
    )


@pytest.fixture
def listing_html():
    """Publisher forum listing with one header row and two threads."""
    return LISTING_HTML


@pytest.fixture
def thread_html():
    """Publisher thread page with author chrome inside the content."""
    return THREAD_HTML


@pytest.fixture
def blocked_html():
    """Cloudflare browser-verification interstitial."""
    return BLOCKED_HTML


@pytest.fixture
def unrelated_html():
    """Valid page without any forum structure."""
    return UNRELATED_HTML


@pytest.fixture
def fetch_result():
    """Factory building a FetchResult from a body string."""
    return make_result


@pytest.fixture
def mixed_listing_html():
    """Partner listing with a promo row and an undated post."""
    return MIXED_LISTING_HTML


@pytest.fixture
def kakao_thread_html():
    """Partner thread page where replies share the post markup."""
    return KAKAO_THREAD_HTML
