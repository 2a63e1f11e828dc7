"""
Navigator strategies for forum listings.

Navigators handle the listing phase - turning a forum index page into
an ordered list of post summaries.

Strategies:
- ForumListingNavigator: /forum/view-forum/{id} tables
"""

from .base import ForumConfig, ListingSelectors, NavigatorStrategy, SourceConfig, ThreadSelectors
from .forum_listing import ForumListingNavigator

__all__ = [
    "ForumConfig",
    "ListingSelectors",
    "NavigatorStrategy",
    "SourceConfig",
    "ThreadSelectors",
    "ForumListingNavigator",
]
