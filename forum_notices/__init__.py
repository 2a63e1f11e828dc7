"""
Forum Notices - forum extraction and notice index publishing.

Architecture:
- core/: Stable foundation (models, fetcher, detector, selectors, cleaner)
- navigators/: Listing strategies (forum index → post summaries)
- parsers/: Extraction strategies (thread page → cleaned content)
- indexer / publisher: list.json build and gh-pages mirror
- config/: YAML-driven source, pipeline and challenge-marker definitions
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
