"""
Feed component - RSS rendering of the link collection.
"""

from .component import render_rss

__all__ = ["render_rss"]
