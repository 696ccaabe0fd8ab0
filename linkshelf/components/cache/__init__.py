"""
Cache component - Last-known link collection.
"""

from .component import CACHE_KEY, LocalCache

__all__ = [
    "CACHE_KEY",
    "LocalCache",
]
