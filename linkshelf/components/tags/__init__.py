"""
Tags component - Tag vocabulary derivation.
"""

from .component import compute

__all__ = ["compute"]
