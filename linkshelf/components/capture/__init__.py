"""
Capture component - Turn the current page into a new link.
"""

from .component import LinkCreatorPort, build_draft, capture_page, parse_tag_input

__all__ = [
    "LinkCreatorPort",
    "build_draft",
    "capture_page",
    "parse_tag_input",
]
