"""
View component - Filtered, sorted, paginated projection and edit sessions.
"""

from ._impl import (
    matches_filters,
    matching,
    page_count,
    paginate,
    project,
    sort_links,
    visible_slice,
)
from .component import EDITABLE_FIELDS, ViewProjection
from .models import DEFAULT_PAGE_SIZE, Projection, ViewQuery
from .ports import LinkUpdaterPort

__all__ = [
    # Functional core
    "matches_filters",
    "matching",
    "page_count",
    "paginate",
    "project",
    "sort_links",
    "visible_slice",
    # Shell
    "EDITABLE_FIELDS",
    "ViewProjection",
    # Models
    "DEFAULT_PAGE_SIZE",
    "Projection",
    "ViewQuery",
    # Ports
    "LinkUpdaterPort",
]
