"""
Render Sink Port.

The render sink receives a fully projected ViewState and draws it.
It holds no engine state; rendering the same ViewState twice must
produce the same output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol

from linkshelf.domain.edit_state import EditSession
from linkshelf.domain.entities import Link, SortOrder


@dataclass(frozen=True)
class ViewState:
    """Everything a renderer needs for one frame."""

    links: tuple[Link, ...]
    tags: tuple[str, ...]
    active_filters: tuple[str, ...] = ()
    sort_order: SortOrder = "newest"
    page: int = 1
    page_count: int = 1
    total: int = 0
    message: str | None = None
    is_error: bool = False
    upgrade_prompt: bool = False
    needs_credential: bool = False
    stale: bool = False
    edit_sessions: tuple[EditSession, ...] = field(default_factory=tuple)


class RenderSinkPort(Protocol):
    """Draws a ViewState."""

    def render(self, state: ViewState) -> None:
        ...
