"""
Console Render Sink Adapter.

Implements RenderSinkPort by writing a plain-text table to a stream.
Used by the CLI; tests pass an io.StringIO.
"""

from __future__ import annotations

import sys
from typing import TextIO

from linkshelf.core.ports.render import ViewState

TITLE_WIDTH = 40


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 3] + "..."


class ConsoleRenderSink:
    """Writes each ViewState as a text table."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout

    def render(self, state: ViewState) -> None:
        write = self._stream.write

        if state.message:
            prefix = "Error: " if state.is_error else ""
            write(f"{prefix}{state.message}\n")
        if state.upgrade_prompt:
            write("You have reached your plan's link limit. Upgrade to save more links.\n")
        if state.needs_credential:
            write("No API key configured. Run `linkshelf login <key>`.\n")
        if state.stale:
            write("(showing cached links; the server could not be reached)\n")

        if state.active_filters:
            write(f"Filters: {', '.join(state.active_filters)}\n")

        if not state.links:
            write("No saved links.\n")
        else:
            editing = {session.link_id: session for session in state.edit_sessions}
            for link in state.links:
                marker = "*" if link.id in editing else " "
                tags = f"  [{', '.join(link.tags)}]" if link.tags else ""
                write(f"{marker}{link.id!s:>6}  {_truncate(link.title, TITLE_WIDTH):<{TITLE_WIDTH}}  {link.url}{tags}\n")

        write(f"Page {state.page}/{state.page_count} ({state.total} links, {state.sort_order} first)\n")
        if state.tags:
            write(f"Tags: {', '.join(state.tags)}\n")
