"""
Sync component - Data models.

Result types returned by SyncEngine commands. Gateway exceptions are
converted into these at the command boundary and never escape it.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal

from linkshelf.domain.entities import Link

RequestState = Literal["idle", "requesting"]


class CommandStatus(Enum):
    """Outcome of a mutating command."""

    OK = "ok"
    FAILED = "failed"
    LIMIT_REACHED = "limit_reached"  # Plan ceiling, show upgrade prompt
    NEEDS_CREDENTIAL = "needs_credential"
    SKIPPED = "skipped"  # Target vanished while the request was in flight


class ReloadOutcome(Enum):
    """Terminal state of one list request."""

    APPLIED = "applied"
    SUPERSEDED = "superseded"
    FALLBACK = "fallback"


@dataclass(frozen=True)
class CommandResult:
    """Result of a SyncEngine command with one human-readable message."""

    status: CommandStatus
    message: str
    link: Link | None = None
    payload: Any = None

    @property
    def success(self) -> bool:
        return self.status in (CommandStatus.OK, CommandStatus.SKIPPED)

    @classmethod
    def ok(cls, message: str, link: Link | None = None, payload: Any = None) -> CommandResult:
        return cls(status=CommandStatus.OK, message=message, link=link, payload=payload)

    @classmethod
    def failed(cls, message: str) -> CommandResult:
        return cls(status=CommandStatus.FAILED, message=message)


@dataclass(frozen=True)
class ReloadResult:
    outcome: ReloadOutcome
    message: str | None = None

    @property
    def applied(self) -> bool:
        return self.outcome is ReloadOutcome.APPLIED


@dataclass(frozen=True)
class SyncSnapshot:
    """Read-only view of engine state handed to other components."""

    links: tuple[Link, ...]
    vocabulary: tuple[str, ...]
    stale: bool
    needs_credential: bool
    request_state: RequestState
